"""Kepler's equation and Keplerian-to-Cartesian conversion for elliptic orbits.

The solver uses Danby's third-order ("accelerated Newton") correction,
vectorised over bodies and run inside ``jax.lax.while_loop``.  Bodies
that have converged are frozen while the others keep iterating, so a
batch costs as many iterations as its slowest member.  If the iteration
cap is hit with any residual still above tolerance a
:class:`~ephemjax.errors.ConvergenceError` is raised after the loop.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.constants import TWO_PI
from ephemjax.errors import ConvergenceError

KEPLER_TOLERANCE = 1.0e-15
"""Absolute residual tolerance on ``E - e sin E - M``."""

KEPLER_MAX_ITERATIONS = 10_000
"""Iteration cap for :func:`solve_kepler`."""

_STARTER_FACTOR = 0.85


def _kepler_iterate(M: Array, e: Array, tol: float, max_iter: int) -> tuple[Array, Array, Array]:
    # Danby's starter, E0 = M + sign(sin M) * 0.85 e
    sigma = jnp.where(jnp.sin(M) >= 0.0, 1.0, -1.0)
    x0 = M + sigma * _STARTER_FACTOR * e
    f0 = x0 - e * jnp.sin(x0) - M

    def cond(state):
        _, f, i = state
        return jnp.any(jnp.abs(f) >= tol) & (i < max_iter)

    def body(state):
        x, f, i = state
        esinx = e * jnp.sin(x)
        ecosx = e * jnp.cos(x)
        fp = 1.0 - ecosx
        fpp = esinx
        fppp = ecosx
        dx = -f / fp
        dx = -f / (fp + 0.5 * dx * fpp)
        dx = -f / (fp + 0.5 * dx * fpp + dx * dx * fppp / 6.0)
        active = jnp.abs(f) >= tol
        x = jnp.where(active, x + dx, x)
        f = x - e * jnp.sin(x) - M
        return (x, f, i + 1)

    return jax.lax.while_loop(cond, body, (x0, f0, jnp.int32(0)))


def solve_kepler(
    anm_mean: ArrayLike,
    e: ArrayLike,
    tol: float = KEPLER_TOLERANCE,
    max_iter: int = KEPLER_MAX_ITERATIONS,
) -> Array:
    """Solve Kepler's equation ``E - e sin E = M`` for elliptic orbits.

    Args:
        anm_mean: Mean anomaly, scalar or shape ``(n,)``. Units: *rad*
        e: Eccentricity, broadcastable against ``anm_mean``. ``0 <= e < 1``.
        tol: Absolute tolerance on the residual. Default: ``1e-15``.
        max_iter: Iteration cap. Default: ``10000``.

    Returns:
        Eccentric anomaly wrapped into ``[0, 2pi)``. Units: *rad*

    Raises:
        ConvergenceError: If any residual is still ``>= tol`` after
            ``max_iter`` iterations.

    Examples:
        ```python
        from ephemjax.kepler import solve_kepler
        E = solve_kepler(1.0, 0.3)
        ```
    """
    dtype = get_dtype()
    M = jnp.asarray(anm_mean, dtype=dtype)
    e = jnp.asarray(e, dtype=dtype)
    M, e = jnp.broadcast_arrays(M, e)

    x, f, iterations = _kepler_iterate(M, e, tol, max_iter)
    if bool(jnp.any(jnp.abs(f) >= tol)):
        raise ConvergenceError(
            f"Kepler's equation did not converge to {tol:g} within {int(iterations)} "
            f"iterations (max residual {float(jnp.max(jnp.abs(f))):.3e})"
        )
    return jnp.mod(x, TWO_PI)


def state_perifocal(a: ArrayLike, e: ArrayLike, anm_ecc: ArrayLike, gm: float) -> Array:
    """Position and velocity in the orbital plane from the eccentric anomaly.

    The x-axis points to pericenter and z along the orbital angular
    momentum, so the z components are zero.

    Args:
        a: Semi-major axis, shape ``(n,)``.
        e: Eccentricity, shape ``(n,)``.
        anm_ecc: Eccentric anomaly, shape ``(n,)``. Units: *rad*
        gm: Gravitational parameter of the central body, in units
            consistent with ``a`` (e.g. *AU^3/day^2*).

    Returns:
        Perifocal states ``[x, y, 0, vx, vy, 0]``, shape ``(n, 6)``.
    """
    dtype = get_dtype()
    a = jnp.asarray(a, dtype=dtype)
    e = jnp.asarray(e, dtype=dtype)
    E = jnp.asarray(anm_ecc, dtype=dtype)

    cE = jnp.cos(E)
    sE = jnp.sin(E)
    b = a * jnp.sqrt(1.0 - e**2)
    E_dot = jnp.sqrt(gm / a**3) / (1.0 - e * cE)

    zeros = jnp.zeros_like(a)
    return jnp.stack(
        [a * (cE - e), b * sE, zeros, -a * E_dot * sE, b * E_dot * cE, zeros],
        axis=-1,
    )
