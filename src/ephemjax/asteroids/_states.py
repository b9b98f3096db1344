"""Cartesian states of the asteroid perturbers.

The elements tabulated at the nearest epoch at or before the query are
propagated as an unperturbed heliocentric two-body orbit, converted to a
Cartesian state in the ecliptic and rotated to the mean equator with a
fixed obliquity.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array

from ephemjax.asteroids._store import AsteroidTable
from ephemjax.config import get_dtype
from ephemjax.constants import GM_SUN_AU, OBLIQUITY_PERTURBERS_DEG, TWO_PI
from ephemjax.frames import states_ecliptic_to_equatorial, states_orbital_to_ecliptic
from ephemjax.kepler import solve_kepler, state_perifocal


def nearest_epoch_index(epochs: Array, mjd_tt: float) -> int:
    """Index of the last tabulated epoch not after ``mjd_tt``.

    Queries outside the grid are clamped to its first or last epoch.
    """
    i = int(jnp.searchsorted(epochs, mjd_tt, side="right")) - 1
    return min(max(i, 0), int(epochs.shape[0]) - 1)


def compute_perturber_states(
    table: AsteroidTable,
    mjd_tt: float,
    count: int,
    gm_sun: float = GM_SUN_AU,
) -> Array:
    """Heliocentric equatorial states of the first ``count`` asteroids.

    Args:
        table: Loaded perturber dataset.
        mjd_tt: Epoch as Modified Julian Date, TT scale.
        count: Number of asteroids, at most ``table.n_bodies``.
        gm_sun: Sun's gravitational parameter. Units: *AU^3/day^2*

    Returns:
        States ``[x, y, z, vx, vy, vz]``, shape ``(count, 6)``.
        Units: *AU*, *AU/day*

    Raises:
        ValueError: If ``count`` exceeds ``table.n_bodies``.
        ConvergenceError: If Kepler's equation does not converge.

    Examples:
        ```python
        from ephemjax.asteroids import compute_perturber_states, load_asteroid_table
        table = load_asteroid_table("/data/oorb", 10)
        x = compute_perturber_states(table, 58000.0, table.n_bodies)
        ```
    """
    if count < 0 or count > table.n_bodies:
        raise ValueError(f"Requested {count} asteroid perturbers, {table.n_bodies} loaded")
    if count == 0:
        return jnp.zeros((0, 6), dtype=get_dtype())

    idx = nearest_epoch_index(table.epochs, mjd_tt)
    dt = mjd_tt - table.epochs[idx]
    el = table.elements[:count, idx, :]
    a, e, incl, node, argp, M = (el[:, k] for k in range(6))

    n = jnp.sqrt(gm_sun / a**3)
    M = jnp.mod(M + n * dt, TWO_PI)
    E = solve_kepler(M, e)

    x = state_perifocal(a, e, E, gm_sun)
    x = states_orbital_to_ecliptic(x, incl, node, argp)
    return states_ecliptic_to_equatorial(x, OBLIQUITY_PERTURBERS_DEG)
