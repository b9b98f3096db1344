"""Chebyshev polynomial evaluation of ephemeris coefficient blocks.

A body's block inside a data record holds ``na`` consecutive sets of
coefficients (one per sub-interval), each with ``ncm`` components of
``ncf`` coefficients.  Position is the Chebyshev series itself and
velocity its derivative, rescaled from normalized time to the caller's
time unit.

The basis values depend only on the normalized time ``tc``.  Successive
bodies queried at the same epoch usually share it, so
:class:`ChebyshevInterpolator` keeps the last basis and reuses it while
``tc`` is unchanged.  The cache makes an interpolator instance unsafe to
share between threads; give each thread its own.
"""

from __future__ import annotations

import math

import jax
import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.errors import DegenerateIntervalError


def chebyshev_basis(tc: ArrayLike, n: int) -> tuple[Array, Array]:
    """Chebyshev polynomials and their derivatives at ``tc``.

    ``T0 = 1, T1 = tc, Tn = 2 tc Tn-1 - Tn-2`` and
    ``T'0 = 0, T'1 = 1, T'2 = 4 tc, T'n = 2 tc T'n-1 + 2 Tn-1 - T'n-2``.

    Args:
        tc: Normalized time in ``[-1, 1]``.
        n: Number of terms (static).

    Returns:
        Tuple ``(T, dT)`` of arrays with shape ``(n,)``.
    """
    dtype = get_dtype()
    tc = jnp.asarray(tc, dtype=dtype)
    size = max(n, 3)
    twot = tc + tc

    pc = jnp.zeros(size, dtype=dtype).at[0].set(1.0).at[1].set(tc)
    vc = jnp.zeros(size, dtype=dtype).at[1].set(1.0).at[2].set(twot + twot)

    def pos_step(i, pc):
        return pc.at[i].set(twot * pc[i - 1] - pc[i - 2])

    pc = jax.lax.fori_loop(2, size, pos_step, pc)

    def vel_step(i, vc):
        return vc.at[i].set(twot * vc[i - 1] + 2.0 * pc[i - 1] - vc[i - 2])

    vc = jax.lax.fori_loop(3, size, vel_step, vc)
    return pc[:n], vc[:n]


class ChebyshevInterpolator:
    """Evaluates coefficient blocks, caching the basis of the last ``tc``.

    The cache is reused only when ``tc`` is bit-identical to the previous
    call and enough terms were computed; otherwise the basis is rebuilt.

    Examples:
        ```python
        import numpy as np
        from ephemjax.planetary import ChebyshevInterpolator
        record = np.array([1.0, 2.0, 3.0])
        state = ChebyshevInterpolator().interpolate(record, (1, 1, 1), 0.3, 1.0)
        # state -> [1, 2, 3, 0, 0, 0]
        ```
    """

    def __init__(self) -> None:
        self._tc: float | None = None
        self._pc: Array | None = None
        self._vc: Array | None = None

    def reset(self) -> None:
        """Drop the cached basis."""
        self._tc = None
        self._pc = None
        self._vc = None

    def basis(self, tc: float, n: int) -> tuple[Array, Array]:
        """Return the first ``n`` basis values at ``tc``, reusing the cache."""
        if self._tc is None or tc != self._tc or self._pc.shape[0] < n:
            self._pc, self._vc = chebyshev_basis(tc, n)
            self._tc = tc
        return self._pc[:n], self._vc[:n]

    def interpolate(
        self,
        record: np.ndarray,
        pointer: tuple[int, int, int] | np.ndarray,
        t: float,
        interval: float,
        n_components: int = 3,
    ) -> Array:
        """Evaluate one body's coefficients at a fraction of the record.

        Args:
            record: One data record of coefficients, shape ``(ncoeff,)``.
            pointer: ``(offset, ncf, na)``: 1-based offset of the block,
                coefficients per component, sub-intervals per record.
            t: Fraction of the record interval elapsed, in ``[0, 1]``.
            interval: Record length in the output time unit (days or
                seconds); sets the velocity scale.
            n_components: Components per coefficient set (3 for
                positions, 2 for nutations).

        Returns:
            ``[p1, p2, p3, v1, v2, v3]``; components beyond
            ``n_components`` are zero.

        Raises:
            DegenerateIntervalError: If ``interval`` is zero.
        """
        offset, ncf, na = (int(v) for v in pointer)
        if abs(interval) < np.finfo(np.float64).eps:
            raise DegenerateIntervalError("Chebyshev interval length is zero")

        # Sub-interval index and normalized Chebyshev time (-1 <= tc <= 1)
        dt1 = int(t)
        tmp = na * t
        sub = int(tmp - dt1)
        tc = 2.0 * (math.fmod(tmp, 1.0) + dt1) - 1.0

        pc, vc = self.basis(tc, ncf)
        vfac = (na + na) / interval

        start = offset - 1 + sub * n_components * ncf
        block = jnp.asarray(
            record[start : start + n_components * ncf], dtype=get_dtype()
        ).reshape(n_components, ncf)

        pos = block @ pc
        vel = (block @ vc) * vfac
        if n_components < 3:
            pad = jnp.zeros(3 - n_components, dtype=pos.dtype)
            pos = jnp.concatenate([pos, pad])
            vel = jnp.concatenate([vel, pad])
        return jnp.concatenate([pos, vel])
