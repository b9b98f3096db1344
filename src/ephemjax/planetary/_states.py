"""Epoch handling and per-body state evaluation for a loaded ephemeris.

Epochs are carried as a two-part Julian date ``(jd0, frac)`` with ``jd0``
on a midnight boundary (``.5``) and ``0 <= frac < 1``, which keeps the
record and sub-interval lookup free of large-number cancellation.

:func:`compute_states` fills a 12-row table indexed by the body request
list:

- rows 1-9: planets (row 3 holds the Earth-Moon barycenter as stored),
- row 10: geocentric Moon,
- row 11: lunar librations (when requested),
- row 12: barycentric Sun, always evaluated.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import jax.numpy as jnp
import numpy as np
from jax import Array

from ephemjax.constants import JD_MJD_OFFSET, SECONDS_PER_DAY
from ephemjax.errors import (
    DegenerateIntervalError,
    EpochOutOfRangeError,
    LibrationsUnavailableError,
    NutationsUnavailableError,
)
from ephemjax.planetary._chebyshev import ChebyshevInterpolator
from ephemjax.planetary._reader import LIBRATION_SLOT, NUTATION_SLOT, EphemerisData

N_SLOTS = 12
"""Length of the body request list and of the state table."""

SUN_SLOT = 10
"""0-based pointer slot of the Sun."""

NONE, POSITION, POSITION_VELOCITY = 0, 1, 2
"""Body request levels."""


def split(x: float) -> tuple[float, float]:
    """Split a number into integer and fractional parts.

    For negative input the integer part is the next more negative integer
    so that the fraction is always non-negative.

    Args:
        x: Input number.

    Returns:
        Tuple ``(integer_part, fraction)``.
    """
    whole = float(math.trunc(x))
    frac = x - whole
    if x < 0.0 and frac != 0.0:
        whole -= 1.0
        frac += 1.0
    return whole, frac


def julian_date_pair(mjd_tt: float) -> tuple[float, float]:
    """Convert an MJD (TT) into a midnight-aligned two-part Julian date.

    Args:
        mjd_tt: Modified Julian Date, TT scale.

    Returns:
        Tuple ``(jd0, frac)`` with ``jd0`` ending in ``.5`` and
        ``0 <= frac < 1``.

    Examples:
        ```python
        from ephemjax.planetary import julian_date_pair
        julian_date_pair(51544.5)  # JD 2451545.0 -> (2451544.5, 0.5)
        ```
    """
    jd0, frac = split(float(mjd_tt) + JD_MJD_OFFSET)
    if frac < 0.5:
        return jd0 - 0.5, frac + 0.5
    return jd0 + 0.5, frac - 0.5


def _normalize_pair(jd_pair: tuple[float, float]) -> tuple[float, float]:
    s = jd_pair[0] - 0.5
    a0, a1 = split(s)
    b0, b1 = split(jd_pair[1])
    p0 = a0 + b0 + 0.5
    c0, c1 = split(a1 + b1)
    return p0 + c0, c1


def locate_record(data: EphemerisData, jd_pair: tuple[float, float]) -> tuple[int, float]:
    """Find the data record covering an epoch.

    Args:
        data: Loaded ephemeris.
        jd_pair: Two-part Julian date (TDB/TT).

    Returns:
        Tuple ``(index, t)``: 0-based record index and the fraction of
        the record interval elapsed, ``0 <= t <= 1``.

    Raises:
        EpochOutOfRangeError: If the epoch is zero, outside
            ``[t_start, t_end]`` or beyond the loaded records.
        DegenerateIntervalError: If the record interval is zero.
    """
    header = data.header
    if abs(jd_pair[0]) < np.finfo(np.float64).eps:
        raise EpochOutOfRangeError("Input Julian date is zero")
    if abs(header.interval) < np.finfo(np.float64).eps:
        raise DegenerateIntervalError("Ephemeris record interval is zero")

    jd0, frac = _normalize_pair(jd_pair)
    jd = jd0 + frac
    if jd < header.t_start or jd > header.t_end:
        raise EpochOutOfRangeError(
            f"Requested JD {jd:.6f} not within [{header.t_start}, {header.t_end}]"
        )

    record_nr = int((jd0 - header.t_start) / header.interval) + 1
    if jd0 == header.t_end:
        record_nr -= 1
    t = ((jd0 - ((record_nr - 1) * header.interval + header.t_start)) + frac) / header.interval

    if record_nr < 1 or record_nr > data.n_records:
        raise EpochOutOfRangeError(
            f"Requested JD {jd:.6f} falls in record {record_nr}, "
            f"but only {data.n_records} records are loaded"
        )
    return record_nr - 1, t


def _time_scale(data: EphemerisData, km: bool) -> tuple[float, float]:
    # (record interval in output time unit, length factor)
    if km:
        return data.header.interval * SECONDS_PER_DAY, 1.0
    return data.header.interval, 1.0 / data.header.au


def compute_states(
    data: EphemerisData,
    interpolator: ChebyshevInterpolator,
    jd_pair: tuple[float, float],
    request: Sequence[int],
    km: bool = False,
    barycentric: bool = True,
) -> Array:
    """Interpolate the requested bodies at one epoch.

    Args:
        data: Loaded ephemeris.
        interpolator: Interpolator whose basis cache is reused.
        jd_pair: Two-part Julian date.
        request: 12 request levels (0 none, 1 position, 2 position and
            velocity). Slot 11 requests nutations and is ignored here;
            slot 12 requests librations.
        km: Output in km and km/s instead of AU and AU/day.
        barycentric: Keep planets (rows 1-9) relative to the solar-system
            barycenter; when ``False`` they are made heliocentric.

    Returns:
        State table, shape ``(12, 6)``. Rows that were not requested are
        zero; velocities of position-only requests are zero.

    Raises:
        EpochOutOfRangeError: If the epoch is not covered.
        LibrationsUnavailableError: If librations are requested but not
            on the file.
    """
    if len(request) != N_SLOTS:
        raise ValueError(f"Body request list must have {N_SLOTS} entries, got {len(request)}")

    index, t = locate_record(data, jd_pair)
    interval, aufac = _time_scale(data, km)
    record = data.coefficients[index]
    pointers = data.header.pointers

    rows = [jnp.zeros(6) for _ in range(N_SLOTS)]
    sun = interpolator.interpolate(record, pointers[SUN_SLOT], t, interval) * aufac
    rows[11] = sun

    for i in range(10):
        if request[i] == NONE:
            continue
        state = interpolator.interpolate(record, pointers[i], t, interval) * aufac
        if i <= 8 and not barycentric:
            state = state - sun
        if request[i] == POSITION:
            state = state.at[3:].set(0.0)
        rows[i] = state

    if request[11] > NONE:
        if not data.header.has_librations:
            raise LibrationsUnavailableError("No librations available on the ephemeris file")
        rows[10] = interpolator.interpolate(record, pointers[LIBRATION_SLOT], t, interval)

    return jnp.stack(rows)


def compute_nutations(
    data: EphemerisData,
    interpolator: ChebyshevInterpolator,
    jd_pair: tuple[float, float],
    km: bool = False,
) -> Array:
    """Interpolate the nutation angles and rates at one epoch.

    Args:
        data: Loaded ephemeris.
        interpolator: Interpolator whose basis cache is reused.
        jd_pair: Two-part Julian date.
        km: Rates per second instead of per day.

    Returns:
        ``[dpsi, deps, dpsi_dot, deps_dot]``. Units: *rad*, *rad/day*
        (or *rad/s*).

    Raises:
        NutationsUnavailableError: If the file has no nutations.
        EpochOutOfRangeError: If the epoch is not covered.
    """
    if not data.header.has_nutations:
        raise NutationsUnavailableError("No nutations available on the ephemeris file")
    index, t = locate_record(data, jd_pair)
    interval, _ = _time_scale(data, km)
    state = interpolator.interpolate(
        data.coefficients[index], data.header.pointers[NUTATION_SLOT], t, interval, n_components=2
    )
    return state[jnp.array([0, 1, 3, 4])]
