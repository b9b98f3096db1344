"""Process-wide planetary ephemeris.

Holds at most one :class:`PlanetaryEphemeris`.  It is loaded explicitly
with :func:`init_planetary_ephemeris` and released with
:func:`unload_planetary_ephemeris`; the query functions here never load
anything on their own.

Typical usage::

    from ephemjax.planetary import init_planetary_ephemeris, ephemeris
    init_planetary_ephemeris("/data/de430.dat")
    moon = ephemeris(58000.0, 10, 3)  # geocentric Moon
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from jax import Array

from ephemjax.config import default_ephemeris_path
from ephemjax.errors import NotInitializedError
from ephemjax.planetary._ephemeris import PlanetaryEphemeris
from ephemjax.planetary._formats import EphemerisFormat

logger = logging.getLogger(__name__)

_ephemeris: PlanetaryEphemeris | None = None


def init_planetary_ephemeris(
    path: str | Path | None = None,
    fmt: str | EphemerisFormat | None = None,
    max_records: int | None = None,
) -> PlanetaryEphemeris:
    """Load the process-wide planetary ephemeris.

    Calling this while an ephemeris is loaded does nothing and returns the
    loaded handle; call :func:`unload_planetary_ephemeris` first to switch
    files.

    Args:
        path: Binary ephemeris file. Defaults to
            :func:`ephemjax.config.default_ephemeris_path`.
        fmt: Format descriptor or name. Inferred from the file name when
            ``None``.
        max_records: Record capacity. Defaults to
            :func:`ephemjax.config.get_max_records`.

    Returns:
        The loaded handle.
    """
    global _ephemeris
    if _ephemeris is not None and _ephemeris.loaded:
        logger.debug("Planetary ephemeris already loaded from %s", _ephemeris.data.path)
        return _ephemeris
    if path is None:
        path = default_ephemeris_path()
    _ephemeris = PlanetaryEphemeris.load(path, fmt=fmt, max_records=max_records)
    return _ephemeris


def unload_planetary_ephemeris() -> None:
    """Release the process-wide planetary ephemeris, if any."""
    global _ephemeris
    if _ephemeris is not None:
        _ephemeris.unload()
    _ephemeris = None


def get_planetary_ephemeris() -> PlanetaryEphemeris:
    """Return the process-wide planetary ephemeris.

    Raises:
        NotInitializedError: If none is loaded.
    """
    if _ephemeris is None or not _ephemeris.loaded:
        raise NotInitializedError(
            "Planetary ephemeris not initialized; call init_planetary_ephemeris() first"
        )
    return _ephemeris


def is_planetary_ephemeris_loaded() -> bool:
    """Whether a process-wide planetary ephemeris is loaded."""
    return _ephemeris is not None and _ephemeris.loaded


def ephemeris(mjd_tt: float, target: int, center: int, km: bool = False) -> Array:
    """State of ``target`` relative to ``center`` from the loaded ephemeris.

    See :meth:`PlanetaryEphemeris.ephemeris`.
    """
    return get_planetary_ephemeris().ephemeris(mjd_tt, target, center, km=km)


def ephemeris_perturbers(
    mjd_tt: float, mask: Sequence[bool], center: int, km: bool = False
) -> Array:
    """States of the masked major bodies from the loaded ephemeris.

    See :meth:`PlanetaryEphemeris.ephemeris_perturbers`.
    """
    return get_planetary_ephemeris().ephemeris_perturbers(mjd_tt, mask, center, km=km)


def nutations(mjd_tt: float, km: bool = False) -> Array:
    """Nutation angles and rates from the loaded ephemeris."""
    return get_planetary_ephemeris().nutations(mjd_tt, km=km)
