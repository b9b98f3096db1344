"""Process-wide asteroid perturber dataset.

Holds at most one :class:`AsteroidTable`, loaded with
:func:`init_asteroid_ephemeris` and released with
:func:`unload_asteroid_ephemeris`.  When a planetary ephemeris is also
loaded, its Sun GM is used to propagate the perturbers.
"""

from __future__ import annotations

import logging
from pathlib import Path

from jax import Array

from ephemjax.asteroids import _states, _store
from ephemjax.asteroids._store import AsteroidTable, load_asteroid_table
from ephemjax.bodies import Body
from ephemjax.constants import GM_SUN_AU
from ephemjax.errors import NotInitializedError
from ephemjax.planetary import get_planetary_ephemeris, is_planetary_ephemeris_loaded

logger = logging.getLogger(__name__)

_table: AsteroidTable | None = None


def init_asteroid_ephemeris(count: int, data_dir: str | Path | None = None) -> int:
    """Load the process-wide asteroid perturber dataset.

    Calling this while a dataset is loaded does nothing; call
    :func:`unload_asteroid_ephemeris` first to reload with another count.

    Args:
        count: Number of catalog rows to read, before masking.
        data_dir: Directory holding the text files. Defaults to
            :func:`ephemjax.config.get_data_dir`.

    Returns:
        Number of asteroids included after masking.
    """
    global _table
    if _table is not None:
        logger.debug("Asteroid perturbers already loaded (%d bodies)", _table.n_bodies)
        return _table.n_bodies
    _table = load_asteroid_table(data_dir, count)
    return _table.n_bodies


def unload_asteroid_ephemeris() -> None:
    """Release the process-wide asteroid perturber dataset, if any."""
    global _table
    if _table is not None:
        logger.debug("Releasing %d asteroid perturbers", _table.n_bodies)
    _table = None


def get_asteroid_table() -> AsteroidTable:
    """Return the process-wide asteroid perturber dataset.

    Raises:
        NotInitializedError: If none is loaded.
    """
    if _table is None:
        raise NotInitializedError(
            "Asteroid perturbers not initialized; call init_asteroid_ephemeris() first"
        )
    return _table


def _sun_gm() -> float:
    if is_planetary_ephemeris_loaded():
        return float(get_planetary_ephemeris().gm[Body.SUN - 1])
    return GM_SUN_AU


def perturber_states(mjd_tt: float, count: int) -> Array:
    """States of the first ``count`` loaded asteroids.

    See :func:`ephemjax.asteroids.compute_perturber_states`.
    """
    return _states.compute_perturber_states(get_asteroid_table(), mjd_tt, count, gm_sun=_sun_gm())


def perturber_masses(count: int) -> Array:
    """Masses of the first ``count`` loaded asteroids. Units: *M_sun*"""
    return _store.compute_perturber_masses(get_asteroid_table(), count)
