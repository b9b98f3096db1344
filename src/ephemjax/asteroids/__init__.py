"""Asteroid perturbers from tabulated heliocentric Keplerian elements.

Loads the BC430-style perturber dataset (indices, element dump, masses)
and produces heliocentric equatorial states by two-body propagation from
the nearest tabulated epoch.

Typical usage::

    from ephemjax.asteroids import init_asteroid_ephemeris, perturber_states
    n = init_asteroid_ephemeris(300, "/data/oorb")
    x = perturber_states(58000.0, n)
"""

from ephemjax.asteroids._api import (
    get_asteroid_table,
    init_asteroid_ephemeris,
    perturber_masses,
    perturber_states,
    unload_asteroid_ephemeris,
)
from ephemjax.asteroids._parsers import (
    EPHEMERIS_FILENAME,
    INDICES_FILENAME,
    MASSES_FILENAME,
    parse_index_file,
    parse_masses_file,
    read_value_column,
)
from ephemjax.asteroids._states import compute_perturber_states, nearest_epoch_index
from ephemjax.asteroids._store import (
    AsteroidTable,
    asteroid_epochs,
    compute_perturber_masses,
    load_asteroid_table,
)

__all__ = [
    "EPHEMERIS_FILENAME",
    "INDICES_FILENAME",
    "MASSES_FILENAME",
    "AsteroidTable",
    "asteroid_epochs",
    "compute_perturber_masses",
    "compute_perturber_states",
    "get_asteroid_table",
    "init_asteroid_ephemeris",
    "load_asteroid_table",
    "nearest_epoch_index",
    "parse_index_file",
    "parse_masses_file",
    "perturber_masses",
    "perturber_states",
    "read_value_column",
    "unload_asteroid_ephemeris",
]
