"""Asteroid perturber dataset: tabulated heliocentric elements and masses.

The element dump covers 3653 epochs spaced 40 days apart starting at
JD 2378495.0 (TT).  For epoch ``j``, catalog row ``i`` and element ``k``
(all 0-based) the value sits at position
``j * 6 * catalog_size + 6 * i + k``.  The dump lists each element set as
``[a, e, i, argperi, node, M]``; the table stores
``[a, e, i, node, argperi, M]``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
from jax import Array

from ephemjax.asteroids._parsers import (
    EPHEMERIS_FILENAME,
    INDICES_FILENAME,
    MASSES_FILENAME,
    parse_index_file,
    parse_masses_file,
    read_value_column,
)
from ephemjax.config import get_data_dir
from ephemjax.constants import (
    ASTEROID_ELEMENT_COUNT,
    ASTEROID_EPOCH_COUNT,
    ASTEROID_EPOCH_STEP,
    ASTEROID_MJD0,
)
from ephemjax.errors import FormatError

logger = logging.getLogger(__name__)

# Dump column -> storage column (argperi and node swap places)
_SOURCE_TO_STORAGE = np.array([0, 1, 2, 4, 3, 5])


class AsteroidTable(NamedTuple):
    """Loaded asteroid perturber dataset.

    Only the catalog rows that survive the index mask are held; their
    order follows the index file.

    Attributes:
        designations: Designations of the included asteroids.
        elements: Heliocentric ecliptic elements, shape
            ``(n_bodies, 3653, 6)``, order ``[a, e, i, node, argperi, M]``.
            Units: *AU*, *rad*
        masses: Masses, shape ``(n_bodies,)``. Units: *M_sun*
        epochs: Tabulated epochs, shape ``(3653,)``. Units: *MJD TT*
        mask: Inclusion flag of each catalog row read, shape
            ``(requested_count,)``.
        catalog_size: Number of asteroids in the element dump.
    """

    designations: tuple[str, ...]
    elements: Array
    masses: Array
    epochs: Array
    mask: np.ndarray
    catalog_size: int

    @property
    def n_bodies(self) -> int:
        """Number of included asteroids."""
        return len(self.designations)


def asteroid_epochs() -> Array:
    """Epoch grid of the perturber dataset, MJD (TT), shape ``(3653,)``."""
    return ASTEROID_MJD0 + ASTEROID_EPOCH_STEP * jnp.arange(ASTEROID_EPOCH_COUNT, dtype=jnp.float64)


def _unpack_dump(flat: np.ndarray, requested_count: int, mask: np.ndarray) -> tuple[np.ndarray, int]:
    block = ASTEROID_ELEMENT_COUNT * ASTEROID_EPOCH_COUNT
    if flat.shape[0] == 0 or flat.shape[0] % block != 0:
        raise FormatError(
            f"Asteroid element dump holds {flat.shape[0]} values, "
            f"expected a non-zero multiple of {block}"
        )
    catalog_size = flat.shape[0] // block
    if catalog_size < requested_count:
        raise FormatError(
            f"Asteroid element dump covers {catalog_size} asteroids, {requested_count} requested"
        )

    # (epoch, catalog row, element) -> (included row, epoch, element)
    cube = flat.reshape(ASTEROID_EPOCH_COUNT, catalog_size, ASTEROID_ELEMENT_COUNT)
    cube = cube[:, :requested_count, :][:, mask, :]
    elements = np.transpose(cube, (1, 0, 2))[:, :, _SOURCE_TO_STORAGE]
    return np.ascontiguousarray(elements), catalog_size


def load_asteroid_table(data_dir: str | Path | None, requested_count: int) -> AsteroidTable:
    """Load the first ``requested_count`` catalog rows of the perturber dataset.

    Args:
        data_dir: Directory holding the three text files. Defaults to
            :func:`ephemjax.config.get_data_dir`.
        requested_count: Number of catalog rows to read, before masking.

    Returns:
        The loaded table. ``n_bodies`` is the count left after masking.

    Raises:
        ValueError: If ``requested_count`` is negative.
        EphemerisIOError: If a file cannot be opened.
        FormatError: If a file is malformed or too short.

    Examples:
        ```python
        from ephemjax.asteroids import load_asteroid_table
        table = load_asteroid_table("/data/oorb", 300)
        table.n_bodies
        ```
    """
    if requested_count < 0:
        raise ValueError(f"Asteroid count must be non-negative, got {requested_count}")
    data_dir = get_data_dir() if data_dir is None else Path(data_dir)

    designations, mask = parse_index_file(data_dir / INDICES_FILENAME, requested_count)
    flat = read_value_column(data_dir / EPHEMERIS_FILENAME)
    elements, catalog_size = _unpack_dump(flat, requested_count, mask)
    masses = parse_masses_file(data_dir / MASSES_FILENAME, mask)

    included = tuple(d for d, keep in zip(designations, mask) if keep)
    logger.info(
        "Loaded %d of %d requested asteroid perturbers from %s (catalog size %d)",
        len(included),
        requested_count,
        data_dir,
        catalog_size,
    )
    return AsteroidTable(
        designations=included,
        elements=jnp.asarray(elements, dtype=jnp.float64),
        masses=jnp.asarray(masses, dtype=jnp.float64),
        epochs=asteroid_epochs(),
        mask=mask,
        catalog_size=catalog_size,
    )


def compute_perturber_masses(table: AsteroidTable, count: int) -> Array:
    """Masses of the first ``count`` included asteroids.

    Raises:
        ValueError: If ``count`` exceeds ``table.n_bodies``.
    """
    if count < 0 or count > table.n_bodies:
        raise ValueError(f"Requested {count} asteroid masses, {table.n_bodies} loaded")
    return table.masses[:count]
