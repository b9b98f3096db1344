"""Module-wide numeric precision and data-location configuration.

Provides ``set_dtype`` and ``get_dtype`` to control the float dtype used
for ephemeris arithmetic.  The default is ``jnp.float64``: Chebyshev
ephemerides carry more significant digits than ``float32`` can hold, so
64-bit mode (``jax_enable_x64``) is switched on when this module is
imported.  Lower precisions remain selectable for throughput experiments.

Data files are located through ``get_data_dir``, which honours the
``EPHEMJAX_DATA`` environment variable and falls back to the current
working directory.  The record-capacity ceiling used when loading
binary ephemeris files is adjustable through ``set_max_records``.
"""

from __future__ import annotations

import os
from pathlib import Path

import jax
import jax.numpy as jnp

_VALID_DTYPES = (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64)

_ENV_VAR = "EPHEMJAX_DATA"

DEFAULT_EPHEMERIS_FILENAME = "de430.dat"
"""File name used by :func:`default_ephemeris_path` inside the data directory."""

DEFAULT_MAX_RECORDS = 250_000
"""Default record capacity. Large enough for every DE40x and DE43x file."""

jax.config.update("jax_enable_x64", True)

_dtype = jnp.float64
_max_records = DEFAULT_MAX_RECORDS


def set_dtype(dtype) -> None:
    """Set the module-wide float dtype for ephemjax.

    If *dtype* is ``jnp.float64``, JAX's 64-bit mode is (re-)enabled via
    ``jax.config.update("jax_enable_x64", True)``.

    Args:
        dtype: One of ``jnp.float16``, ``jnp.bfloat16``, ``jnp.float32``,
            or ``jnp.float64``.

    Raises:
        ValueError: If *dtype* is not a supported float type.
    """
    global _dtype
    if dtype not in _VALID_DTYPES:
        raise ValueError(
            f"Unsupported dtype {dtype}. Must be one of: "
            f"jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64"
        )
    if dtype == jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the current module-wide float dtype.

    Returns:
        The active float dtype (default ``jnp.float64``).
    """
    return _dtype


def set_max_records(n: int) -> None:
    """Set the maximum number of data records a binary ephemeris may hold.

    Args:
        n: Positive record capacity.

    Raises:
        ValueError: If *n* is not positive.
    """
    global _max_records
    if n <= 0:
        raise ValueError(f"Record capacity must be positive, got {n}")
    _max_records = int(n)


def get_max_records() -> int:
    """Return the configured record capacity."""
    return _max_records


def get_data_dir() -> Path:
    """Return the directory holding ephemeris data files.

    The directory is ``$EPHEMJAX_DATA`` if set (and non-empty), otherwise
    the current working directory.  Unlike a cache directory it is never
    created.

    Returns:
        Path to the data directory.
    """
    env = os.environ.get(_ENV_VAR, "").strip()
    if env:
        return Path(env)
    return Path(".")


def default_ephemeris_path() -> Path:
    """Return ``<data_dir>/de430.dat``."""
    return get_data_dir() / DEFAULT_EPHEMERIS_FILENAME
