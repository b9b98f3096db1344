"""Parsers for the asteroid perturber text files.

Three files make up the dataset, each with one entry per line:

- ``asteroid_indices.txt``: one designation per catalog row; a leading
  ``#`` excludes the row.
- ``asteroid_ephemeris.txt``: the element dump, ``6 * catalog_size``
  values per tabulated epoch.
- ``asteroid_masses.txt``: one mass per catalog row. Units: *M_sun*

Numeric values may use Fortran ``D`` exponents (``1.0D-10``).
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import polars as pl

from ephemjax.errors import EphemerisIOError, FormatError

INDICES_FILENAME = "asteroid_indices.txt"
EPHEMERIS_FILENAME = "asteroid_ephemeris.txt"
MASSES_FILENAME = "asteroid_masses.txt"

# Unit separator; never present in the data, so each line is one field
_LINE_SEPARATOR = "\x1f"


def parse_index_file(filepath: str | Path, count: int) -> tuple[list[str], np.ndarray]:
    """Read the first ``count`` entries of an asteroid index file.

    Blank lines are skipped.

    Args:
        filepath: Path to ``asteroid_indices.txt``.
        count: Number of catalog rows to read.

    Returns:
        Tuple ``(designations, mask)``: the first token of each entry
        (``#`` prefix kept) and a boolean array that is ``False`` for
        commented-out entries.

    Raises:
        EphemerisIOError: If the file cannot be opened.
        FormatError: If the file has fewer than ``count`` entries.
    """
    designations: list[str] = []
    try:
        with open(filepath) as f:
            for line in f:
                if len(designations) == count:
                    break
                token = line.strip()
                if not token:
                    continue
                designations.append(token.split()[0])
    except OSError as err:
        raise EphemerisIOError(f"Could not open file '{filepath}': {err}") from err

    if len(designations) < count:
        raise FormatError(
            f"'{filepath}' lists {len(designations)} asteroids, {count} requested"
        )
    mask = np.array([not d.startswith("#") for d in designations], dtype=bool)
    return designations, mask


def read_value_column(filepath: str | Path) -> np.ndarray:
    """Read a one-value-per-line numeric text file.

    Only the first whitespace-separated token of each line is used; blank
    lines are skipped.

    Args:
        filepath: Path to the text file.

    Returns:
        1-D float64 array.

    Raises:
        EphemerisIOError: If the file cannot be opened.
        FormatError: If a value cannot be parsed as a number.
    """
    try:
        df = pl.read_csv(
            filepath,
            has_header=False,
            separator=_LINE_SEPARATOR,
            quote_char=None,
            schema={"raw": pl.String},
        )
    except pl.exceptions.NoDataError:
        return np.empty(0, dtype=np.float64)
    except OSError as err:
        raise EphemerisIOError(f"Could not open file '{filepath}': {err}") from err
    except pl.exceptions.PolarsError as err:
        raise FormatError(f"Could not read '{filepath}': {err}") from err

    try:
        values = (
            df.lazy()
            .select(pl.col("raw").str.strip_chars().str.extract(r"^(\S+)", 1).alias("token"))
            .filter(pl.col("token").is_not_null())
            .select(
                pl.col("token")
                .str.replace_all(r"[dD]", "e")
                .cast(pl.Float64, strict=True)
                .alias("value")
            )
            .collect()
        )
    except pl.exceptions.PolarsError as err:
        raise FormatError(f"Non-numeric value in '{filepath}': {err}") from err

    return values["value"].to_numpy().astype(np.float64)


def parse_masses_file(filepath: str | Path, mask: np.ndarray) -> np.ndarray:
    """Read the masses of the included catalog rows.

    Line ``k`` of the file holds the mass of catalog row ``k``, blank lines
    included. Lines of excluded rows are consumed without being parsed.

    Args:
        filepath: Path to ``asteroid_masses.txt``.
        mask: Inclusion flags from :func:`parse_index_file`, one per
            catalog row.

    Returns:
        Masses of the rows where ``mask`` is set, shape ``(mask.sum(),)``.
        Units: *M_sun*

    Raises:
        EphemerisIOError: If the file cannot be opened.
        FormatError: If the file has fewer lines than ``mask`` has rows,
            or an included row does not hold a number.
    """
    count = len(mask)
    tokens: list[str] = []
    n_lines = 0
    try:
        with open(filepath) as f:
            for line, keep in zip(f, mask):
                n_lines += 1
                if not keep:
                    continue
                fields = line.split()
                if not fields:
                    raise FormatError(f"'{filepath}' line {n_lines}: missing mass")
                tokens.append(fields[0])
    except OSError as err:
        raise EphemerisIOError(f"Could not open file '{filepath}': {err}") from err

    if n_lines < count:
        raise FormatError(f"'{filepath}' holds {n_lines} masses, {count} requested")

    try:
        masses = (
            pl.Series("token", tokens, dtype=pl.String)
            .str.replace_all(r"[dD]", "e")
            .cast(pl.Float64, strict=True)
        )
    except pl.exceptions.PolarsError as err:
        raise FormatError(f"Non-numeric mass in '{filepath}': {err}") from err
    return masses.to_numpy().astype(np.float64)
