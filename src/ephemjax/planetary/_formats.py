"""Binary ephemeris format descriptors.

Each supported file variant is described by an :class:`EphemerisFormat`:
the record length (in 4-byte words), the number of float64 coefficients
per data record, and the layout of the gravitational parameters inside
the constants record.  The descriptor is normally chosen explicitly; when
it is not, :func:`format_from_filename` sniffs the file name.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import NamedTuple

from ephemjax.errors import UnsupportedFormatError

WORD_SIZE = 4
"""Bytes per record-length word."""


class GMLayout(enum.Enum):
    """Position of the GM constants inside the constants record.

    Attributes:
        DE40X: DE405/DE406 ordering.
        DE43X: DE430/DE431 ordering.
        INPOP: IMCCE INPOP ordering (Earth/Moon ratio taken from the header).
    """

    DE40X = "40x"
    DE43X = "43x"
    INPOP = "inpop"


class EphemerisFormat(NamedTuple):
    """Layout of a binary ephemeris file.

    Attributes:
        name: Short identifier, e.g. ``"de430"``.
        tag: File name substring that identifies the variant.
        record_words: Record length in 4-byte words.
        ncoeff: Number of float64 coefficients per data record.
        gm_layout: Where the GM constants sit in the constants record.
        denum: Ephemeris number expected in the header, or ``None``.
    """

    name: str
    tag: str
    record_words: int
    ncoeff: int
    gm_layout: GMLayout
    denum: int | None

    @property
    def record_bytes(self) -> int:
        """Record length in bytes."""
        return self.record_words * WORD_SIZE


DE405 = EphemerisFormat("de405", "405", 2036, 1018, GMLayout.DE40X, 405)
DE406 = EphemerisFormat("de406", "406", 1456, 728, GMLayout.DE40X, 406)
DE430 = EphemerisFormat("de430", "430", 2036, 1018, GMLayout.DE43X, 430)
DE431 = EphemerisFormat("de431", "431", 2036, 1018, GMLayout.DE43X, 431)
INPOP10B = EphemerisFormat("inpop10b", "inpop10b", 1876, 938, GMLayout.INPOP, None)

FORMATS: tuple[EphemerisFormat, ...] = (DE405, DE406, DE430, DE431, INPOP10B)


def get_format(name: str | EphemerisFormat) -> EphemerisFormat:
    """Look up a format descriptor by name.

    Args:
        name: Format name (case-insensitive, e.g. ``"DE430"``) or a
            descriptor, which is returned unchanged.

    Returns:
        The matching descriptor.

    Raises:
        UnsupportedFormatError: If no descriptor has that name.
    """
    if isinstance(name, EphemerisFormat):
        return name
    key = name.lower()
    for fmt in FORMATS:
        if fmt.name == key:
            return fmt
    raise UnsupportedFormatError(
        f"Unknown ephemeris format '{name}'. Supported: {[f.name for f in FORMATS]}"
    )


def format_from_filename(path: str | Path) -> EphemerisFormat:
    """Infer the format descriptor from a file name.

    Only the final path component is inspected.  Tags are tried in the
    order of ``FORMATS`` and the first one found wins, so
    ``de405_to_de430.dat`` reads as DE405.

    Args:
        path: Path to the ephemeris file.

    Returns:
        The matching descriptor.

    Raises:
        UnsupportedFormatError: If the name carries no known tag.

    Examples:
        ```python
        from ephemjax.planetary import format_from_filename
        format_from_filename("/data/de405.dat").name  # "de405"
        ```
    """
    filename = Path(path).name.lower()
    for fmt in FORMATS:
        if fmt.tag in filename:
            return fmt
    raise UnsupportedFormatError(
        f"Could not select a record length for file '{path}'; expected one of "
        f"{[f.tag for f in FORMATS]} in the file name"
    )
