"""Reader for JPL/IMCCE fixed-record binary ephemeris files.

A file is a sequence of equal-length records:

- record 1: header (titles, constant names, time span, constant count,
  AU, Earth/Moon mass ratio, the 13-slot coefficient pointer table and
  the ephemeris number),
- record 2: values of the named constants,
- records 3..: Chebyshev coefficient blocks, one per time interval.

The data records are loaded in one pass into a ``(n_records, ncoeff)``
float64 buffer.  A trailing partial record marks the end of the data.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
from jax import Array

from ephemjax.config import get_max_records
from ephemjax.errors import (
    CapacityExceededError,
    EphemerisIOError,
    HeaderParseError,
)
from ephemjax.planetary._formats import (
    EphemerisFormat,
    GMLayout,
    format_from_filename,
    get_format,
)

logger = logging.getLogger(__name__)

N_POINTERS = 13
"""Pointer slots: 9 planets, Moon, Sun, nutations, librations."""

NUTATION_SLOT = 11
"""0-based pointer slot of the nutations (2 components)."""

LIBRATION_SLOT = 12
"""0-based pointer slot of the lunar librations."""

_N_CONSTANTS = 400


def _header_dtype(byteorder: str) -> np.dtype:
    return np.dtype(
        [
            ("ttl", "S84", (3,)),
            ("cnam", "S6", (_N_CONSTANTS,)),
            ("ss", f"{byteorder}f8", (3,)),
            ("ncon", f"{byteorder}i4"),
            ("au", f"{byteorder}f8"),
            ("emrat", f"{byteorder}f8"),
            ("ipt", f"{byteorder}i4", (12, 3)),
            ("numde", f"{byteorder}i4"),
            ("lpt", f"{byteorder}i4", (3,)),
        ]
    )


class EphemerisHeader(NamedTuple):
    """Decoded header and constants of a binary ephemeris file.

    Attributes:
        titles: The three title lines.
        constant_names: Names of the constants in record 2.
        constant_values: Values of the constants in record 2, shape ``(400,)``.
        t_start: First Julian date covered. Units: *days*
        t_end: Last Julian date covered. Units: *days*
        interval: Length of one data record. Units: *days*
        n_constants: Number of constants declared in the header.
        au: Astronomical unit. Units: *km*
        emrat: Earth/Moon mass ratio.
        pointers: Coefficient pointers, shape ``(13, 3)``: 1-based
            offset, coefficients per component, sub-intervals per record.
        denum: Ephemeris number.
        fmt: Format descriptor of the file.
        byteorder: ``"<"`` or ``">"``.
        gm: Gravitational parameters of bodies 1-17, shape ``(17,)``.
            Units: *AU^3/day^2*
        masses: ``gm / gm[Sun]``, shape ``(17,)``. Units: *M_sun*
    """

    titles: tuple[str, ...]
    constant_names: tuple[str, ...]
    constant_values: np.ndarray
    t_start: float
    t_end: float
    interval: float
    n_constants: int
    au: float
    emrat: float
    pointers: np.ndarray
    denum: int
    fmt: EphemerisFormat
    byteorder: str
    gm: Array
    masses: Array

    @property
    def has_nutations(self) -> bool:
        """Whether the file carries nutation coefficients."""
        return int(self.pointers[NUTATION_SLOT, 1]) > 0

    @property
    def has_librations(self) -> bool:
        """Whether the file carries lunar libration coefficients."""
        return int(self.pointers[LIBRATION_SLOT, 1]) > 0


class EphemerisData(NamedTuple):
    """Header plus the in-memory coefficient buffer.

    Attributes:
        header: Decoded header.
        coefficients: Coefficient buffer, shape ``(n_records, ncoeff)``.
        path: File the data was loaded from.
    """

    header: EphemerisHeader
    coefficients: np.ndarray
    path: Path

    @property
    def n_records(self) -> int:
        """Number of data records held in memory."""
        return int(self.coefficients.shape[0])


def derive_gm(cval: np.ndarray, emrat: float, layout: GMLayout) -> tuple[Array, float]:
    """Extract the 17-slot GM table from the constants record.

    The file stores the Earth-Moon system GM in the Earth slot; the Moon's
    share is removed with the Earth/Moon mass ratio, and the Moon's GM is
    derived from the Earth's.

    Args:
        cval: Constant values, shape ``(400,)``.
        emrat: Earth/Moon mass ratio from the header.
        layout: GM layout of the file.

    Returns:
        Tuple ``(gm, emrat)`` with ``gm`` in *AU^3/day^2*, shape ``(17,)``,
        and the Earth/Moon ratio actually used (read from the constants
        for the DE layouts).

    Raises:
        HeaderParseError: If the Earth/Moon mass ratio is zero.
    """
    # 0-based positions of (first planet, emrat, sun, emb); None -> header emrat
    if layout is GMLayout.DE40X:
        planets, i_emrat, i_sun, i_emb = 8, 7, 17, 10
    elif layout is GMLayout.DE43X:
        planets, i_emrat, i_sun, i_emb = 11, 10, 20, 13
    else:
        planets, i_emrat, i_sun, i_emb = 6, None, 15, 8

    if i_emrat is not None:
        emrat = float(cval[i_emrat])
    if emrat == 0.0:
        raise HeaderParseError("Earth/Moon mass ratio is zero")

    gm = np.zeros(17, dtype=np.float64)
    gm[0:9] = cval[planets : planets + 9]
    gm[2] = gm[2] / (1.0 + 1.0 / emrat)
    gm[9] = gm[2] / emrat
    gm[10] = cval[i_sun]
    gm[11] = np.sum(gm[0:11])
    gm[12] = cval[i_emb]
    return jnp.asarray(gm, dtype=jnp.float64), emrat


def _decode_header(raw1: bytes) -> tuple[np.void, str]:
    for byteorder in ("<", ">"):
        rec = np.frombuffer(raw1, dtype=_header_dtype(byteorder), count=1)[0]
        ncon = int(rec["ncon"])
        interval = float(rec["ss"][2])
        if 0 < ncon <= _N_CONSTANTS * 4 and np.isfinite(interval) and 0.0 < abs(interval) < 1.0e5:
            return rec, byteorder
    raise HeaderParseError("Header record is not a recognisable JPL ephemeris header")


def _check_pointers(pointers: np.ndarray, ncoeff: int) -> None:
    for slot in range(N_POINTERS):
        offset, ncf, na = (int(v) for v in pointers[slot])
        if ncf <= 0:
            continue
        ncm = 2 if slot == NUTATION_SLOT else 3
        if offset < 1 or na < 1 or offset - 1 + ncf * ncm * na > ncoeff:
            raise HeaderParseError(
                f"Pointer slot {slot + 1} (offset={offset}, ncf={ncf}, na={na}) "
                f"does not fit in a record of {ncoeff} coefficients"
            )


def read_header(path: str | Path, fmt: str | EphemerisFormat | None = None) -> EphemerisHeader:
    """Read and decode the header and constants records.

    Args:
        path: Path to the binary ephemeris file.
        fmt: Format descriptor or name. Inferred from the file name when
            ``None``.

    Returns:
        The decoded header.

    Raises:
        UnsupportedFormatError: If the format cannot be determined.
        EphemerisIOError: If the file cannot be opened.
        HeaderParseError: If records 1-2 are missing or cannot be decoded.
    """
    path = Path(path)
    fmt = format_from_filename(path) if fmt is None else get_format(fmt)
    rb = fmt.record_bytes

    try:
        with open(path, "rb") as f:
            raw1 = f.read(rb)
            raw2 = f.read(rb)
    except OSError as err:
        raise EphemerisIOError(f"Could not open ephemeris file '{path}': {err}") from err

    if len(raw1) < rb:
        raise HeaderParseError(f"Could not read record #1 of '{path}'")
    if len(raw2) < rb:
        raise HeaderParseError(f"Could not read record #2 of '{path}'")

    rec, byteorder = _decode_header(raw1)
    cval = np.frombuffer(raw2, dtype=f"{byteorder}f8", count=_N_CONSTANTS).astype(np.float64)

    pointers = np.empty((N_POINTERS, 3), dtype=np.int64)
    pointers[:12] = rec["ipt"]
    pointers[12] = rec["lpt"]
    _check_pointers(pointers, fmt.ncoeff)

    gm, emrat = derive_gm(cval, float(rec["emrat"]), fmt.gm_layout)
    denum = int(rec["numde"])
    if fmt.denum is not None and denum != fmt.denum:
        logger.warning(
            "Ephemeris number %d in '%s' does not match format %s", denum, path, fmt.name
        )

    return EphemerisHeader(
        titles=tuple(t.decode("ascii", "replace").strip() for t in rec["ttl"]),
        constant_names=tuple(c.decode("ascii", "replace").strip() for c in rec["cnam"]),
        constant_values=cval,
        t_start=float(rec["ss"][0]),
        t_end=float(rec["ss"][1]),
        interval=float(rec["ss"][2]),
        n_constants=int(rec["ncon"]),
        au=float(rec["au"]),
        emrat=emrat,
        pointers=pointers,
        denum=denum,
        fmt=fmt,
        byteorder=byteorder,
        gm=gm,
        masses=gm / gm[10],
    )


def load_ephemeris_file(
    path: str | Path,
    fmt: str | EphemerisFormat | None = None,
    max_records: int | None = None,
) -> EphemerisData:
    """Load a binary ephemeris file into memory.

    Args:
        path: Path to the binary ephemeris file.
        fmt: Format descriptor or name. Inferred from the file name when
            ``None``.
        max_records: Record capacity. Defaults to
            :func:`ephemjax.config.get_max_records`.

    Returns:
        Header and coefficient buffer.

    Raises:
        UnsupportedFormatError: If the format cannot be determined.
        EphemerisIOError: If the file cannot be opened or read.
        HeaderParseError: If the header is malformed or no data follows it.
        CapacityExceededError: If the file holds more than ``max_records``
            data records.

    Examples:
        ```python
        from ephemjax.planetary import load_ephemeris_file
        data = load_ephemeris_file("de430.dat")
        data.n_records
        ```
    """
    path = Path(path)
    header = read_header(path, fmt)
    fmt = header.fmt
    rb = fmt.record_bytes
    if max_records is None:
        max_records = get_max_records()

    try:
        n_records = (path.stat().st_size - 2 * rb) // rb
    except OSError as err:
        raise EphemerisIOError(f"Could not stat ephemeris file '{path}': {err}") from err

    if n_records <= 0:
        raise HeaderParseError(f"No data records found in '{path}'")
    if n_records > max_records:
        raise CapacityExceededError(
            f"'{path}' holds {n_records} data records, more than the capacity of {max_records}"
        )

    try:
        flat = np.fromfile(
            path,
            dtype=f"{header.byteorder}f8",
            count=n_records * fmt.ncoeff,
            offset=2 * rb,
        )
    except OSError as err:
        raise EphemerisIOError(f"Could not read data records of '{path}': {err}") from err

    coefficients = flat.astype(np.float64).reshape(n_records, fmt.ncoeff)
    logger.info(
        "Loaded %d records of %s ephemeris from %s (JD %.1f to %.1f)",
        n_records,
        fmt.name,
        path,
        header.t_start,
        header.t_end,
    )
    return EphemerisData(header=header, coefficients=coefficients, path=path)
