"""Planets, Moon and Sun from JPL/IMCCE binary Chebyshev ephemerides.

Reads DE405, DE406, DE430, DE431 and INPOP10B binary files into memory
and interpolates barycentric states, nutations and lunar librations.
States relative to any body are produced by
:meth:`PlanetaryEphemeris.ephemeris`, or by the process-wide
:func:`ephemeris` once :func:`init_planetary_ephemeris` has been called.

Typical usage::

    from ephemjax.planetary import PlanetaryEphemeris
    eph = PlanetaryEphemeris.load("de430.dat")
    planets = eph.ephemeris(58000.0, -10, 11)  # heliocentric, shape (10, 6)
"""

from ephemjax.planetary._api import (
    ephemeris,
    ephemeris_perturbers,
    get_planetary_ephemeris,
    init_planetary_ephemeris,
    is_planetary_ephemeris_loaded,
    nutations,
    unload_planetary_ephemeris,
)
from ephemjax.planetary._chebyshev import ChebyshevInterpolator, chebyshev_basis
from ephemjax.planetary._ephemeris import (
    N_MAJOR_BODIES,
    PlanetaryEphemeris,
    load_planetary_ephemeris,
)
from ephemjax.planetary._formats import (
    DE405,
    DE406,
    DE430,
    DE431,
    FORMATS,
    INPOP10B,
    EphemerisFormat,
    GMLayout,
    format_from_filename,
    get_format,
)
from ephemjax.planetary._reader import (
    EphemerisData,
    EphemerisHeader,
    derive_gm,
    load_ephemeris_file,
    read_header,
)
from ephemjax.planetary._states import (
    compute_nutations,
    compute_states,
    julian_date_pair,
    locate_record,
    split,
)

__all__ = [
    "DE405",
    "DE406",
    "DE430",
    "DE431",
    "FORMATS",
    "INPOP10B",
    "N_MAJOR_BODIES",
    "ChebyshevInterpolator",
    "EphemerisData",
    "EphemerisFormat",
    "EphemerisHeader",
    "GMLayout",
    "PlanetaryEphemeris",
    "chebyshev_basis",
    "compute_nutations",
    "compute_states",
    "derive_gm",
    "ephemeris",
    "ephemeris_perturbers",
    "format_from_filename",
    "get_format",
    "get_planetary_ephemeris",
    "init_planetary_ephemeris",
    "is_planetary_ephemeris_loaded",
    "julian_date_pair",
    "load_ephemeris_file",
    "load_planetary_ephemeris",
    "locate_record",
    "nutations",
    "read_header",
    "split",
    "unload_planetary_ephemeris",
]
