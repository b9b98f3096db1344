"""
ephemjax reads JPL/IMCCE binary planetary ephemerides and tabulated asteroid perturbers, implemented in JAX.
"""

from .constants import (
    DEG2RAD,
    RAD2DEG,
    JD_MJD_OFFSET,
    SECONDS_PER_DAY,
    GM_SUN_AU,
)

from .config import (
    set_dtype,
    get_dtype,
    set_max_records,
    get_max_records,
    get_data_dir,
    default_ephemeris_path,
)

from .errors import (
    EphemerisError,
    EphemerisIOError,
    FormatError,
    UnsupportedFormatError,
    HeaderParseError,
    CapacityExceededError,
    NotInitializedError,
    EpochOutOfRangeError,
    LibrationsUnavailableError,
    NutationsUnavailableError,
    UnresolvedOutputShapeError,
    DegenerateIntervalError,
    ConvergenceError,
)

from .bodies import (
    Body,
    BODY_NAMES,
    PLANETARY_RADII,
    PLANETARY_DENSITIES,
    body_name,
    hill_radius,
    roche_limit,
)

from .frames import (
    Rx,
    Rz,
    rotation_orbital_to_ecliptic,
    rotation_ecliptic_to_equatorial,
)

from .kepler import (
    solve_kepler,
    state_perifocal,
)

from .planetary import (
    PlanetaryEphemeris,
    EphemerisFormat,
    load_ephemeris_file,
    init_planetary_ephemeris,
    unload_planetary_ephemeris,
    get_planetary_ephemeris,
    is_planetary_ephemeris_loaded,
    ephemeris,
    ephemeris_perturbers,
    nutations,
)

from .asteroids import (
    AsteroidTable,
    load_asteroid_table,
    init_asteroid_ephemeris,
    unload_asteroid_ephemeris,
    get_asteroid_table,
    perturber_states,
    perturber_masses,
)
