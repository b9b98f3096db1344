"""Solar-system body numbering and physical parameters.

The numbering follows the JPL export convention used by every query in
ephemjax:

- 1-9: Mercury ... Pluto (3 is the Earth, 13 the Earth-Moon barycenter)
- 10: Moon, 11: Sun, 12: solar-system barycenter
- 13: Earth-Moon barycenter, 14: nutations, 15: lunar librations
- -9 / -10: all nine planets (Earth-Moon barycenter in row 3) / all nine
  planets plus the Moon, Earth and Moon separate

The 17-slot parameter tables extend the numbering with a generic
asteroid (14) and Ceres, Pallas and Vesta (15-17).
"""

from __future__ import annotations

import enum

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype


class Body(enum.IntEnum):
    """Body identifiers accepted as ``target``/``center``."""

    MERCURY = 1
    VENUS = 2
    EARTH = 3
    MARS = 4
    JUPITER = 5
    SATURN = 6
    URANUS = 7
    NEPTUNE = 8
    PLUTO = 9
    MOON = 10
    SUN = 11
    SOLAR_SYSTEM_BARYCENTER = 12
    EARTH_MOON_BARYCENTER = 13
    NUTATIONS = 14
    LIBRATIONS = 15
    ALL_PLANETS = -9
    ALL_PLANETS_AND_MOON = -10


BODY_NAMES: tuple[str, ...] = (
    "Mercury",
    "Venus",
    "Earth",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
    "Pluto",
    "Moon",
    "Sun",
    "solar-system_barycenter",
    "Earth-Moon_barycenter",
)
"""Names of bodies 1-13, index ``body - 1``."""

# Density unit conversion kg m^-3 -> M_sun AU^-3
_KGM3_SMAU3 = (1.4959787066e8) ** 3 / 1.989100e30

# fmt: off
PLANETARY_RADII = jnp.array([
    1.63037e-5,   # (1) Mercury
    4.04551e-5,   # (2) Venus
    4.25641e-5,   # (3) Earth
    2.26491e-5,   # (4) Mars
    4.62908e-4,   # (5) Jupiter
    3.81021e-4,   # (6) Saturn
    1.72128e-4,   # (7) Uranus
    1.60096e-4,   # (8) Neptune
    8.17191e-6,   # (9) Pluto
    1.16178e-5,   # (10) Moon
    4.65424e-3,   # (11) Sun
    0.0,          # (12) solar-system barycenter
    0.0,          # (13) Earth-Moon barycenter
    0.0,          # (14) asteroid
    3.05151e-6,   # (15) Ceres
    1.74802e-6,   # (16) Pallas
    1.67449e-6,   # (17) Vesta
])
"""Body radii, index ``body - 1``. Units: *AU*"""

# Densities from http://nssdc.gsfc.nasa.gov/planetary/planetfact.html
PLANETARY_DENSITIES = jnp.array([
    5427.0 * _KGM3_SMAU3,   # (1) Mercury
    5243.0 * _KGM3_SMAU3,   # (2) Venus
    5515.0 * _KGM3_SMAU3,   # (3) Earth
    3933.0 * _KGM3_SMAU3,   # (4) Mars
    1326.0 * _KGM3_SMAU3,   # (5) Jupiter
    687.0 * _KGM3_SMAU3,    # (6) Saturn
    1270.0 * _KGM3_SMAU3,   # (7) Uranus
    1632.0 * _KGM3_SMAU3,   # (8) Neptune
    1750.0 * _KGM3_SMAU3,   # (9) Pluto
    3340.0 * _KGM3_SMAU3,   # (10) Moon
    1408.0 * _KGM3_SMAU3,   # (11) Sun
    -1.0,                   # (12) solar-system barycenter
    -1.0,                   # (13) Earth-Moon barycenter
    2500.0 * _KGM3_SMAU3,   # (14) asteroid
    0.0,                    # (15) Ceres
    0.0,                    # (16) Pallas
    0.0,                    # (17) Vesta
])
"""Bulk densities, index ``body - 1``. Negative for barycenters. Units: *M_sun AU^-3*"""
# fmt: on


def body_name(body: int) -> str:
    """Return the display name of body ``1..13``.

    Raises:
        ValueError: If *body* has no name.
    """
    if not 1 <= body <= len(BODY_NAMES):
        raise ValueError(f"No name for body {body}; expected 1..{len(BODY_NAMES)}")
    return BODY_NAMES[body - 1]


def hill_radius(
    mass_1: ArrayLike,
    mass_2: ArrayLike,
    a_1: ArrayLike = 1.0,
    e_1: ArrayLike = 0.0,
) -> Array:
    """Approximate radius of the Hill sphere.

    ``r_H = a_1 (1 - e_1) (m_1 / (3 m_2))^(1/3)`` where body 1 (e.g. the
    Earth) orbits body 2 (e.g. the Sun) on an orbit with semi-major axis
    ``a_1`` and eccentricity ``e_1``.

    Args:
        mass_1: Mass of the orbiting body.
        mass_2: Mass of the central body, same unit as ``mass_1``.
        a_1: Semi-major axis of body 1. Default: 1.0 (AU).
        e_1: Eccentricity of body 1. Default: 0.0.

    Returns:
        Hill radius in the unit of ``a_1``.

    Examples:
        ```python
        from ephemjax.bodies import hill_radius
        r_h = hill_radius(3.0e-6, 1.0)  # ~0.01 AU for the Earth
        ```
    """
    dtype = get_dtype()
    mass_1 = jnp.asarray(mass_1, dtype=dtype)
    mass_2 = jnp.asarray(mass_2, dtype=dtype)
    a_1 = jnp.asarray(a_1, dtype=dtype)
    e_1 = jnp.asarray(e_1, dtype=dtype)
    return a_1 * (1.0 - e_1) * (mass_1 / (3.0 * mass_2)) ** (1.0 / 3.0)


def roche_limit(radius_1: ArrayLike, density_1: ArrayLike, density_2: ArrayLike) -> Array:
    """Roche limit of a fluid satellite, ``2.44 R_1 (rho_1 / rho_2)^(1/3)``.

    Args:
        radius_1: Radius of the primary.
        density_1: Bulk density of the primary.
        density_2: Bulk density of the satellite, same unit as ``density_1``.

    Returns:
        Roche limit in the unit of ``radius_1``.
    """
    dtype = get_dtype()
    radius_1 = jnp.asarray(radius_1, dtype=dtype)
    density_1 = jnp.asarray(density_1, dtype=dtype)
    density_2 = jnp.asarray(density_2, dtype=dtype)
    return 2.44 * radius_1 * (density_1 / density_2) ** (1.0 / 3.0)
