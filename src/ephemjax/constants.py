"""
The `constants` module defines the mathematical, time and dataset constants used by the ephemeris engine.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Full turn. Units: *rad*
"""
TWO_PI = 2.0 * PI

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Number of seconds in a day. Units: *s/day*
"""
SECONDS_PER_DAY = 86400.0

# Physical Constants

"""
Heliocentric gravitational parameter from the Gaussian gravitational constant,
k = 0.01720209895. Used when no planetary ephemeris file supplies GM_sun.
Units: *AU^3/day^2*
"""
GM_SUN_AU = 0.01720209895**2

"""
Mean obliquity of the ecliptic used to rotate asteroid perturber states into
the mean equatorial frame. Fixed, independent of any obliquity used by
callers. Units: *deg*
"""
OBLIQUITY_PERTURBERS_DEG = 23.43929111111111

# Asteroid perturber grid

"""
Number of tabulated epochs per asteroid in the perturber dataset.
"""
ASTEROID_EPOCH_COUNT = 3653

"""
Spacing of the tabulated asteroid epochs. Units: *days*
"""
ASTEROID_EPOCH_STEP = 40.0

"""
First tabulated asteroid epoch, JD 2378495.0 expressed as MJD (TT). Units: *days*
"""
ASTEROID_MJD0 = 2378495.0 - JD_MJD_OFFSET

"""
Number of Keplerian elements stored per asteroid and epoch.
"""
ASTEROID_ELEMENT_COUNT = 6
