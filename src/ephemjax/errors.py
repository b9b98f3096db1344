"""Exception hierarchy for ephemeris loading and queries.

Every failure raised by ephemjax derives from :class:`EphemerisError` and
from the builtin exception that best describes it, so callers can catch
either the domain base class or e.g. ``ValueError``.  A failed query
never invalidates a loaded dataset.
"""

from __future__ import annotations


class EphemerisError(Exception):
    """Base exception for ephemeris loading and evaluation."""


class EphemerisIOError(EphemerisError, OSError):
    """A data file could not be opened or read."""


class FormatError(EphemerisError, ValueError):
    """A data file has an unrecognised or malformed layout."""


class UnsupportedFormatError(FormatError):
    """The binary ephemeris variant could not be determined."""


class HeaderParseError(FormatError):
    """The fixed header or constants record could not be decoded."""


class CapacityExceededError(EphemerisError, ValueError):
    """The file holds more data records than the configured capacity."""


class NotInitializedError(EphemerisError, RuntimeError):
    """A query was made before the dataset was loaded, or after release."""


class EpochOutOfRangeError(EphemerisError, ValueError):
    """The requested epoch lies outside the span covered by the data."""


class LibrationsUnavailableError(EphemerisError, LookupError):
    """Lunar librations were requested but are not on the loaded file."""


class NutationsUnavailableError(EphemerisError, LookupError):
    """Nutations were requested but are not on the loaded file."""


class UnresolvedOutputShapeError(EphemerisError, ValueError):
    """The target/center combination does not map onto an output layout."""


class DegenerateIntervalError(EphemerisError, ZeroDivisionError):
    """The interpolation interval length is zero."""


class ConvergenceError(EphemerisError, ArithmeticError):
    """An iterative solver exceeded its iteration cap."""
