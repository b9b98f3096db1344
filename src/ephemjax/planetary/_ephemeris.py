"""Loaded planetary ephemeris handle and target/center differencing.

:class:`PlanetaryEphemeris` owns the coefficient buffer of one binary
file and a :class:`~ephemjax.planetary.ChebyshevInterpolator`.  Its
:meth:`~PlanetaryEphemeris.ephemeris` method turns the barycentric
states of the State Resolver into the state of a target relative to a
center, using the body numbering of :class:`ephemjax.bodies.Body`.

The file stores the Earth-Moon barycenter (row 3) and the geocentric
Moon (row 10).  True Earth and barycentric Moon states are recovered
with the Earth/Moon mass ratio ``emrat``::

    earth = emb - moon_geo / (1 + emrat)
    moon  = earth + moon_geo

The Earth-Moon barycenter row (13) is never shifted to the center, so
``ephemeris(t, 13, 11)`` is the barycentric EMB, whereas
``ephemeris(t, 11, 13)`` is the Sun relative to the EMB.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import jax.numpy as jnp
from jax import Array

from ephemjax.errors import (
    LibrationsUnavailableError,
    NotInitializedError,
    UnresolvedOutputShapeError,
)
from ephemjax.planetary._chebyshev import ChebyshevInterpolator
from ephemjax.planetary._formats import EphemerisFormat
from ephemjax.planetary._reader import EphemerisData, EphemerisHeader, load_ephemeris_file
from ephemjax.planetary._states import (
    N_SLOTS,
    POSITION_VELOCITY,
    compute_nutations,
    compute_states,
    julian_date_pair,
)

logger = logging.getLogger(__name__)

N_MAJOR_BODIES = 10
"""Planets plus the Moon, the bodies selectable in a perturber mask."""

_EARTH, _MOON, _SUN, _SSB, _EMB = 3, 10, 11, 12, 13
_NUTATIONS, _LIBRATIONS = 14, 15
_ALL_PLANETS, _ALL_PLANETS_AND_MOON = -9, -10


class PlanetaryEphemeris:
    """A loaded binary ephemeris answering target/center state queries.

    Args:
        data: Header and coefficient buffer from
            :func:`~ephemjax.planetary.load_ephemeris_file`.

    Examples:
        ```python
        from ephemjax.planetary import PlanetaryEphemeris
        eph = PlanetaryEphemeris.load("de430.dat")
        earth = eph.ephemeris(58000.0, 3, 11)  # heliocentric Earth, shape (1, 6)
        ```
    """

    def __init__(self, data: EphemerisData) -> None:
        self._data: EphemerisData | None = data
        self._interpolator = ChebyshevInterpolator()

    @classmethod
    def load(
        cls,
        path: str | Path,
        fmt: str | EphemerisFormat | None = None,
        max_records: int | None = None,
    ) -> PlanetaryEphemeris:
        """Load a binary ephemeris file and wrap it in a handle.

        See :func:`~ephemjax.planetary.load_ephemeris_file` for the
        arguments and the errors raised.
        """
        return cls(load_ephemeris_file(path, fmt=fmt, max_records=max_records))

    def __repr__(self) -> str:
        if self._data is None:
            return "PlanetaryEphemeris(<unloaded>)"
        return (
            f"PlanetaryEphemeris(path='{self._data.path}', fmt={self._data.header.fmt.name}, "
            f"n_records={self._data.n_records})"
        )

    # -- state ---------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        """Whether the coefficient buffer is still held."""
        return self._data is not None

    def unload(self) -> None:
        """Release the coefficient buffer.

        Subsequent queries raise :class:`~ephemjax.errors.NotInitializedError`.
        Unloading twice is harmless.
        """
        if self._data is not None:
            logger.debug("Releasing ephemeris %s", self._data.path)
        self._data = None
        self._interpolator.reset()

    def _require(self) -> EphemerisData:
        if self._data is None:
            raise NotInitializedError("Planetary ephemeris has been unloaded")
        return self._data

    @property
    def data(self) -> EphemerisData:
        """Header and coefficient buffer."""
        return self._require()

    @property
    def header(self) -> EphemerisHeader:
        """Decoded file header."""
        return self._require().header

    @property
    def gm(self) -> Array:
        """Gravitational parameters of bodies 1-17. Units: *AU^3/day^2*"""
        return self._require().header.gm

    @property
    def masses(self) -> Array:
        """Masses of bodies 1-17 relative to the Sun."""
        return self._require().header.masses

    # -- low level -----------------------------------------------------------

    def states(
        self,
        mjd_tt: float,
        request: Sequence[int],
        km: bool = False,
        barycentric: bool = True,
    ) -> Array:
        """Raw 12-row state table for a body request list.

        See :func:`~ephemjax.planetary.compute_states`.
        """
        data = self._require()
        return compute_states(
            data, self._interpolator, julian_date_pair(mjd_tt), request, km=km,
            barycentric=barycentric,
        )

    def nutations(self, mjd_tt: float, km: bool = False) -> Array:
        """Nutation angles and rates ``[dpsi, deps, dpsi_dot, deps_dot]``."""
        data = self._require()
        return compute_nutations(data, self._interpolator, julian_date_pair(mjd_tt), km=km)

    def librations(self, mjd_tt: float, km: bool = False) -> Array:
        """Lunar libration angles and rates, shape ``(6,)``.

        Raises:
            LibrationsUnavailableError: If the file has no librations.
        """
        data = self._require()
        if not data.header.has_librations:
            raise LibrationsUnavailableError("No librations available on the ephemeris file")
        request = [0] * N_SLOTS
        request[11] = POSITION_VELOCITY
        table = compute_states(data, self._interpolator, julian_date_pair(mjd_tt), request, km=km)
        return table[10]

    # -- differencing --------------------------------------------------------

    def ephemeris(self, mjd_tt: float, target: int, center: int, km: bool = False) -> Array:
        """State of ``target`` relative to ``center``.

        Body numbers: 1-9 planets, 10 Moon, 11 Sun, 12 solar-system
        barycenter, 13 Earth-Moon barycenter, 14 nutations, 15 librations,
        -9 all planets (row 3 is the Earth-Moon barycenter), -10 all
        planets with separate Earth (row 3) and Moon (row 10).  ``center``
        is ignored for targets 14 and 15.

        Args:
            mjd_tt: Epoch as Modified Julian Date, TT scale.
            target: Target body number.
            center: Center body number, 1-13.
            km: Output in km and km/s instead of AU and AU/day.

        Returns:
            State rows ``[x, y, z, vx, vy, vz]`` in the ICRF/J2000
            equatorial frame, shape ``(1, 6)``, ``(9, 6)`` for ``-9`` or
            ``(10, 6)`` for ``-10``.  Target 14 returns the four nutation
            values followed by two zeros.

        Raises:
            NotInitializedError: If the handle has been unloaded.
            EpochOutOfRangeError: If the epoch is not covered by the file.
            LibrationsUnavailableError: If target 15 is requested and the
                file has no librations.
            NutationsUnavailableError: If target 14 is requested and the
                file has no nutations.
            UnresolvedOutputShapeError: If the target/center combination
                does not select an output.
        """
        data = self._require()
        target = int(target)
        center = int(center)

        if target == center:
            return jnp.zeros((1, 6))

        if target == _LIBRATIONS:
            return self.librations(mjd_tt, km=km)[None, :]

        if target == _NUTATIONS:
            nut = self.nutations(mjd_tt, km=km)
            return jnp.concatenate([nut, jnp.zeros(2, dtype=nut.dtype)])[None, :]

        if not (1 <= center <= _EMB):
            raise UnresolvedOutputShapeError(
                f"Could not resolve center {center} for target {target}"
            )

        request = [0] * N_SLOTS
        if target > 0:
            for k in (target, center):
                if k <= N_MAJOR_BODIES:
                    request[k - 1] = POSITION_VELOCITY
                if k == _EARTH:
                    request[_MOON - 1] = POSITION_VELOCITY
                if k in (_MOON, _EMB):
                    request[_EARTH - 1] = POSITION_VELOCITY
        elif target in (_ALL_PLANETS, _ALL_PLANETS_AND_MOON):
            request[:N_MAJOR_BODIES] = [POSITION_VELOCITY] * N_MAJOR_BODIES
        else:
            if center <= N_MAJOR_BODIES:
                request[center - 1] = POSITION_VELOCITY

        table = compute_states(data, self._interpolator, julian_date_pair(mjd_tt), request, km=km)
        # rows[k] holds body k (1-based); row 11 is the Sun once redirected
        rows = [None, *table, jnp.zeros(6, dtype=table.dtype)]

        if target == _SUN or center == _SUN or target < 0:
            rows[_SUN] = rows[_SSB]
        if target == _SSB or center == _SSB:
            rows[_SSB] = jnp.zeros_like(rows[_SSB])
        if target == _EMB or center == _EMB or target == _ALL_PLANETS:
            rows[_EMB] = rows[_EARTH]

        if target * center == _EARTH * _MOON and target + center == _EARTH + _MOON:
            rows[_EARTH] = jnp.zeros_like(rows[_EARTH])
            return (rows[target] - rows[center])[None, :]

        emrat = data.header.emrat
        if request[_EARTH - 1]:
            rows[_EARTH] = rows[_EARTH] - rows[_MOON] / (1.0 + emrat)
        if request[_MOON - 1]:
            rows[_MOON] = rows[_EARTH] + rows[_MOON]

        origin = rows[center]
        for i in range(1, N_SLOTS + 1):
            rows[i] = rows[i] - origin

        if target == _ALL_PLANETS:
            block = rows[1:10]
            block[_EARTH - 1] = rows[_EMB] - origin
            return jnp.stack(block)
        if target == _ALL_PLANETS_AND_MOON:
            return jnp.stack(rows[1 : N_MAJOR_BODIES + 1])
        if 1 <= target <= _EMB:
            return rows[target][None, :]
        raise UnresolvedOutputShapeError(
            f"Could not decide what kind of output target {target} and center {center} request"
        )

    def ephemeris_perturbers(
        self,
        mjd_tt: float,
        mask: Sequence[bool],
        center: int,
        km: bool = False,
    ) -> Array:
        """States of a subset of the 10 major bodies relative to ``center``.

        Earth (3) and Moon (10) are always returned as separate bodies.

        Args:
            mjd_tt: Epoch as Modified Julian Date, TT scale.
            mask: 10 flags selecting bodies 1-10.
            center: Center body number, 1-12.
            km: Output in km and km/s instead of AU and AU/day.

        Returns:
            States of the selected bodies in body order, shape
            ``(sum(mask), 6)``.

        Raises:
            ValueError: If ``mask`` does not have 10 entries.
            UnresolvedOutputShapeError: If ``center`` is not 1-12.
        """
        data = self._require()
        mask = [bool(m) for m in mask]
        if len(mask) != N_MAJOR_BODIES:
            raise ValueError(f"Perturber mask must have {N_MAJOR_BODIES} entries, got {len(mask)}")
        center = int(center)
        if not (1 <= center <= N_SLOTS):
            raise UnresolvedOutputShapeError(f"Could not resolve perturber center {center}")

        request = [POSITION_VELOCITY] * N_MAJOR_BODIES + [0, 0]
        table = compute_states(data, self._interpolator, julian_date_pair(mjd_tt), request, km=km)
        rows = [None, *table]

        rows[_SUN] = rows[_SSB]
        if center == _SSB:
            rows[_SSB] = jnp.zeros_like(rows[_SSB])
        rows[_EARTH] = rows[_EARTH] - rows[_MOON] / (1.0 + data.header.emrat)
        rows[_MOON] = rows[_EARTH] + rows[_MOON]

        origin = rows[center]
        selected = [rows[i + 1] - origin for i in range(N_MAJOR_BODIES) if mask[i]]
        if not selected:
            return jnp.zeros((0, 6), dtype=table.dtype)
        return jnp.stack(selected)


def load_planetary_ephemeris(
    path: str | Path,
    fmt: str | EphemerisFormat | None = None,
    max_records: int | None = None,
) -> PlanetaryEphemeris:
    """Functional alias of :meth:`PlanetaryEphemeris.load`."""
    return PlanetaryEphemeris.load(path, fmt=fmt, max_records=max_records)
