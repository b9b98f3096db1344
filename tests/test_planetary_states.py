"""Tests for epoch handling, record lookup and per-body state evaluation."""

import jax.numpy as jnp
import numpy as np
import pytest

from ephemjax.errors import (
    EpochOutOfRangeError,
    LibrationsUnavailableError,
    NutationsUnavailableError,
)
from ephemjax.planetary import (
    DE430,
    ChebyshevInterpolator,
    compute_nutations,
    compute_states,
    julian_date_pair,
    load_ephemeris_file,
    locate_record,
    split,
)

ALL_BODIES = [2] * 10 + [0, 2]


def _assert_state_close(actual, expected, km=False):
    atol = 1.0e-3 if km else 1.0e-10
    np.testing.assert_allclose(np.asarray(actual), expected, rtol=1.0e-10, atol=atol)


class TestSplit:
    def test_positive(self):
        assert split(2.75) == (2.0, 0.75)

    def test_negative_fraction_non_negative(self):
        whole, frac = split(-2.25)
        assert whole == -3.0
        assert frac == pytest.approx(0.75)

    def test_negative_integer(self):
        assert split(-3.0) == (-3.0, 0.0)

    def test_zero(self):
        assert split(0.0) == (0.0, 0.0)


class TestJulianDatePair:
    def test_noon(self):
        assert julian_date_pair(51544.5) == (2451544.5, 0.5)

    def test_midnight(self):
        assert julian_date_pair(51544.0) == (2451544.5, 0.0)

    def test_evening(self):
        jd0, frac = julian_date_pair(51544.25)
        assert jd0 == 2451544.5
        assert frac == pytest.approx(0.25)

    def test_pair_sums_to_jd(self):
        jd0, frac = julian_date_pair(58849.8125)
        assert jd0 + frac == pytest.approx(2458850.3125)
        assert 0.0 <= frac < 1.0


class TestLocateRecord:
    def test_start_of_file(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        assert locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_start)) == (0, 0.0)

    def test_record_boundary_starts_next_record(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        index, t = locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_start + 32.0))
        assert index == 1
        assert t == 0.0

    def test_middle_of_record(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        index, t = locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_start + 72.0))
        assert index == 2
        assert t == pytest.approx(0.25)

    def test_end_of_file_uses_last_record(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        index, t = locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_end))
        assert index == synthetic_ephemeris.n_records - 1
        assert t == 1.0

    @pytest.mark.parametrize("offset", [-0.5, 128.25])
    def test_outside_span(self, synthetic_ephemeris, offset):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        with pytest.raises(EpochOutOfRangeError, match="not within"):
            locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_start + offset))

    def test_zero_julian_date(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        with pytest.raises(EpochOutOfRangeError, match="zero"):
            locate_record(data, (0.0, 0.25))

    def test_beyond_loaded_records(self, synthetic_ephemeris, tmp_path):
        # Header still claims four records; only three are on disk
        path = tmp_path / "de430_truncated.dat"
        path.write_bytes(synthetic_ephemeris.path.read_bytes()[: 5 * DE430.record_bytes])
        data = load_ephemeris_file(path)
        assert data.n_records == 3
        with pytest.raises(EpochOutOfRangeError, match="only 3 records"):
            locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_start + 100.0))

    def test_out_of_range_is_value_error(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        with pytest.raises(ValueError):
            locate_record(data, julian_date_pair(synthetic_ephemeris.mjd_end + 1.0))


class TestComputeStates:
    @pytest.mark.parametrize("offset", [0.0, 3.75, 32.0, 47.3, 100.9, 128.0])
    def test_barycentric_rows(self, synthetic_ephemeris, offset):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        mjd = synthetic_ephemeris.mjd_start + offset
        table = compute_states(data, ChebyshevInterpolator(), julian_date_pair(mjd), ALL_BODIES)
        assert table.shape == (12, 6)
        for slot in range(10):
            _assert_state_close(table[slot], synthetic_ephemeris.slot_state(slot, mjd))
        _assert_state_close(table[11], synthetic_ephemeris.slot_state(10, mjd))

    def test_km_units(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        mjd = synthetic_ephemeris.mjd_start + 51.2
        table = compute_states(
            data, ChebyshevInterpolator(), julian_date_pair(mjd), ALL_BODIES, km=True
        )
        for slot in (0, 4, 9):
            _assert_state_close(table[slot], synthetic_ephemeris.slot_state(slot, mjd, km=True), km=True)

    def test_heliocentric_planets(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        mjd = synthetic_ephemeris.mjd_start + 20.0
        table = compute_states(
            data, ChebyshevInterpolator(), julian_date_pair(mjd), ALL_BODIES, barycentric=False
        )
        sun = synthetic_ephemeris.slot_state(10, mjd)
        for slot in range(9):
            _assert_state_close(table[slot], synthetic_ephemeris.slot_state(slot, mjd) - sun)
        # The geocentric Moon is not shifted
        _assert_state_close(table[9], synthetic_ephemeris.slot_state(9, mjd))

    def test_unrequested_rows_are_zero(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        request = [0] * 12
        request[4] = 2
        mjd = synthetic_ephemeris.mjd_start + 5.0
        table = compute_states(data, ChebyshevInterpolator(), julian_date_pair(mjd), request)
        for row in (0, 1, 2, 3, 5, 6, 7, 8, 9, 10):
            assert jnp.all(table[row] == 0.0)
        # The Sun is always evaluated
        _assert_state_close(table[11], synthetic_ephemeris.slot_state(10, mjd))

    def test_position_only_request(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        request = [0] * 12
        request[5] = 1
        mjd = synthetic_ephemeris.mjd_start + 5.0
        table = compute_states(data, ChebyshevInterpolator(), julian_date_pair(mjd), request)
        _assert_state_close(table[5, :3], synthetic_ephemeris.slot_state(5, mjd)[:3])
        assert jnp.all(table[5, 3:] == 0.0)

    def test_librations(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        mjd = synthetic_ephemeris.mjd_start + 77.7
        request = [0] * 11 + [2]
        table = compute_states(data, ChebyshevInterpolator(), julian_date_pair(mjd), request)
        _assert_state_close(table[10], synthetic_ephemeris.slot_state(12, mjd))

    def test_librations_missing(self, ephemeris_file_factory):
        eph = ephemeris_file_factory(librations=False)
        data = load_ephemeris_file(eph.path)
        with pytest.raises(LibrationsUnavailableError):
            compute_states(data, ChebyshevInterpolator(), julian_date_pair(eph.mjd_start + 1.0), ALL_BODIES)

    def test_request_length(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        with pytest.raises(ValueError, match="12 entries"):
            compute_states(
                data, ChebyshevInterpolator(), julian_date_pair(synthetic_ephemeris.mjd_start), [2] * 10
            )

    @pytest.mark.parametrize("slot", range(13))
    def test_continuous_across_record_boundary(self, synthetic_ephemeris, slot):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        interp = ChebyshevInterpolator()
        pointer = data.header.pointers[slot]
        n_components = 2 if slot == 11 else 3
        interval = data.header.interval
        end = interp.interpolate(data.coefficients[1], pointer, 1.0, interval, n_components)
        start = interp.interpolate(data.coefficients[2], pointer, 0.0, interval, n_components)
        end, start = np.asarray(end), np.asarray(start)
        scale = float(np.max(np.abs(end)))
        assert scale > 0.0
        np.testing.assert_allclose(start, end, rtol=1.0e-12, atol=1.0e-13 * scale)

    def test_big_endian_file_agrees(self, ephemeris_file_factory):
        little = ephemeris_file_factory(name="de430_le.dat")
        big = ephemeris_file_factory(name="de430_be.dat", byteorder=">")
        jd = julian_date_pair(little.mjd_start + 12.5)
        a = compute_states(load_ephemeris_file(little.path), ChebyshevInterpolator(), jd, ALL_BODIES)
        b = compute_states(load_ephemeris_file(big.path), ChebyshevInterpolator(), jd, ALL_BODIES)
        assert jnp.array_equal(a, b)


class TestComputeNutations:
    @pytest.mark.parametrize("km", [False, True])
    def test_values(self, synthetic_ephemeris, km):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        mjd = synthetic_ephemeris.mjd_start + 40.4
        nut = compute_nutations(data, ChebyshevInterpolator(), julian_date_pair(mjd), km=km)
        assert nut.shape == (4,)
        np.testing.assert_allclose(
            np.asarray(nut), synthetic_ephemeris.nutations(mjd, km=km), rtol=1.0e-10, atol=1.0e-20
        )

    def test_missing(self, ephemeris_file_factory):
        eph = ephemeris_file_factory(nutations=False)
        data = load_ephemeris_file(eph.path)
        with pytest.raises(NutationsUnavailableError):
            compute_nutations(data, ChebyshevInterpolator(), julian_date_pair(eph.mjd_start + 1.0))

    def test_out_of_range(self, synthetic_ephemeris):
        data = load_ephemeris_file(synthetic_ephemeris.path)
        with pytest.raises(EpochOutOfRangeError):
            compute_nutations(
                data, ChebyshevInterpolator(), julian_date_pair(synthetic_ephemeris.mjd_end + 5.0)
            )
