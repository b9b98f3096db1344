from __future__ import annotations

from pathlib import Path

import jax.numpy as jnp
import numpy as np
import pytest

from ephemjax.asteroids import unload_asteroid_ephemeris
from ephemjax.config import set_dtype
from ephemjax.planetary import unload_planetary_ephemeris

# ---------------------------------------------------------------------------
# Synthetic DE430-layout binary ephemeris
# ---------------------------------------------------------------------------

T_START = 2451536.5
"""First JD covered by the synthetic file (MJD 51536.0)."""

INTERVAL = 32.0
"""Record length of the synthetic file. Units: *days*"""

AU_KM = 149597870.7
EMRAT = 81.3005690699
GM_SUN = 2.9591220828559115e-4
# Mercury .. Pluto; slot 3 holds the Earth-Moon system
GM_PLANETS = np.array([
    4.9125474514508118e-11,
    7.2434524861627027e-10,
    8.9970116036316091e-10,
    9.5495351057792580e-11,
    2.8253458420837780e-07,
    8.4597151856806587e-08,
    1.2920249167819693e-08,
    1.5243589007842762e-08,
    2.1750964648933581e-12,
])

# (ncf, na) per pointer slot: 9 planets, Moon, Sun, nutations, librations
_LAYOUT = [(4, 1)] * 9 + [(5, 2), (4, 2), (3, 1), (3, 1)]
_NCOEFF = 1018
_RECORD_BYTES = 2036 * 4


def _header_dtype(byteorder: str) -> np.dtype:
    return np.dtype([
        ("ttl", "S84", (3,)),
        ("cnam", "S6", (400,)),
        ("ss", f"{byteorder}f8", (3,)),
        ("ncon", f"{byteorder}i4"),
        ("au", f"{byteorder}f8"),
        ("emrat", f"{byteorder}f8"),
        ("ipt", f"{byteorder}i4", (12, 3)),
        ("numde", f"{byteorder}i4"),
        ("lpt", f"{byteorder}i4", (3,)),
    ])


def _pad(raw: bytes) -> bytes:
    return raw + b"\x00" * (_RECORD_BYTES - len(raw))


def _chebyshev_coefficients(p: np.ndarray, u0: float, h: float) -> np.ndarray:
    """Exact Chebyshev coefficients of ``A + B u + C u^2`` on ``[u0, u0 + h]``."""
    A, B, C = p[:, 0], p[:, 1], p[:, 2]
    m = u0 + 0.5 * h
    w = 0.5 * h
    c0 = A + B * m + C * m * m + 0.5 * C * w * w
    c1 = (B + 2.0 * C * m) * w
    c2 = 0.5 * C * w * w
    return np.stack([c0, c1, c2], axis=1)


def _make_params(seed: int) -> np.ndarray:
    """Quadratic coefficients ``[A, B, C]`` per slot and component, shape (13, 3, 3)."""
    rng = np.random.default_rng(seed)
    params = np.zeros((13, 3, 3))
    for slot in range(9):
        scale = 0.4 * (slot + 1) * AU_KM
        params[slot, :, 0] = rng.uniform(-1.0, 1.0, 3) * scale
        params[slot, :, 1] = rng.uniform(-1.0, 1.0, 3) * 2.0e6 / (slot + 1)
        params[slot, :, 2] = rng.uniform(-1.0, 1.0, 3) * 1.0e3
    params[9, :, 0] = rng.uniform(-1.0, 1.0, 3) * 3.8e5
    params[9, :, 1] = rng.uniform(-1.0, 1.0, 3) * 1.0e5
    params[9, :, 2] = rng.uniform(-1.0, 1.0, 3) * 1.0e2

    # Sun placed so that the mass-weighted barycenter sits at the origin
    masses = GM_PLANETS / GM_SUN
    params[10] = -np.einsum("i,ijk->jk", masses, params[:9])

    params[11, :2, 0] = rng.uniform(-1.0, 1.0, 2) * 1.0e-5
    params[11, :2, 1] = rng.uniform(-1.0, 1.0, 2) * 1.0e-7
    params[11, :2, 2] = rng.uniform(-1.0, 1.0, 2) * 1.0e-10
    params[12, :, 0] = rng.uniform(-1.0, 1.0, 3) * 0.1
    params[12, :, 1] = rng.uniform(-1.0, 1.0, 3) * 0.2
    params[12, :, 2] = rng.uniform(-1.0, 1.0, 3) * 1.0e-4
    return params


class SyntheticEphemeris:
    """A synthetic binary ephemeris whose bodies move on known quadratics.

    Every stored coordinate is ``A + B u + C u^2`` with ``u`` days since
    :data:`T_START`, encoded exactly in Chebyshev form, so interpolated
    states can be compared with closed-form values.
    """

    def __init__(
        self,
        path: Path,
        n_records: int,
        pointers: np.ndarray,
        params: np.ndarray,
    ) -> None:
        self.path = path
        self.n_records = n_records
        self.pointers = pointers
        self.params = params
        self.t_start = T_START
        self.t_end = T_START + n_records * INTERVAL
        self.interval = INTERVAL
        self.au = AU_KM
        self.emrat = EMRAT

    @property
    def mjd_start(self) -> float:
        return self.t_start - 2400000.5

    @property
    def mjd_end(self) -> float:
        return self.t_end - 2400000.5

    def slot_state(self, slot: int, mjd: float, km: bool = False) -> np.ndarray:
        """Closed-form state of pointer slot ``slot`` (0-based), as stored."""
        u = mjd + 2400000.5 - T_START
        A, B, C = self.params[slot, :, 0], self.params[slot, :, 1], self.params[slot, :, 2]
        pos = A + B * u + C * u * u
        vel = B + 2.0 * C * u
        if slot >= 11:
            return np.concatenate([pos, vel / 86400.0 if km else vel])
        if km:
            return np.concatenate([pos, vel / 86400.0])
        return np.concatenate([pos, vel]) / AU_KM

    def nutations(self, mjd: float, km: bool = False) -> np.ndarray:
        s = self.slot_state(11, mjd, km=km)
        return s[[0, 1, 3, 4]]

    def barycentric(self, body: int, mjd: float, km: bool = False) -> np.ndarray:
        """Closed-form barycentric state of a body number (1-13)."""
        moon_geo = self.slot_state(9, mjd, km)
        emb = self.slot_state(2, mjd, km)
        earth = emb - moon_geo / (1.0 + EMRAT)
        if body == 3:
            return earth
        if body == 10:
            return earth + moon_geo
        if body == 11:
            return self.slot_state(10, mjd, km)
        if body == 12:
            return np.zeros(6)
        if body == 13:
            return emb
        return self.slot_state(body - 1, mjd, km)


def write_ephemeris_file(
    path: Path,
    n_records: int = 4,
    byteorder: str = "<",
    nutations: bool = True,
    librations: bool = True,
    trailing_bytes: int = 0,
    seed: int = 430,
    header_pointers: dict[int, tuple[int, int, int]] | None = None,
) -> SyntheticEphemeris:
    """Write a synthetic DE430-layout ephemeris to ``path``.

    ``header_pointers`` replaces pointer slots (0-based) in the header only,
    leaving the coefficient layout untouched.
    """
    params = _make_params(seed)

    pointers = np.zeros((13, 3), dtype=np.int64)
    offset = 3
    for slot, (ncf, na) in enumerate(_LAYOUT):
        if (slot == 11 and not nutations) or (slot == 12 and not librations):
            continue
        ncm = 2 if slot == 11 else 3
        pointers[slot] = (offset, ncf, na)
        offset += ncf * ncm * na

    header = np.zeros(1, dtype=_header_dtype(byteorder))
    header["ttl"][0] = [
        b"JPL Planetary Ephemeris DE430/LE430 (synthetic)".ljust(84),
        f"Start Epoch: JED= {T_START:11.1f}".encode().ljust(84),
        f"Final Epoch: JED= {T_START + n_records * INTERVAL:11.1f}".encode().ljust(84),
    ]
    names = [b""] * 400
    names[10] = b"EMRAT"
    for i in range(9):
        names[11 + i] = f"GM{i + 1}".encode()
    names[20] = b"GMS"
    header["cnam"][0] = names
    header["ss"][0] = [T_START, T_START + n_records * INTERVAL, INTERVAL]
    header["ncon"][0] = 400
    header["au"][0] = AU_KM
    header["emrat"][0] = EMRAT
    written = pointers.copy()
    for slot, pointer in (header_pointers or {}).items():
        written[slot] = pointer
    header["ipt"][0] = written[:12]
    header["numde"][0] = 430
    header["lpt"][0] = written[12]

    cval = np.zeros(400)
    cval[10] = EMRAT
    cval[11:20] = GM_PLANETS
    cval[20] = GM_SUN

    records = np.zeros((n_records, _NCOEFF))
    for r in range(n_records):
        records[r, 0] = T_START + r * INTERVAL
        records[r, 1] = T_START + (r + 1) * INTERVAL
        for slot in range(13):
            start, ncf, na = (int(v) for v in pointers[slot])
            if ncf == 0:
                continue
            ncm = 2 if slot == 11 else 3
            h = INTERVAL / na
            for sub in range(na):
                coeffs = _chebyshev_coefficients(params[slot, :ncm], r * INTERVAL + sub * h, h)
                base = start - 1 + sub * ncm * ncf
                for k in range(ncm):
                    records[r, base + k * ncf : base + k * ncf + 3] = coeffs[k]

    with open(path, "wb") as f:
        f.write(_pad(header.tobytes()))
        f.write(_pad(cval.astype(f"{byteorder}f8").tobytes()))
        f.write(records.astype(f"{byteorder}f8").tobytes())
        f.write(b"\x00" * trailing_bytes)

    return SyntheticEphemeris(path, n_records, pointers, params)


# ---------------------------------------------------------------------------
# Synthetic asteroid perturber files
# ---------------------------------------------------------------------------

ASTEROID_EPOCHS = 3653
GM_SUN_GAUSS = 0.01720209895**2


def write_asteroid_files(
    directory: Path,
    elements: np.ndarray,
    designations: list[str],
    masses: list[float],
    fortran_exponents: bool = False,
) -> None:
    """Write the three perturber text files.

    ``elements`` has shape ``(catalog_size, 6)`` in storage order
    ``[a, e, i, node, argperi, M]`` and is repeated at every epoch, with
    the mean anomaly advanced by one 40-day step of mean motion.
    """
    catalog_size = elements.shape[0]
    # storage -> dump order: argperi before node
    source = elements[:, [0, 1, 2, 4, 3, 5]]
    n = np.sqrt(GM_SUN_GAUSS / source[:, 0] ** 3)

    lines = []
    for j in range(ASTEROID_EPOCHS):
        block = source.copy()
        block[:, 5] = np.mod(source[:, 5] + n * 40.0 * j, 2.0 * np.pi)
        for i in range(catalog_size):
            for value in block[i]:
                text = f"{value:.17E}"
                lines.append(text.replace("E", "D") if fortran_exponents else text)
    (directory / "asteroid_ephemeris.txt").write_text("\n".join(lines) + "\n")
    (directory / "asteroid_indices.txt").write_text("\n".join(designations) + "\n")
    (directory / "asteroid_masses.txt").write_text(
        "\n".join(f"{m:.17E}" for m in masses) + "\n"
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test."""
    set_dtype(jnp.float64)


@pytest.fixture(autouse=True)
def _release_global_datasets():
    """Leave no process-wide dataset loaded between tests."""
    yield
    unload_planetary_ephemeris()
    unload_asteroid_ephemeris()


@pytest.fixture()
def synthetic_ephemeris(tmp_path) -> SyntheticEphemeris:
    """Four-record little-endian synthetic DE430 file."""
    return write_ephemeris_file(tmp_path / "de430_test.dat")


@pytest.fixture()
def ephemeris_file_factory(tmp_path):
    """Factory writing synthetic binary ephemerides into ``tmp_path``."""

    def _factory(name: str = "de430_test.dat", **kwargs) -> SyntheticEphemeris:
        return write_ephemeris_file(tmp_path / name, **kwargs)

    return _factory


@pytest.fixture()
def asteroid_elements() -> np.ndarray:
    """Elements of a four-row catalog, storage order ``[a, e, i, node, argperi, M]``."""
    return np.array([
        [2.7675, 0.0758, 0.1849, 1.4016, 1.2844, 1.6],
        [2.7730, 0.2302, 0.6068, 3.0225, 5.4017, 2.9],
        [2.6680, 0.2572, 0.2264, 2.9299, 4.2601, 0.4],
        [2.3615, 0.0887, 0.1245, 1.8102, 2.6186, 5.9],
    ])


@pytest.fixture()
def asteroid_dir(tmp_path, asteroid_elements) -> Path:
    """Perturber files for a four-row catalog with row 2 commented out."""
    directory = tmp_path / "oorb"
    directory.mkdir()
    write_asteroid_files(
        directory,
        asteroid_elements,
        designations=["1", "#2", "4", "10"],
        masses=[4.7e-10, 1.0e-10, 1.3e-10, 4.3e-11],
    )
    return directory


@pytest.fixture()
def asteroid_files_factory(tmp_path, asteroid_elements):
    """Factory writing perturber files for the four-row catalog."""

    def _factory(
        designations: list[str],
        masses: list[float] | None = None,
        name: str = "oorb",
        fortran_exponents: bool = False,
    ) -> Path:
        directory = tmp_path / name
        directory.mkdir()
        if masses is None:
            masses = [1.0e-10 * (i + 1) for i in range(len(designations))]
        write_asteroid_files(
            directory,
            asteroid_elements,
            designations=designations,
            masses=masses,
            fortran_exponents=fortran_exponents,
        )
        return directory

    return _factory
