# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "ephemjax"]
#
# [tool.uv.sources]
# ephemjax = { path = ".." }
# ///
"""Tabulate planet and asteroid perturber states from a binary ephemeris.

Loads a JPL/IMCCE binary ephemeris (and optionally the asteroid perturber
dataset), evaluates the states of all planets and the Moon relative to a
chosen center over a span of epochs, and writes them as CSV.

Requires ephemjax to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/planet_states.py [OPTIONS]

Examples:
    # Heliocentric planets from DE430 for ten days
    uv run examples/planet_states.py --ephemeris /data/de430.dat --start 58000 --days 10

    # Geocentric, in km, hourly
    uv run examples/planet_states.py --ephemeris /data/de430.dat --center 3 --step 0.041666 --km

    # Include the first 300 catalogued asteroid perturbers
    uv run examples/planet_states.py --ephemeris /data/de430.dat --asteroids /data/oorb --n-asteroids 300
"""

import csv
import sys
import time
from pathlib import Path
from typing import Annotated

import jax.numpy as jnp
import typer

from ephemjax import body_name, set_dtype
from ephemjax.asteroids import get_asteroid_table, init_asteroid_ephemeris, perturber_states
from ephemjax.errors import EphemerisError
from ephemjax.planetary import ephemeris, init_planetary_ephemeris

set_dtype(jnp.float64)


def main(
    ephemeris_path: Annotated[
        Path | None,
        typer.Option("--ephemeris", help="Binary ephemeris file (default $EPHEMJAX_DATA/de430.dat)"),
    ] = None,
    start: Annotated[float, typer.Option(help="First epoch, MJD (TT)")] = 58000.0,
    days: Annotated[float, typer.Option(help="Span to tabulate in days")] = 1.0,
    step: Annotated[float, typer.Option(help="Step between epochs in days")] = 1.0,
    center: Annotated[int, typer.Option(help="Center body number (1-13)")] = 11,
    km: Annotated[bool, typer.Option(help="Output km and km/s instead of AU and AU/day")] = False,
    asteroids: Annotated[
        Path | None, typer.Option(help="Directory holding the asteroid perturber files")
    ] = None,
    n_asteroids: Annotated[int, typer.Option(help="Asteroid catalog rows to read")] = 0,
    output: Annotated[Path | None, typer.Option(help="CSV output file (default stdout)")] = None,
) -> None:
    """Write planet (and asteroid) states relative to a center as CSV."""
    print("── Loading data ──", file=sys.stderr)
    t0 = time.perf_counter()
    try:
        eph = init_planetary_ephemeris(ephemeris_path)
        n_bodies = init_asteroid_ephemeris(n_asteroids, asteroids) if n_asteroids > 0 else 0
    except EphemerisError as err:
        print(f"ERROR: {err}", file=sys.stderr)
        sys.exit(1)
    print(f"  {eph!r}", file=sys.stderr)
    if n_bodies:
        print(f"  {n_bodies} asteroid perturbers included", file=sys.stderr)
    print(f"  Loaded in {time.perf_counter() - t0:.1f}s", file=sys.stderr)

    names = [body_name(k) for k in range(1, 11)]
    if n_bodies:
        names += [f"({d})" for d in get_asteroid_table().designations]

    epochs = jnp.arange(start, start + days + 0.5 * step, step)
    print(f"\n── Evaluating {epochs.shape[0]} epochs ──", file=sys.stderr)

    handle = open(output, "w", newline="") if output else sys.stdout
    writer = csv.writer(handle)
    writer.writerow(["mjd_tt", "body", "x", "y", "z", "vx", "vy", "vz"])
    t0 = time.perf_counter()
    try:
        for mjd in epochs.tolist():
            states = ephemeris(mjd, -10, center, km=km)
            if n_bodies:
                # Asteroid states are heliocentric AU and AU/day
                sun = ephemeris(mjd, 11, center)
                rows = perturber_states(mjd, n_bodies) + sun
                if km:
                    au = eph.header.au
                    rows = rows * jnp.array([au, au, au, au / 86400.0, au / 86400.0, au / 86400.0])
                states = jnp.concatenate([states, rows])
            for name, row in zip(names, states.tolist()):
                writer.writerow([f"{mjd:.6f}", name, *(f"{v:.15e}" for v in row)])
    except EphemerisError as err:
        print(f"ERROR: {err}", file=sys.stderr)
        sys.exit(1)
    finally:
        if handle is not sys.stdout:
            handle.close()

    print(f"  Done in {time.perf_counter() - t0:.1f}s", file=sys.stderr)


if __name__ == "__main__":
    typer.run(main)
