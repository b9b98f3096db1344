"""Rotations between the orbital plane, the ecliptic and the mean equator.

``Rx`` and ``Rz`` are passive (frame) rotations: ``Rz(θ) @ v`` expresses
*v* in a frame rotated by +θ about z.  Orbital-plane vectors are brought
to the ecliptic with the 3-1-3 sequence ``Rz(-Ω) Rx(-i) Rz(-ω)`` and
ecliptic vectors to the mean equator with ``Rx(-ε)``.

All functions accept batched angles; the orbit rotations are vectorised
over bodies with ``jax.vmap``.

References:
    O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
    Applications*, 2012, p.27.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ephemjax.config import get_dtype
from ephemjax.constants import DEG2RAD, OBLIQUITY_PERTURBERS_DEG


def Rx(angle: ArrayLike, use_degrees: bool = False) -> Array:
    """Rotation matrix for a frame rotation about the x-axis.

    Args:
        angle: Counter-clockwise angle of rotation as viewed looking back
            along the positive direction of the rotation axis.
        use_degrees: Interpret ``angle`` in degrees. Default: ``False``

    Returns:
        3x3 rotation matrix.
    """
    angle = jnp.asarray(angle, dtype=get_dtype())
    if use_degrees:
        angle = angle * DEG2RAD

    c = jnp.cos(angle)
    s = jnp.sin(angle)

    return jnp.array([[1.0, 0.0, 0.0],
                      [0.0,  +c,  +s],
                      [0.0,  -s,  +c]])


def Rz(angle: ArrayLike, use_degrees: bool = False) -> Array:
    """Rotation matrix for a frame rotation about the z-axis.

    Args:
        angle: Counter-clockwise angle of rotation as viewed looking back
            along the positive direction of the rotation axis.
        use_degrees: Interpret ``angle`` in degrees. Default: ``False``

    Returns:
        3x3 rotation matrix.
    """
    angle = jnp.asarray(angle, dtype=get_dtype())
    if use_degrees:
        angle = angle * DEG2RAD

    c = jnp.cos(angle)
    s = jnp.sin(angle)

    return jnp.array([[ +c,  +s, 0.0],
                      [ -s,  +c, 0.0],
                      [0.0, 0.0, 1.0]])


def rotation_orbital_to_ecliptic(incl: ArrayLike, node: ArrayLike, argp: ArrayLike) -> Array:
    """Rotation from the perifocal (orbital-plane) frame to the ecliptic.

    Equal to ``Rz(-node) @ Rx(-incl) @ Rz(-argp)``.

    Args:
        incl: Inclination. Units: *rad*
        node: Longitude of the ascending node. Units: *rad*
        argp: Argument of pericenter. Units: *rad*

    Returns:
        Rotation matrix, shape ``(3, 3)``.
    """
    return Rz(-node) @ (Rx(-incl) @ Rz(-argp))


_rotation_orbital_to_ecliptic_batch = jax.vmap(rotation_orbital_to_ecliptic)


def states_orbital_to_ecliptic(
    states: ArrayLike, incl: ArrayLike, node: ArrayLike, argp: ArrayLike
) -> Array:
    """Rotate a batch of perifocal states into the ecliptic frame.

    Args:
        states: Perifocal states, shape ``(n, 6)``.
        incl: Inclinations, shape ``(n,)``. Units: *rad*
        node: Ascending nodes, shape ``(n,)``. Units: *rad*
        argp: Arguments of pericenter, shape ``(n,)``. Units: *rad*

    Returns:
        Ecliptic states, shape ``(n, 6)``.
    """
    dtype = get_dtype()
    states = jnp.asarray(states, dtype=dtype)
    R = _rotation_orbital_to_ecliptic_batch(
        jnp.asarray(incl, dtype=dtype),
        jnp.asarray(node, dtype=dtype),
        jnp.asarray(argp, dtype=dtype),
    )
    r = jnp.einsum("nij,nj->ni", R, states[:, :3])
    v = jnp.einsum("nij,nj->ni", R, states[:, 3:6])
    return jnp.concatenate([r, v], axis=1)


def rotation_ecliptic_to_equatorial(obliquity_deg: float = OBLIQUITY_PERTURBERS_DEG) -> Array:
    """Rotation from the ecliptic to the mean equatorial frame, ``Rx(-ε)``.

    Args:
        obliquity_deg: Mean obliquity of the ecliptic. Units: *deg*

    Returns:
        Rotation matrix, shape ``(3, 3)``.
    """
    return Rx(-obliquity_deg, use_degrees=True)


def states_ecliptic_to_equatorial(
    states: ArrayLike, obliquity_deg: float = OBLIQUITY_PERTURBERS_DEG
) -> Array:
    """Rotate a batch of ecliptic states into the mean equatorial frame.

    Args:
        states: Ecliptic states, shape ``(n, 6)``.
        obliquity_deg: Mean obliquity of the ecliptic. Units: *deg*

    Returns:
        Equatorial states, shape ``(n, 6)``.
    """
    states = jnp.asarray(states, dtype=get_dtype())
    R = rotation_ecliptic_to_equatorial(obliquity_deg)
    return jnp.concatenate([states[:, :3] @ R.T, states[:, 3:6] @ R.T], axis=1)
