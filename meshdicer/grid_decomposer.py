"""
Decomposition of a mesh into unit grid cells.

The mesh is cut by every integer plane it crosses along X, then each slab
along Z, then each column along Y. Every fragment is moved into the local
frame of its cell, so its coordinates lie in [0, 1] on each axis.
"""

import logging
from functools import reduce
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, TypeVar

from meshdicer.epsilon import DEFAULT_EPSILON, EpsilonMath, Sign
from meshdicer.geometry import GridCell, Plane
from meshdicer.mesh import Mesh

logger = logging.getLogger(__name__)

P = TypeVar("P")

X_AXIS, Y_AXIS, Z_AXIS = 0, 1, 2
AXIS_ORDER = (X_AXIS, Z_AXIS, Y_AXIS)


def _put_section(
    sections: Dict[int, Mesh[P]],
    axis: int,
    section: int,
    section_mesh: Mesh[P]
) -> Dict[int, Mesh[P]]:
    """Store a non-empty slab under its index, shifted so its lower face is at 0."""
    if section_mesh.is_empty():
        return sections
    return {**sections, section: section_mesh.translate_axis(axis, -section)}


def split_in_planes(mesh: Mesh[P], axis: int, eps: EpsilonMath) -> Dict[int, Mesh[P]]:
    """
    Cut a mesh into unit slabs along one axis.

    Geometry lying exactly on a boundary plane is assigned to the slab below
    that boundary.

    Args:
        mesh: The mesh to cut
        axis: Axis index (0=X, 1=Y, 2=Z)
        eps: Tolerance for plane classification and boundary snapping

    Returns:
        Dictionary mapping slab index to the slab in local coordinates
    """
    if mesh.is_empty():
        return {}

    low, high = mesh.extent(axis)
    first_border = eps.ceil(low)
    last_border = eps.floor(high)

    def cut(state: Tuple[Dict[int, Mesh[P]], Mesh[P]], border: int):
        sections, remaining = state
        parts = remaining.split(Plane.axis_aligned(axis, border), eps)
        below = Mesh.union(parts[Sign.NEGATIVE], parts[Sign.ZERO])
        return _put_section(sections, axis, border - 1, below), parts[Sign.POSITIVE]

    sections, remaining = reduce(cut, range(first_border, last_border + 1), ({}, mesh))
    return _put_section(sections, axis, last_border, remaining)


def decompose(mesh: Mesh[P], eps: EpsilonMath = EpsilonMath(DEFAULT_EPSILON)) -> Mapping[GridCell, Mesh[P]]:
    """
    Split a mesh into per-cell fragments.

    Each fragment is translated into its cell's local frame and converted
    to quads. Empty fragments are never emitted.

    Args:
        mesh: The mesh to decompose
        eps: Shared tolerance

    Returns:
        Read-only mapping from GridCell to the fragment in that cell
    """
    parts: Dict[GridCell, Mesh[P]] = {}
    for x, x_slice in split_in_planes(mesh, X_AXIS, eps).items():
        for z, z_column in split_in_planes(x_slice, Z_AXIS, eps).items():
            for y, y_dice in split_in_planes(z_column, Y_AXIS, eps).items():
                parts[GridCell(x, y, z)] = y_dice.quadify()

    logger.debug(
        "Decomposed %d polygons into %d cells", len(mesh), len(parts)
    )
    return MappingProxyType(parts)
