"""
Reassignment of fragments in unusable cells to the nearest usable cell.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, TypeVar

from meshdicer.geometry import GridCell, Vec3d
from meshdicer.mesh import Mesh

logger = logging.getLogger(__name__)

P = TypeVar("P")


def nearest_cell(cell: GridCell, usable_cells: Iterable[GridCell]) -> GridCell:
    """
    Find the usable cell closest to `cell` by squared Euclidean distance.

    Ties go to the candidate seen first while iterating `usable_cells`.
    """
    best = None
    best_distance = None
    for candidate in usable_cells:
        distance = candidate.distance_sq(cell)
        if best_distance is None or distance < best_distance:
            best, best_distance = candidate, distance
    if best is None:
        raise ValueError("At least one usable cell is required")
    return best


def clump_model(
    parts: Mapping[GridCell, Mesh[P]],
    usable_cells: Iterable[GridCell]
) -> Mapping[GridCell, Mesh[P]]:
    """
    Move every fragment into a cell that can render it.

    Fragments already in a usable cell stay where they are. Others go to the
    nearest usable cell, translated by (source - target) so they keep their
    world position, and are merged with whatever that cell already holds.

    Args:
        parts: Fragments by the cell that physically contains them, in cell-local coordinates
        usable_cells: Cells that can be used to render geometry

    Returns:
        Read-only mapping from usable cell to the geometry it renders

    Raises:
        ValueError: If no usable cells are given
    """
    usable = list(dict.fromkeys(usable_cells))
    if not usable:
        raise ValueError("Cannot clump a model without any usable cells")
    usable_set = set(usable)

    clumped: Dict[GridCell, Mesh[P]] = {}
    moved = 0
    for source, fragment in parts.items():
        target = source
        if source not in usable_set:
            target = nearest_cell(source, usable)
            fragment = fragment.translate(Vec3d.from_cell(source - target))
            moved += 1
        clumped[target] = Mesh.union(clumped.get(target), fragment)

    logger.debug(
        "Clumped %d cells into %d usable cells (%d moved)", len(parts), len(clumped), moved
    )
    return MappingProxyType(clumped)
