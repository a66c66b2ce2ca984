"""
Named polygon groups and meshes built from them.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

import numpy as np

from meshdicer.epsilon import EpsilonMath, Sign
from meshdicer.geometry import Plane, Vec3d, Vertex
from meshdicer.polygon import Polygon

P = TypeVar("P")

DEFAULT_GROUP = "default"


@dataclass(frozen=True)
class Group(Generic[P]):
    """A named, non-empty list of polygons."""
    name: str
    polygons: Tuple[Polygon[P], ...]

    def __post_init__(self):
        object.__setattr__(self, "polygons", tuple(self.polygons))
        if not self.polygons:
            raise ValueError(f"Group '{self.name}' must contain at least one polygon")

    def __len__(self) -> int:
        return len(self.polygons)

    def split(self, plane: Plane, eps: EpsilonMath) -> Dict[Sign, "Group[P]"]:
        """Clip every polygon and regroup the parts by side, keeping the group name."""
        parts: Dict[Sign, List[Polygon[P]]] = {}
        for polygon in self.polygons:
            for sign, part in polygon.split_along(plane, eps).items():
                parts.setdefault(sign, []).append(part)
        return {sign: Group(self.name, polygons) for sign, polygons in parts.items()}

    def merge(self, other: "Group[P]") -> "Group[P]":
        return Group(self.name, self.polygons + other.polygons)

    def _flatmap(self, transform: Callable[[Polygon[P]], Iterable[Polygon[P]]]) -> "Group[P]":
        return Group(self.name, [out for polygon in self.polygons for out in transform(polygon)])

    def _map(self, transform: Callable[[Polygon[P]], Polygon[P]]) -> "Group[P]":
        return self._flatmap(lambda polygon: (transform(polygon),))

    def map_vertices(self, transform: Callable[[Vertex], Vertex]) -> "Group[P]":
        return self._map(lambda polygon: polygon.map_vertices(transform))

    def translate(self, offset: Vec3d) -> "Group[P]":
        return self._map(lambda polygon: polygon.translate(offset))

    def quadify(self) -> "Group[P]":
        return self._flatmap(lambda polygon: polygon.quadify())

    def recompute_zero_normals(self, eps: EpsilonMath) -> "Group[P]":
        return self._map(lambda polygon: polygon.recompute_zero_normals(eps))


class Mesh(Generic[P]):
    """
    Immutable mapping from group name to Group.

    A mesh without groups is the empty mesh. Groups are never empty, so a
    mesh is empty exactly when it has no polygons.
    """

    def __init__(self, groups: Optional[Mapping[str, Group[P]]] = None):
        groups = dict(groups or {})
        for name, group in groups.items():
            if group.name != name:
                raise ValueError(f"Group '{group.name}' stored under mismatched name '{name}'")
        self._groups = MappingProxyType(groups)
        self._polygons = tuple(polygon for group in groups.values() for polygon in group.polygons)

    @classmethod
    def empty(cls) -> "Mesh[P]":
        return cls()

    @classmethod
    def from_groups(cls, groups: Iterable[Group[P]]) -> "Mesh[P]":
        """Build a mesh from groups, merging groups that share a name."""
        merged: Dict[str, Group[P]] = {}
        for group in groups:
            merged[group.name] = merged[group.name].merge(group) if group.name in merged else group
        return cls(merged)

    @classmethod
    def from_polygons(cls, polygons: Iterable[Polygon[P]], name: str = DEFAULT_GROUP) -> "Mesh[P]":
        polygons = tuple(polygons)
        if not polygons:
            return cls()
        return cls({name: Group(name, polygons)})

    @property
    def groups(self) -> Mapping[str, Group[P]]:
        return self._groups

    @property
    def polygons(self) -> Tuple[Polygon[P], ...]:
        return self._polygons

    def is_empty(self) -> bool:
        return not self._groups

    def __len__(self) -> int:
        return len(self._polygons)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mesh):
            return NotImplemented
        return dict(self._groups) == dict(other._groups)

    def __repr__(self) -> str:
        return f"Mesh(groups={list(self._groups)}, polygons={len(self._polygons)})"

    @staticmethod
    def union(a: Optional["Mesh[P]"], b: Optional["Mesh[P]"]) -> "Mesh[P]":
        """Merge two meshes group by group; None counts as the empty mesh."""
        groups = []
        for mesh in (a, b):
            if mesh is not None:
                groups.extend(mesh.groups.values())
        return Mesh.from_groups(groups)

    def split(self, plane: Plane, eps: EpsilonMath) -> Dict[Sign, "Mesh[P]"]:
        """
        Split every group along a plane.

        Returns:
            One mesh per Sign; sides nothing landed on map to the empty mesh
        """
        sides: Dict[Sign, List[Group[P]]] = {sign: [] for sign in Sign}
        for group in self._groups.values():
            for sign, part in group.split(plane, eps).items():
                sides[sign].append(part)
        return {sign: Mesh.from_groups(groups) for sign, groups in sides.items()}

    def _map_groups(self, transform: Callable[[Group[P]], Group[P]]) -> "Mesh[P]":
        return Mesh({name: transform(group) for name, group in self._groups.items()})

    def map_vertices(self, transform: Callable[[Vertex], Vertex]) -> "Mesh[P]":
        return self._map_groups(lambda group: group.map_vertices(transform))

    def translate(self, offset: Vec3d) -> "Mesh[P]":
        return self._map_groups(lambda group: group.translate(offset))

    def translate_axis(self, axis: int, amount: float) -> "Mesh[P]":
        return self.translate(Vec3d.axis_unit(axis, amount))

    def quadify(self) -> "Mesh[P]":
        return self._map_groups(lambda group: group.quadify())

    def recompute_zero_normals(self, eps: EpsilonMath) -> "Mesh[P]":
        return self._map_groups(lambda group: group.recompute_zero_normals(eps))

    def positions(self) -> np.ndarray:
        """All vertex positions as an (n, 3) array."""
        return np.array(
            [v.position.as_tuple() for polygon in self._polygons for v in polygon.vertices],
            dtype=np.float64
        ).reshape(-1, 3)

    def bounds(self) -> np.ndarray:
        """
        Axis-aligned bounding box as [[min_x, min_y, min_z], [max_x, max_y, max_z]].

        Raises:
            ValueError: If the mesh is empty
        """
        if self.is_empty():
            raise ValueError("An empty mesh has no bounds")
        positions = self.positions()
        return np.array([positions.min(axis=0), positions.max(axis=0)])

    def extent(self, axis: int) -> Tuple[float, float]:
        bounds = self.bounds()
        return float(bounds[0][axis]), float(bounds[1][axis])
