"""
Polygons: cyclic vertex lists with plane clipping and quad conversion.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterator, List, Optional, Sequence, Tuple, TypeVar

from meshdicer.epsilon import EpsilonMath, Sign
from meshdicer.geometry import Plane, Vec3d, Vertex

T = TypeVar("T")
P = TypeVar("P")


class CyclicList(Generic[T]):
    """Read-only view of a sequence where every index wraps around."""

    def __init__(self, items: Sequence[T]):
        self._items = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def _to_index(self, cyclic_index: int) -> int:
        return cyclic_index % len(self._items)

    def get(self, i: int) -> T:
        return self._items[self._to_index(i)]

    def sublist(self, begin: int, end: int) -> List[T]:
        """Items from begin (inclusive) to end (exclusive), wrapping past the end."""
        while begin > end:
            end += len(self._items)
        return [self.get(i) for i in range(begin, end)]

    def pairs(self) -> Iterator[Tuple[T, T]]:
        """Every cyclic edge (item[i], item[i + 1]), including the closing one."""
        for i in range(len(self._items)):
            yield self.get(i), self.get(i + 1)


@dataclass(frozen=True)
class Polygon(Generic[P]):
    """
    An ordered, cyclic sequence of at least three vertices.

    The payload is carried through every transform and never inspected.
    """
    vertices: Tuple[Vertex, ...]
    payload: Optional[P] = None

    def __post_init__(self):
        object.__setattr__(self, "vertices", tuple(self.vertices))
        if len(self.vertices) < 3:
            raise ValueError(f"A polygon needs at least 3 vertices, got {len(self.vertices)}")

    def __len__(self) -> int:
        return len(self.vertices)

    def is_quad(self) -> bool:
        return len(self.vertices) == 4

    def _with_vertices(self, vertices: Sequence[Vertex]) -> "Polygon[P]":
        return Polygon(tuple(vertices), self.payload)

    def map_vertices(self, transform: Callable[[Vertex], Vertex]) -> "Polygon[P]":
        return self._with_vertices([transform(v) for v in self.vertices])

    def translate(self, offset: Vec3d) -> "Polygon[P]":
        return self.map_vertices(lambda v: v.translate(offset))

    def split_along(self, plane: Plane, eps: EpsilonMath) -> Dict[Sign, "Polygon[P]"]:
        """
        Clip this polygon against a plane.

        Returns a mapping from side to the part of the polygon on that side.
        A polygon lying in the plane is returned unchanged under Sign.ZERO,
        and a polygon that does not reach past the plane on one side is
        returned unchanged under the other side. Otherwise the polygon is cut
        into a NEGATIVE and a POSITIVE part; vertices on the plane and the
        interpolated crossing points belong to both. Parts with fewer than
        three vertices are dropped.

        Args:
            plane: The cutting plane
            eps: Tolerance used to classify vertices

        Returns:
            Dictionary from Sign to Polygon, containing only non-degenerate parts
        """
        distances = [plane.evaluate(v.position) for v in self.vertices]
        signs = [eps.sign(d) for d in distances]

        if Sign.NEGATIVE not in signs and Sign.POSITIVE not in signs:
            return {Sign.ZERO: self}
        if Sign.NEGATIVE not in signs:
            return {Sign.POSITIVE: self}
        if Sign.POSITIVE not in signs:
            return {Sign.NEGATIVE: self}

        negative: List[Vertex] = []
        positive: List[Vertex] = []
        corners = CyclicList(list(zip(self.vertices, distances, signs)))
        for (vertex, distance, sign), (following, next_distance, next_sign) in corners.pairs():
            if sign != Sign.POSITIVE:
                negative.append(vertex)
            if sign != Sign.NEGATIVE:
                positive.append(vertex)
            if Sign.ZERO not in (sign, next_sign) and sign != next_sign:
                # lam * distance + (1 - lam) * next_distance == 0
                lam = next_distance / (next_distance - distance)
                crossing = Vertex.interpolate(vertex, following, lam)
                negative.append(crossing)
                positive.append(crossing)

        result = {}
        if len(negative) >= 3:
            result[Sign.NEGATIVE] = self._with_vertices(negative)
        if len(positive) >= 3:
            result[Sign.POSITIVE] = self._with_vertices(positive)
        return result

    def quadify(self) -> List["Polygon[P]"]:
        """
        Fan this polygon from its first vertex into quads.

        An n-gon becomes ceil((n - 2) / 2) quads. When the fan runs out of
        vertices the last quad repeats the final vertex, so a triangle becomes
        a quad with a doubled corner.
        """
        if self.is_quad():
            return [self]
        points = CyclicList(self.vertices)
        count = len(points)
        anchor = points.get(0)
        quads = []
        for start in range(1, count - 1, 2):
            fan = points.sublist(start, min(start + 3, count))
            while len(fan) < 3:
                fan.append(fan[-1])
            quads.append(self._with_vertices([anchor] + fan))
        return quads

    def face_normal(self) -> Vec3d:
        first, second, third = self.vertices[:3]
        edge_a = second.position - first.position
        edge_b = third.position - first.position
        return edge_a.cross(edge_b).normalize()

    def recompute_zero_normals(self, eps: EpsilonMath) -> "Polygon[P]":
        """Replace zero-length vertex normals with the face normal."""
        if not any(eps.is_zero(v.normal) for v in self.vertices):
            return self
        normal = self.face_normal()
        return self.map_vertices(
            lambda v: v.with_normal(normal) if eps.is_zero(v.normal) else v
        )
