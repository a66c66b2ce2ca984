"""
Geometric primitives: vectors, grid cells, UV pairs, vertices and planes.
"""

import math
from dataclasses import dataclass
from typing import Tuple


# Vectors shorter than this are left alone by normalize()
NORMALIZE_MIN_LENGTH = 1e-4


@dataclass(frozen=True)
class GridCell:
    """Integer coordinates of a unit lattice cell."""
    x: int
    y: int
    z: int

    def __sub__(self, other: "GridCell") -> "GridCell":
        return GridCell(self.x - other.x, self.y - other.y, self.z - other.z)

    def length_sq(self) -> int:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def distance_sq(self, other: "GridCell") -> int:
        return (self - other).length_sq()

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        return f"{self.x}_{self.y}_{self.z}"


@dataclass(frozen=True)
class Vec3d:
    """Immutable 3D vector with finite components."""
    x: float
    y: float
    z: float

    def __post_init__(self):
        for component in (self.x, self.y, self.z):
            if not math.isfinite(component):
                raise ValueError(f"Vec3d components must be finite, got ({self.x}, {self.y}, {self.z})")

    @classmethod
    def from_cell(cls, cell: GridCell) -> "Vec3d":
        return cls(float(cell.x), float(cell.y), float(cell.z))

    @classmethod
    def axis_unit(cls, axis: int, amount: float = 1.0) -> "Vec3d":
        """Vector with `amount` on the given axis (0=X, 1=Y, 2=Z) and zero elsewhere."""
        coords = [0.0, 0.0, 0.0]
        coords[axis] = amount
        return cls(*coords)

    def get(self, axis: int) -> float:
        if axis == 0:
            return self.x
        elif axis == 1:
            return self.y
        elif axis == 2:
            return self.z
        raise IndexError(f"Unexpected axis index in Vec3d: {axis}")

    def __add__(self, other: "Vec3d") -> "Vec3d":
        return Vec3d(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3d") -> "Vec3d":
        return Vec3d(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vec3d":
        return Vec3d(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> "Vec3d":
        return Vec3d(-self.x, -self.y, -self.z)

    def dot(self, other: "Vec3d") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3d") -> "Vec3d":
        return Vec3d(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def length_squared(self) -> float:
        return self.dot(self)

    def length(self) -> float:
        return math.sqrt(self.length_squared())

    def normalize(self) -> "Vec3d":
        length = self.length()
        if length < NORMALIZE_MIN_LENGTH:
            return self
        return self * (1.0 / length)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


Vec3d.ZERO = Vec3d(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class UVCoords:
    u: float
    v: float

    @staticmethod
    def interpolate(a: "UVCoords", b: "UVCoords", lam: float) -> "UVCoords":
        return UVCoords(
            lam * a.u + (1 - lam) * b.u,
            lam * a.v + (1 - lam) * b.v
        )


UVCoords.ZERO = UVCoords(0.0, 0.0)


@dataclass(frozen=True)
class Vertex:
    """A polygon corner: position, normal and texture coordinates."""
    position: Vec3d
    normal: Vec3d
    uv: UVCoords = UVCoords.ZERO

    @staticmethod
    def interpolate(a: "Vertex", b: "Vertex", lam: float) -> "Vertex":
        """Return lam * a + (1 - lam) * b for every attribute."""
        return Vertex(
            a.position * lam + b.position * (1 - lam),
            a.normal * lam + b.normal * (1 - lam),
            UVCoords.interpolate(a.uv, b.uv, lam)
        )

    def translate(self, offset: Vec3d) -> "Vertex":
        return Vertex(self.position + offset, self.normal, self.uv)

    def with_normal(self, normal: Vec3d) -> "Vertex":
        return Vertex(self.position, normal, self.uv)


@dataclass(frozen=True)
class Plane:
    """The point set {p : normal . p == distance}."""
    normal: Vec3d
    distance: float

    @classmethod
    def axis_aligned(cls, axis: int, position: float) -> "Plane":
        return cls(Vec3d.axis_unit(axis), float(position))

    def evaluate(self, point: Vec3d) -> float:
        """Signed distance of a point, scaled by the normal's length."""
        return self.normal.dot(point) - self.distance
