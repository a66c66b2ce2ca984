import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from meshdicer.epsilon import EpsilonMath
from meshdicer.geometry import UVCoords, Vec3d, Vertex
from meshdicer.mesh import Group, Mesh
from meshdicer.polygon import Polygon


UNIT_UVS = (UVCoords(0, 0), UVCoords(1, 0), UVCoords(1, 1), UVCoords(0, 1))


def make_polygon(points, normal=(0.0, 0.0, 1.0), uvs=None, payload=None):
    uvs = uvs or [UVCoords(0, 0)] * len(points)
    return Polygon(
        [Vertex(Vec3d(*p), Vec3d(*normal), uv) for p, uv in zip(points, uvs)],
        payload
    )


def make_box(low, high, name="box", payload=None):
    """Closed axis-aligned box made of six outward-facing quads."""
    (x0, y0, z0), (x1, y1, z1) = low, high
    faces = [
        ([(x0, y0, z0), (x0, y0, z1), (x0, y1, z1), (x0, y1, z0)], (-1, 0, 0)),
        ([(x1, y0, z0), (x1, y1, z0), (x1, y1, z1), (x1, y0, z1)], (1, 0, 0)),
        ([(x0, y0, z0), (x1, y0, z0), (x1, y0, z1), (x0, y0, z1)], (0, -1, 0)),
        ([(x0, y1, z0), (x0, y1, z1), (x1, y1, z1), (x1, y1, z0)], (0, 1, 0)),
        ([(x0, y0, z0), (x0, y1, z0), (x1, y1, z0), (x1, y0, z0)], (0, 0, -1)),
        ([(x0, y0, z1), (x1, y0, z1), (x1, y1, z1), (x0, y1, z1)], (0, 0, 1)),
    ]
    polygons = [make_polygon(points, normal, UNIT_UVS, payload) for points, normal in faces]
    return Mesh({name: Group(name, polygons)})


def polygon_area(polygon):
    corners = [np.array(v.position.as_tuple()) for v in polygon.vertices]
    total = np.zeros(3)
    for i in range(1, len(corners) - 1):
        total += np.cross(corners[i] - corners[0], corners[i + 1] - corners[0])
    return float(np.linalg.norm(total)) / 2


@pytest.fixture
def eps():
    return EpsilonMath(1e-5)


@pytest.fixture
def unit_quad():
    return make_polygon(
        [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)],
        uvs=UNIT_UVS,
        payload="stone"
    )


@pytest.fixture
def two_cell_box():
    """Box spanning cells (0,0,0) and (1,0,0)."""
    return make_box((0.25, 0.25, 0.25), (1.75, 0.75, 0.75))
