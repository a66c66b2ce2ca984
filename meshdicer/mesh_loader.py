"""
Mesh file loading: builds meshdicer meshes from anything trimesh can read.
"""

import logging
from pathlib import Path
from typing import Dict

import numpy as np
import trimesh

from meshdicer.epsilon import DEFAULT_EPSILON, EpsilonMath
from meshdicer.geometry import UVCoords, Vec3d, Vertex
from meshdicer.mesh import DEFAULT_GROUP, Group, Mesh
from meshdicer.polygon import Polygon

logger = logging.getLogger(__name__)


def _vertex_uvs(tm: trimesh.Trimesh) -> np.ndarray:
    """Per-vertex UVs, or zeros when the mesh carries no texture coordinates."""
    uv = getattr(tm.visual, "uv", None)
    if uv is None or len(uv) != len(tm.vertices):
        return np.zeros((len(tm.vertices), 2))
    return np.asarray(uv, dtype=np.float64)


def _corner_normals(tm: trimesh.Trimesh) -> np.ndarray:
    """
    Normal of every face corner, shaped (faces, 3, 3).

    Vertex normals are only used when the source supplied them (OBJ ``vn``,
    PLY ``nx``); trimesh keeps those in its cache. STL stores one normal per
    facet, so every corner gets its face normal and hard edges stay hard.
    """
    supplied = tm._cache["vertex_normals"]
    if supplied is not None and np.shape(supplied) == tm.vertices.shape:
        return np.asarray(supplied, dtype=np.float64)[tm.faces]
    face_normals = np.asarray(tm.face_normals, dtype=np.float64)
    return np.repeat(face_normals[:, np.newaxis, :], 3, axis=1)


def from_trimesh(
    tm: trimesh.Trimesh,
    name: str = DEFAULT_GROUP,
    eps: EpsilonMath = EpsilonMath(DEFAULT_EPSILON)
) -> Mesh[None]:
    """
    Convert a trimesh object into a single-group mesh.

    Args:
        tm: Source triangle mesh
        name: Name of the resulting group
        eps: Tolerance used to detect zero-length normals

    Returns:
        A Mesh with one group holding a triangle per face
    """
    if len(tm.faces) == 0:
        raise ValueError(f"Geometry '{name}' has no faces")

    positions = np.asarray(tm.vertices, dtype=np.float64)[tm.faces].tolist()
    normals = _corner_normals(tm).tolist()
    uvs = _vertex_uvs(tm)[tm.faces].tolist()

    polygons = [
        Polygon([
            Vertex(Vec3d(*position), Vec3d(*normal), UVCoords(*uv))
            for position, normal, uv in zip(*corners)
        ])
        for corners in zip(positions, normals, uvs)
    ]
    group = Group(name, polygons).recompute_zero_normals(eps)
    return Mesh({name: group})


def from_scene(scene: trimesh.Scene, eps: EpsilonMath = EpsilonMath(DEFAULT_EPSILON)) -> Mesh[None]:
    """Convert a scene into a mesh with one group per geometry node."""
    groups: Dict[str, Group[None]] = {}
    for node in scene.graph.nodes_geometry:
        transform, geometry_name = scene.graph[node]
        geometry = scene.geometry[geometry_name]
        if not isinstance(geometry, trimesh.Trimesh) or len(geometry.faces) == 0:
            logger.warning("Skipping node '%s': no polygon geometry", node)
            continue
        placed = geometry.copy()
        placed.apply_transform(transform)
        groups[str(node)] = from_trimesh(placed, str(node), eps).groups[str(node)]
    return Mesh(groups)


def load_mesh(file_path: str, eps: EpsilonMath = EpsilonMath(DEFAULT_EPSILON)) -> Mesh[None]:
    """
    Load a mesh file and return a meshdicer Mesh.

    Args:
        file_path: Path to the mesh file (STL, OBJ, PLY, GLB, ...)
        eps: Tolerance used to detect zero-length normals

    Returns:
        A Mesh with one group per named geometry in the file
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {file_path}")

    loaded = trimesh.load(str(path))

    if isinstance(loaded, trimesh.Scene):
        mesh = from_scene(loaded, eps)
    elif isinstance(loaded, trimesh.Trimesh):
        mesh = from_trimesh(loaded, path.stem, eps)
    else:
        raise ValueError(f"Failed to load {file_path} as a polygon mesh")

    if mesh.is_empty():
        raise ValueError(f"No polygon geometry found in {file_path}")

    logger.info("Loaded mesh: %d groups, %d polygons", len(mesh.groups), len(mesh))
    logger.info("Bounding box: %s", mesh.bounds().tolist())
    return mesh
