"""
Cell export - converting per-cell meshes back to trimesh and writing them out.
"""

import logging
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import numpy as np
import trimesh
from scipy.spatial.transform import Rotation

from meshdicer.epsilon import DEFAULT_EPSILON, EpsilonMath
from meshdicer.geometry import GridCell, Vec3d, Vertex
from meshdicer.mesh import Group, Mesh

logger = logging.getLogger(__name__)

CELL_CENTER = np.array([0.5, 0.5, 0.5])


def _collapse_repeats(vertices: Sequence[Vertex]) -> List[Vertex]:
    """Drop vertices equal to their cyclic predecessor (quads padded from triangles)."""
    corners = [v for i, v in enumerate(vertices) if i == 0 or v != vertices[i - 1]]
    while len(corners) > 1 and corners[-1] == corners[0]:
        corners.pop()
    return corners


def to_trimesh(group: Group) -> trimesh.Trimesh:
    """
    Convert a group to a triangle mesh.

    Every polygon is fan-triangulated from its first corner. Corners are not
    shared between polygons, so normals and UVs survive unchanged.

    Args:
        group: The group to convert

    Returns:
        A trimesh.Trimesh carrying vertex normals and UV coordinates
    """
    positions, normals, uvs, faces = [], [], [], []
    for polygon in group.polygons:
        corners = _collapse_repeats(polygon.vertices)
        if len(corners) < 3:
            continue
        base = len(positions)
        for v in corners:
            positions.append(v.position.as_tuple())
            normals.append(v.normal.as_tuple())
            uvs.append((v.uv.u, v.uv.v))
        for i in range(1, len(corners) - 1):
            faces.append([base, base + i, base + i + 1])

    tm = trimesh.Trimesh(
        vertices=np.array(positions, dtype=np.float64).reshape(-1, 3),
        faces=np.array(faces, dtype=np.int64).reshape(-1, 3),
        vertex_normals=np.array(normals, dtype=np.float64).reshape(-1, 3),
        visual=trimesh.visual.TextureVisuals(uv=np.array(uvs, dtype=np.float64).reshape(-1, 2)),
        process=False
    )
    tm.metadata["name"] = group.name
    return tm


def to_scene(mesh: Mesh) -> trimesh.Scene:
    """Convert a mesh to a scene holding one geometry per group."""
    scene = trimesh.Scene()
    for name, group in mesh.groups.items():
        scene.add_geometry(to_trimesh(group), geom_name=name, node_name=name)
    return scene


def rotation_from_degrees(angles: Sequence[float]) -> Rotation:
    """Build a rotation from X, Y, Z angles in degrees (extrinsic xyz)."""
    return Rotation.from_euler("xyz", list(angles), degrees=True)


def rotate_about_cell_center(mesh: Mesh, rotation: Rotation, eps: EpsilonMath) -> Mesh:
    """
    Rotate a cell-local mesh about the centre of its cell.

    Positions that end up within epsilon of a cell face (0 or 1) are snapped
    onto it, so faces lying on the cell boundary stay exactly there.

    Args:
        mesh: Mesh in cell-local coordinates
        rotation: The rotation to apply
        eps: Snapping tolerance

    Returns:
        The rotated mesh
    """
    if rotation.magnitude() < eps.epsilon:
        return mesh

    def rotate(vertex: Vertex) -> Vertex:
        position = rotation.apply(np.array(vertex.position.as_tuple()) - CELL_CENTER) + CELL_CENTER
        for face in (0.0, 1.0):
            position = np.where(np.abs(position - face) < eps.epsilon, face, position)
        normal = rotation.apply(np.array(vertex.normal.as_tuple()))
        return Vertex(Vec3d(*position.tolist()), Vec3d(*normal.tolist()), vertex.uv)

    return mesh.map_vertices(rotate)


def cell_file_name(stem: str, cell: GridCell, file_type: str) -> str:
    return f"{stem}_{cell}.{file_type.lstrip('.')}"


def export_cells(
    cells: Mapping[GridCell, Mesh],
    output_dir: str,
    stem: str,
    file_type: str = "obj",
    rotation: Optional[Rotation] = None,
    eps: EpsilonMath = EpsilonMath(DEFAULT_EPSILON)
) -> List[Path]:
    """
    Write one file per cell.

    Args:
        cells: Mesh per grid cell, in cell-local coordinates
        output_dir: Directory to write to (created if missing)
        stem: Prefix of every file name
        file_type: Any export format trimesh supports for scenes
        rotation: Optional model-space rotation about the cell centre
        eps: Snapping tolerance for the rotation

    Returns:
        Paths of the written files, in cell order
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    written = []
    for cell in sorted(cells, key=GridCell.as_tuple):
        mesh = cells[cell]
        if mesh.is_empty():
            continue
        if rotation is not None:
            mesh = rotate_about_cell_center(mesh, rotation, eps)
        path = out / cell_file_name(stem, cell, file_type)
        to_scene(mesh).export(str(path))
        logger.info("  Cell %s: %d polygons -> %s", cell, len(mesh), path.name)
        written.append(path)

    return written
