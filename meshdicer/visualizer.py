"""
Visualization of decomposed cells using matplotlib.
"""

from typing import List, Mapping, Tuple

import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from meshdicer.geometry import GridCell, Vec3d
from meshdicer.mesh import Mesh


def cells_to_world_polygons(cells: Mapping[GridCell, Mesh]) -> List[Tuple[GridCell, np.ndarray]]:
    """
    Move every cell's polygons back to world coordinates.

    Args:
        cells: Mesh per grid cell, in cell-local coordinates

    Returns:
        List of (cell, (n, 3) corner array) pairs, one per polygon
    """
    world = []
    for cell in sorted(cells, key=GridCell.as_tuple):
        placed = cells[cell].translate(Vec3d.from_cell(cell))
        for polygon in placed.polygons:
            corners = np.array([v.position.as_tuple() for v in polygon.vertices])
            world.append((cell, corners))
    return world


def visualize_cells(cells: Mapping[GridCell, Mesh], output_file: str = "cell_visualization.png"):
    """
    Render all cells in world space, one colour per cell.

    Args:
        cells: Mesh per grid cell, in cell-local coordinates
        output_file: Path to save the PNG visualization
    """
    fig = plt.figure(figsize=(12, 9))
    ax = fig.add_subplot(111, projection="3d")

    colormap = plt.get_cmap("tab20")
    cell_order = sorted(cells, key=GridCell.as_tuple)
    colors = {cell: colormap(i % colormap.N) for i, cell in enumerate(cell_order)}

    world = cells_to_world_polygons(cells)
    if world:
        collection = Poly3DCollection(
            [corners for _, corners in world],
            facecolors=[colors[cell] for cell, _ in world],
            edgecolors="k",
            linewidths=0.2,
            alpha=0.7
        )
        ax.add_collection3d(collection)

        all_corners = np.vstack([corners for _, corners in world])
        low = np.floor(all_corners.min(axis=0))
        high = np.ceil(all_corners.max(axis=0))
        ax.set_xlim(low[0], high[0])
        ax.set_ylim(low[1], high[1])
        ax.set_zlim(low[2], high[2])

    # Label each cell at its centre
    for cell in cell_order:
        center = np.array(cell.as_tuple()) + 0.5
        ax.text(center[0], center[1], center[2], str(cell), fontsize=8)

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")
    ax.set_title(f"{len(cells)} cells, {len(world)} polygons")

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    plt.close(fig)


def plot_cell_histogram(cells: Mapping[GridCell, Mesh], output_file: str = "cell_polygons.png"):
    """
    Bar chart of the polygon count in each cell.

    Args:
        cells: Mesh per grid cell
        output_file: Path to save the PNG
    """
    if len(cells) == 0:
        return

    cell_order = sorted(cells, key=GridCell.as_tuple)
    counts = [len(cells[cell]) for cell in cell_order]

    fig, ax = plt.subplots(figsize=(max(6, len(cells) * 0.5), 5))
    ax.bar(range(len(cell_order)), counts, color="steelblue")
    ax.set_xticks(range(len(cell_order)))
    ax.set_xticklabels([str(cell) for cell in cell_order], rotation=90)
    ax.set_xlabel("Cell (x_y_z)")
    ax.set_ylabel("Polygons")
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_file, dpi=150, bbox_inches="tight")
    plt.close(fig)
