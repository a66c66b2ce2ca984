import numpy as np
import pytest

from conftest import make_box
from meshdicer.clumping import clump_model, nearest_cell
from meshdicer.geometry import GridCell, Vec3d
from meshdicer.grid_decomposer import decompose


def test_empty_usable_set_is_rejected(two_cell_box, eps):
    with pytest.raises(ValueError):
        clump_model(decompose(two_cell_box, eps), set())


def test_nearest_cell_minimises_squared_distance():
    usable = [GridCell(5, 0, 0), GridCell(0, 2, 0), GridCell(1, 1, 1)]
    assert nearest_cell(GridCell(0, 0, 0), usable) == GridCell(1, 1, 1)
    assert nearest_cell(GridCell(4, 0, 0), usable) == GridCell(5, 0, 0)


def test_nearest_cell_ties_go_to_first_candidate():
    left, right = GridCell(0, 0, 0), GridCell(2, 0, 0)
    assert nearest_cell(GridCell(1, 0, 0), [left, right]) == left
    assert nearest_cell(GridCell(1, 0, 0), [right, left]) == right


def test_unusable_cell_moves_into_usable_neighbour(two_cell_box, eps):
    parts = decompose(two_cell_box, eps)
    clumped = clump_model(parts, {GridCell(0, 0, 0)})

    assert list(clumped) == [GridCell(0, 0, 0)]
    target = clumped[GridCell(0, 0, 0)]
    # Both fragments kept and merged into the same group
    assert len(target) == 10
    assert list(target.groups) == ["box"]
    # The moved fragment keeps its world position relative to the new cell
    np.testing.assert_allclose(target.bounds(), [[0.25, 0.25, 0.25], [1.75, 0.75, 0.75]])


def test_usable_cells_are_not_translated(two_cell_box, eps):
    parts = decompose(two_cell_box, eps)
    clumped = clump_model(parts, {GridCell(0, 0, 0), GridCell(1, 0, 0)})
    assert dict(clumped) == dict(parts)


def test_clumping_conserves_polygons_and_targets_usable_cells(eps):
    box = make_box((-1.5, 0.2, -0.7), (2.5, 2.4, 1.3))
    parts = decompose(box, eps)
    usable = {GridCell(0, 0, 0), GridCell(0, 1, 0), GridCell(2, 0, -1)}
    clumped = clump_model(parts, usable)

    assert set(clumped) <= usable
    assert sum(len(m) for m in clumped.values()) == sum(len(m) for m in parts.values())


def test_translation_round_trip_is_identity(two_cell_box, eps):
    fragment = decompose(two_cell_box, eps)[GridCell(1, 0, 0)]
    source, target = GridCell(1, 0, 0), GridCell(0, 0, 0)
    there = fragment.translate(Vec3d.from_cell(source - target))
    back = there.translate(Vec3d.from_cell(target - source))
    assert back == fragment


def test_clumped_result_is_read_only(two_cell_box, eps):
    clumped = clump_model(decompose(two_cell_box, eps), [GridCell(0, 0, 0)])
    with pytest.raises(TypeError):
        clumped[GridCell(1, 0, 0)] = two_cell_box
