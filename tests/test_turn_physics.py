from __future__ import annotations

import math

import pytest

from tether.config import GameConfig
from tether.core.models import Direction, Grid, GridNode, NodeKind, PlayerInputs, Rotation, Vec2
from tether.turn_processing.collisions import Collision, CollisionKind, classify_position, is_void
from tether.turn_processing.forces import compute_next_position, rotational_force
from tether.turn_processing.pivots import find_pivot


def test_linear_only_moves_one_cell() -> None:
    inputs = PlayerInputs(linear=Direction.right)

    assert compute_next_position(Vec2(0, 0), inputs, GridNode(x=3, y=3)) == Vec2(1, 0)
    assert compute_next_position(Vec2(0, 0), inputs, None) == Vec2(1, 0)


def test_up_is_negative_y() -> None:
    assert compute_next_position(Vec2(2, 2), PlayerInputs(linear=Direction.up), None) == Vec2(2, 1)


def test_clockwise_rotation_about_pivot() -> None:
    nxt = compute_next_position(Vec2(1, 0), PlayerInputs(rotational=Rotation.cw), GridNode(x=0, y=0))

    assert nxt == Vec2(1, 1)


def test_counterclockwise_rotation_about_pivot() -> None:
    nxt = compute_next_position(Vec2(1, 0), PlayerInputs(rotational=Rotation.ccw), GridNode(x=0, y=0))

    assert nxt == Vec2(1, -1)


def test_rotation_is_normalized_to_unit_length() -> None:
    force = rotational_force(Vec2(3, 0), Rotation.cw, GridNode(x=0, y=0))

    assert force == Vec2(0, 1)


def test_rotation_without_pivot_contributes_nothing() -> None:
    assert compute_next_position(Vec2(2, 3), PlayerInputs(rotational=Rotation.cw), None) == Vec2(2, 3)


def test_zero_offset_rotation_does_not_produce_nan() -> None:
    force = rotational_force(Vec2(0, 0), Rotation.cw, GridNode(x=0, y=0))

    assert not math.isnan(force.x) and not math.isnan(force.y)
    assert force == Vec2(0, 0)


def test_forces_add_up() -> None:
    inputs = PlayerInputs(linear=Direction.right, rotational=Rotation.cw)

    assert compute_next_position(Vec2(3, 0), inputs, GridNode(x=0, y=0)) == Vec2(4, 1)


def test_find_pivot_empty_set_is_none() -> None:
    assert find_pivot(Vec2(1, 1), []) is None


def test_find_pivot_skips_node_under_spark_and_breaks_ties_row_major() -> None:
    grid = Grid.filled(5)

    pivot = find_pivot(Vec2(2, 2), grid)

    # (2,1), (1,2), (3,2), (2,3) are all at distance 1; (2,1) comes first row-major.
    assert pivot is not None
    assert pivot.coord == (2, 1)


def test_find_pivot_picks_strictly_nearest() -> None:
    grid = Grid.filled(5)

    pivot = find_pivot(Vec2(2.05, 2), grid)

    assert pivot is not None
    assert pivot.coord == (3, 2)


def test_find_pivot_considers_inactive_nodes() -> None:
    grid = Grid.filled(3)
    grid.convert((1, 0), active=False)

    pivot = find_pivot(Vec2(1, 0.3), grid)

    assert pivot is not None
    assert pivot.coord == (1, 0)


def test_position_left_of_grid_is_void() -> None:
    grid = Grid.filled(10)

    assert classify_position(Vec2(-1, 5), grid).kind is CollisionKind.void
    assert classify_position(Vec2(10, 5), grid).in_void


def test_void_boundary_is_inclusive() -> None:
    assert not is_void(Vec2(-0.5, 9.5), grid_size=10, margin=0.5)
    assert is_void(Vec2(-0.51, 0), grid_size=10, margin=0.5)


def test_edge_of_margin_is_open_space() -> None:
    grid = Grid.filled(10)

    collision = classify_position(Vec2(9.5, 0), grid)

    assert collision.kind is CollisionKind.open
    assert collision.node is None


def test_touch_uses_axis_aligned_box() -> None:
    grid = Grid.filled(10)

    touched = classify_position(Vec2(4.3, 5.2), grid)
    assert touched.kind is CollisionKind.node
    assert touched.node is not None and touched.node.coord == (4, 5)

    # Corner of the box: a circle of radius 0.4 would miss this, the box does not.
    corner = classify_position(Vec2(2.39, 2.39), grid)
    assert corner.kind is CollisionKind.node

    assert classify_position(Vec2(2.41, 2), grid).kind is CollisionKind.open


def test_inactive_nodes_are_not_touched() -> None:
    grid = Grid.filled(10)
    grid.convert((4, 5), kind=NodeKind.empty, active=False)

    assert classify_position(Vec2(4, 5), grid).kind is CollisionKind.open


def test_wide_touch_box_falls_back_to_row_major_scan() -> None:
    grid = Grid.filled(10)
    wide = GameConfig(touch_half_width=0.6)

    # Both (2, 2) and (3, 2) are within 0.6; the nearer one loses to row-major order.
    first = classify_position(Vec2(2.55, 2), grid, config=wide)
    assert first.node is not None and first.node.coord == (2, 2)

    grid.convert((2, 2), active=False)
    second = classify_position(Vec2(2.55, 2), grid, config=wide)
    assert second.node is not None and second.node.coord == (3, 2)


def test_collision_keeps_classified_position() -> None:
    pos = Vec2(-1, 5)

    assert classify_position(pos, Grid.filled(10)).position == pos


def test_collision_node_is_present_exactly_for_node_kind() -> None:
    with pytest.raises(ValueError) as e:
        Collision(CollisionKind.node, Vec2(1, 1))
    assert "node" in str(e.value)

    with pytest.raises(ValueError):
        Collision(CollisionKind.open, Vec2(1, 1), GridNode(x=1, y=1))
