from __future__ import annotations

from tether.core.models import ZERO, GridNode, PlayerInputs, Rotation, Vec2


def linear_force(inputs: PlayerInputs) -> Vec2:
    if inputs.linear is None:
        return ZERO
    return inputs.linear.unit()


def rotational_force(spark: Vec2, rotation: Rotation | None, pivot: GridNode | None) -> Vec2:
    """Unit vector perpendicular to the pivot->spark offset.

    CW maps (x, y) to (-y, x) and CCW maps (x, y) to (y, -x). Without a pivot the
    force is zero even when a rotation was requested.
    """

    if rotation is None or pivot is None:
        return ZERO

    offset = spark - pivot.position
    if rotation is Rotation.cw:
        turned = Vec2(-offset.y, offset.x)
    elif rotation is Rotation.ccw:
        turned = Vec2(offset.y, -offset.x)
    else:
        raise ValueError(f"Unknown rotation: {rotation}")

    mag = turned.length() or 1.0
    return Vec2(turned.x / mag, turned.y / mag)


def compute_displacement(spark: Vec2, inputs: PlayerInputs, pivot: GridNode | None) -> Vec2:
    return linear_force(inputs) + rotational_force(spark, inputs.rotational, pivot)


def compute_next_position(spark: Vec2, inputs: PlayerInputs, pivot: GridNode | None) -> Vec2:
    """One discrete step: both forces are unit-sized and never scaled by time."""

    return spark + compute_displacement(spark, inputs, pivot)
