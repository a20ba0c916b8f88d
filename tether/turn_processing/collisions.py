from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum

from tether.config import DEFAULT_CONFIG, GameConfig
from tether.core.models import Grid, GridNode, Vec2


class CollisionKind(StrEnum):
    void = "void"
    node = "node"
    open = "open"


@dataclass(frozen=True, slots=True)
class Collision:
    """Classification of one candidate position.

    `node` is set exactly when `kind` is `CollisionKind.node`.
    """

    kind: CollisionKind
    position: Vec2
    node: GridNode | None = None

    def __post_init__(self) -> None:
        if (self.kind is CollisionKind.node) != (self.node is not None):
            raise ValueError(f"Collision of kind {self.kind.value} cannot carry node={self.node}")

    @property
    def in_void(self) -> bool:
        return self.kind is CollisionKind.void


def is_void(pos: Vec2, *, grid_size: int, margin: float) -> bool:
    lo = -margin
    hi = grid_size - 1 + margin
    return not (lo <= pos.x <= hi and lo <= pos.y <= hi)


def _touches(node: GridNode, pos: Vec2, half: float) -> bool:
    return node.active and abs(node.x - pos.x) < half and abs(node.y - pos.y) < half


def find_touched_node(pos: Vec2, grid: Grid, *, half_width: float) -> GridNode | None:
    """First active node, in row-major order, whose box around it contains `pos`.

    Below half a cell only the rounded coordinate can qualify, so that one node
    is looked up directly; wider boxes overlap and need the ordered scan.
    """

    if half_width < 0.5:
        node = grid.get((math.floor(pos.x + 0.5), math.floor(pos.y + 0.5)))
        if node is not None and _touches(node, pos, half_width):
            return node
        return None

    for node in grid:
        if _touches(node, pos, half_width):
            return node
    return None


def classify_position(pos: Vec2, grid: Grid, *, config: GameConfig = DEFAULT_CONFIG) -> Collision:
    """Classify a candidate position as void, node touch, or open space.

    The void check runs first and excludes a touch.
    """

    if is_void(pos, grid_size=grid.size, margin=config.void_margin):
        return Collision(CollisionKind.void, pos)

    node = find_touched_node(pos, grid, half_width=config.touch_half_width)
    if node is not None:
        return Collision(CollisionKind.node, pos, node)

    return Collision(CollisionKind.open, pos)
