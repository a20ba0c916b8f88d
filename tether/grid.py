from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, TypeVar

from tether.config import DEFAULT_CONFIG, GameConfig
from tether.core.models import Grid, GridNode, NodeKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

SAFE_ZONE_SPAN = 4
SAFE_ZONE_STABLE_DRAW = 0.6

# Weighted draw thresholds outside the safe zone, checked in this order.
# The multiplier threshold sits above the collapser one, so a draw that would
# qualify for it is always taken by the collapser branch first.
GOLD_DRAW = 0.96
COLLAPSER_DRAW = 0.85
MULTIPLIER_DRAW = 0.95
STABLE_DRAW = 0.7


class RandomSource(Protocol):
    """Anything that looks like `random.Random` for the calls we make."""

    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


def safe_zone_bounds(grid_size: int) -> tuple[int, int]:
    """Inclusive (lo, hi) bounds of the central 4x4 safe zone on both axes."""

    lo = grid_size // 2 - SAFE_ZONE_SPAN // 2
    return lo, lo + SAFE_ZONE_SPAN - 1


def in_safe_zone(x: int, y: int, *, grid_size: int) -> bool:
    lo, hi = safe_zone_bounds(grid_size)
    return lo <= x <= hi and lo <= y <= hi


def _draw_kind(draw: float, *, gold_count: int, gold_quota: int) -> NodeKind:
    if draw > GOLD_DRAW and gold_count < gold_quota:
        return NodeKind.gold
    if draw > COLLAPSER_DRAW:
        return NodeKind.collapser
    if draw > MULTIPLIER_DRAW:
        return NodeKind.multiplier
    if draw > STABLE_DRAW:
        return NodeKind.stable
    return NodeKind.empty


def generate_grid(*, rng: RandomSource, config: GameConfig = DEFAULT_CONFIG) -> Grid:
    """Build the match grid.

    - Safe zone: only stable or empty nodes, so the spark always has pivots at the start.
    - Elsewhere: one weighted draw per cell.
    - Backfill: random empty cells outside the safe zone become gold until the quota is met.

    The same seeded `rng` always yields the same layout.
    """

    size = config.grid_size
    nodes: list[GridNode] = []
    gold_count = 0

    for y in range(size):
        for x in range(size):
            draw = rng.random()
            if in_safe_zone(x, y, grid_size=size):
                kind = NodeKind.stable if draw > SAFE_ZONE_STABLE_DRAW else NodeKind.empty
            else:
                kind = _draw_kind(draw, gold_count=gold_count, gold_quota=config.gold_quota)
                if kind == NodeKind.gold:
                    gold_count += 1
            nodes.append(GridNode(x=x, y=y, kind=kind))

    grid = Grid(size, nodes)

    backfilled = 0
    while gold_count < config.gold_quota:
        candidates = [
            n
            for n in grid
            if n.kind == NodeKind.empty and not in_safe_zone(n.x, n.y, grid_size=size)
        ]
        if not candidates:
            raise ValueError(f"Cannot place {config.gold_quota} gold nodes: no empty cells left")
        picked = rng.choice(candidates)
        grid.convert(picked.coord, kind=NodeKind.gold)
        gold_count += 1
        backfilled += 1

    logger.debug("Generated %dx%d grid (gold backfilled=%d)", size, size, backfilled)
    return grid
