from __future__ import annotations

import math
from collections.abc import Iterable

from tether.core.models import GridNode, Vec2

# Nodes closer than this are considered "under" the spark and never pivot it.
DEFAULT_MIN_DISTANCE = 0.1


def find_pivot(
    spark: Vec2,
    nodes: Iterable[GridNode],
    *,
    min_distance: float = DEFAULT_MIN_DISTANCE,
) -> GridNode | None:
    """Return the node nearest to the spark, or None when there is none.

    Any node qualifies regardless of kind or active flag. Ties keep the first
    node in iteration order, which for a `Grid` is canonical row-major order.
    """

    nearest: GridNode | None = None
    best = math.inf
    for node in nodes:
        dist = math.hypot(node.x - spark.x, node.y - spark.y)
        if dist <= min_distance:
            continue
        if dist < best:
            best = dist
            nearest = node
    return nearest
