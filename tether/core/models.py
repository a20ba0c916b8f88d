from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


Coord = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Vec2:
    """A real-valued (x, y) pair used for both positions and displacements.

    Positions are continuous and never snapped to the lattice.
    """

    x: float
    y: float

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)


ZERO = Vec2(0.0, 0.0)


class NodeKind(StrEnum):
    empty = "empty"
    stable = "stable"
    collapser = "collapser"
    multiplier = "multiplier"
    gold = "gold"


class GamePhase(StrEnum):
    menu = "menu"
    planning = "planning"
    # Reserved for a future move animation; the resolution step never enters it.
    resolving = "resolving"
    game_over = "game_over"


class Role(StrEnum):
    linear = "linear"
    rotational = "rotational"


class Direction(StrEnum):
    up = "up"
    down = "down"
    left = "left"
    right = "right"

    def unit(self) -> Vec2:
        # Screen coordinates: y grows downwards.
        if self is Direction.up:
            return Vec2(0.0, -1.0)
        if self is Direction.down:
            return Vec2(0.0, 1.0)
        if self is Direction.left:
            return Vec2(-1.0, 0.0)
        if self is Direction.right:
            return Vec2(1.0, 0.0)
        raise ValueError(f"Unknown direction: {self}")


class Rotation(StrEnum):
    cw = "cw"
    ccw = "ccw"


class InputSource(StrEnum):
    """Physical input sources. Primary starts as the linear role, secondary as rotational."""

    primary = "primary"
    secondary = "secondary"


def role_for_source(source: InputSource, *, entangled: bool) -> Role:
    if source is InputSource.primary:
        return Role.rotational if entangled else Role.linear
    if source is InputSource.secondary:
        return Role.linear if entangled else Role.rotational
    raise ValueError(f"Unknown input source: {source}")


class GridNode(BaseModel):
    """One lattice cell. Frozen: updates go through `Grid.convert`."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    kind: NodeKind = NodeKind.empty
    active: bool = True

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)

    @property
    def position(self) -> Vec2:
        return Vec2(float(self.x), float(self.y))


class Grid:
    """Coordinate-indexed N×N node set.

    Iteration is always in canonical row-major order (y outer, x inner), which
    is the order every tie-break in turn processing relies on.
    """

    __slots__ = ("size", "_nodes")

    def __init__(self, size: int, nodes: Iterable[GridNode] = ()) -> None:
        self.size = size
        self._nodes: dict[Coord, GridNode] = {}
        for node in sorted(nodes, key=lambda n: (n.y, n.x)):
            if node.coord in self._nodes:
                raise ValueError(f"Duplicate node at {node.coord}")
            self._nodes[node.coord] = node

    @classmethod
    def filled(cls, size: int, kind: NodeKind = NodeKind.empty) -> Grid:
        return cls(size, (GridNode(x=x, y=y, kind=kind) for y in range(size) for x in range(size)))

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[GridNode]:
        return iter(self._nodes.values())

    def nodes(self) -> tuple[GridNode, ...]:
        return tuple(self._nodes.values())

    def get(self, coord: Coord) -> GridNode | None:
        return self._nodes.get(coord)

    def count(self, kind: NodeKind) -> int:
        return sum(1 for n in self._nodes.values() if n.kind == kind)

    def convert(self, coord: Coord, *, kind: NodeKind | None = None, active: bool | None = None) -> GridNode:
        """Replace the node at `coord` with a patched copy and return it."""

        node = self._nodes.get(coord)
        if node is None:
            raise ValueError("Node not found")

        update: dict[str, object] = {}
        if kind is not None:
            update["kind"] = kind
        if active is not None:
            update["active"] = active
        patched = node.model_copy(update=update)
        self._nodes[coord] = patched
        return patched

    def copy(self) -> Grid:
        # Nodes are frozen, so a shallow copy of the index is enough.
        clone = Grid(self.size)
        clone._nodes = dict(self._nodes)
        return clone

    def center(self) -> Vec2:
        return Vec2(self.size / 2, self.size / 2)


@dataclass(frozen=True, slots=True)
class PlayerInputs:
    """Intents accumulated over one planning window (at most one per slot)."""

    linear: Direction | None = None
    rotational: Rotation | None = None

    @property
    def is_empty(self) -> bool:
        return self.linear is None and self.rotational is None

    def has(self, role: Role) -> bool:
        if role is Role.linear:
            return self.linear is not None
        if role is Role.rotational:
            return self.rotational is not None
        raise ValueError(f"Unknown role: {role}")


@dataclass(frozen=True, slots=True)
class EntanglementCharges:
    """The single shared entanglement charge, viewed per role."""

    linear: bool = True
    rotational: bool = True

    @property
    def any_available(self) -> bool:
        return self.linear or self.rotational


@dataclass(slots=True)
class GameState:
    """Authoritative match state, owned by `MatchEngine`."""

    grid: Grid
    spark: Vec2
    flux: float
    timer: float
    phase: GamePhase = GamePhase.menu
    linear_score: int = 0
    rotational_score: int = 0
    entangled: bool = False
    charges: EntanglementCharges = field(default_factory=EntanglementCharges)
    last_voidout: Vec2 | None = None
    winner: Role | None = None
    turn: int = 0


class GameSnapshot(BaseModel):
    """Immutable view of `GameState` handed to the rendering collaborator."""

    model_config = ConfigDict(frozen=True)

    phase: GamePhase
    turn: int
    grid_size: int
    nodes: tuple[GridNode, ...]
    spark: Vec2
    flux: float
    linear_score: int
    rotational_score: int
    timer: float
    entangled: bool
    entanglement_available: EntanglementCharges
    last_voidout: Vec2 | None = None
    winner: Role | None = None
    # Node the rotational force would turn around this turn.
    pivot: GridNode | None = None
    # Whether each physical source already has an intent queued this window.
    input_pending: dict[InputSource, bool] = {}

    @classmethod
    def of(
        cls,
        state: GameState,
        *,
        pending: PlayerInputs | None = None,
        pivot: GridNode | None = None,
    ) -> GameSnapshot:
        pending = pending if pending is not None else PlayerInputs()
        return cls(
            phase=state.phase,
            turn=state.turn,
            grid_size=state.grid.size,
            nodes=state.grid.nodes(),
            spark=state.spark,
            flux=state.flux,
            linear_score=state.linear_score,
            rotational_score=state.rotational_score,
            timer=state.timer,
            entangled=state.entangled,
            entanglement_available=state.charges,
            last_voidout=state.last_voidout,
            winner=state.winner,
            pivot=pivot,
            input_pending={
                source: pending.has(role_for_source(source, entangled=state.entangled)) for source in InputSource
            },
        )

    @property
    def can_entangle(self) -> bool:
        return self.entanglement_available.any_available
