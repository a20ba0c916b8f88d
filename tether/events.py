from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from tether.core.models import GridNode, PlayerInputs, Role, Vec2
from tether.turn_processing.resolver import TurnOutcome


class EventKind(StrEnum):
    match_started = "match_started"
    turn_resolved = "turn_resolved"
    voidout = "voidout"
    node_touched = "node_touched"
    entangled = "entangled"
    game_over = "game_over"


@dataclass(frozen=True, slots=True)
class MatchStarted:
    kind: ClassVar[EventKind] = EventKind.match_started

    turn: int
    grid_size: int
    gold: int


@dataclass(frozen=True, slots=True)
class TurnResolved:
    kind: ClassVar[EventKind] = EventKind.turn_resolved

    turn: int
    inputs: PlayerInputs
    exhausted: bool
    flux_before: float
    flux_after: float
    spark: Vec2


@dataclass(frozen=True, slots=True)
class Voidout:
    kind: ClassVar[EventKind] = EventKind.voidout

    turn: int
    at: Vec2


@dataclass(frozen=True, slots=True)
class NodeTouched:
    kind: ClassVar[EventKind] = EventKind.node_touched

    turn: int
    node: GridNode
    scored: Role | None


@dataclass(frozen=True, slots=True)
class Entangled:
    kind: ClassVar[EventKind] = EventKind.entangled

    turn: int
    entangled: bool


@dataclass(frozen=True, slots=True)
class GameOver:
    kind: ClassVar[EventKind] = EventKind.game_over

    turn: int
    winner: Role


MatchEvent = MatchStarted | TurnResolved | Voidout | NodeTouched | Entangled | GameOver


def outcome_events(outcome: TurnOutcome, *, spark: Vec2) -> list[MatchEvent]:
    """Events describing one resolved turn, in the order they happened.

    `spark` is where the Spark ended up, which differs from the candidate after
    a voidout.
    """

    events: list[MatchEvent] = [
        TurnResolved(
            turn=outcome.turn,
            inputs=outcome.inputs,
            exhausted=outcome.exhausted,
            flux_before=outcome.flux_before,
            flux_after=outcome.flux_after,
            spark=spark,
        )
    ]

    collision = outcome.collision
    if collision is not None and collision.in_void:
        events.append(Voidout(turn=outcome.turn, at=collision.position))
    elif collision is not None and collision.node is not None:
        events.append(NodeTouched(turn=outcome.turn, node=collision.node, scored=outcome.scored))

    if outcome.winner is not None:
        events.append(GameOver(turn=outcome.turn, winner=outcome.winner))
    return events
