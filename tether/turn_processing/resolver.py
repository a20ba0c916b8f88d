from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from tether.config import DEFAULT_CONFIG, GameConfig
from tether.core.models import GamePhase, GameState, GridNode, NodeKind, PlayerInputs, Role, Vec2
from tether.turn_processing.collisions import Collision, CollisionKind, classify_position
from tether.turn_processing.forces import compute_next_position
from tether.turn_processing.pivots import find_pivot

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TurnOutcome:
    """What happened during one resolved turn (for logs, events, and tests)."""

    turn: int
    inputs: PlayerInputs
    exhausted: bool
    flux_before: float
    flux_after: float
    pivot: GridNode | None = None
    candidate: Vec2 | None = None
    collision: Collision | None = None
    scored: Role | None = None
    winner: Role | None = None

    @property
    def voided(self) -> bool:
        return self.collision is not None and self.collision.in_void

    @property
    def touched(self) -> GridNode | None:
        if self.collision is None:
            return None
        return self.collision.node


@dataclass(frozen=True, slots=True)
class ResolvedTurn:
    state: GameState
    outcome: TurnOutcome


def apply_costs(flux: float, inputs: PlayerInputs, *, config: GameConfig) -> float:
    spent = 0.0
    if inputs.linear is not None:
        spent += config.linear_cost
    if inputs.rotational is not None:
        spent += config.rotational_cost
    return config.clamp_flux(flux - spent + config.flux_regen)


def resolve_turn(state: GameState, inputs: PlayerInputs, *, config: GameConfig = DEFAULT_CONFIG) -> ResolvedTurn:
    """Resolve one planning window.

    Pure: `state` is left untouched and a new state (with its own grid index) is
    returned. Steps:
    - exhaustion check on the pre-cost flux
    - costs + regen, clamped
    - movement: pivot -> candidate -> collision -> node/void effects
    - reset timer; winner moves the phase to game over
    """

    grid = state.grid.copy()
    flux_before = state.flux
    exhausted = flux_before <= config.exhaustion_threshold

    flux = apply_costs(flux_before, inputs, config=config)
    spark = state.spark
    linear_score = state.linear_score
    rotational_score = state.rotational_score
    last_voidout = state.last_voidout
    winner = state.winner
    scored: Role | None = None
    pivot: GridNode | None = None
    candidate: Vec2 | None = None
    collision: Collision | None = None

    if not exhausted:
        pivot = find_pivot(state.spark, grid, min_distance=config.pivot_min_distance)
        candidate = compute_next_position(state.spark, inputs, pivot)
        collision = classify_position(candidate, grid, config=config)
        spark = candidate

        if collision.kind is CollisionKind.void:
            rotational_score += 1
            scored = Role.rotational
            spark = grid.center()
            flux = config.clamp_flux(config.void_flux_reset)
            last_voidout = candidate
            if rotational_score >= config.rotational_win_score:
                winner = Role.rotational
        elif collision.kind is CollisionKind.node:
            node = collision.node
            if node is None:
                raise RuntimeError("Node collision without a touched node")
            if node.kind == NodeKind.gold:
                linear_score += 1
                scored = Role.linear
                grid.convert(node.coord, kind=NodeKind.empty, active=False)
                if linear_score >= config.linear_win_score:
                    winner = Role.linear
            elif node.kind == NodeKind.collapser:
                grid.convert(node.coord, kind=NodeKind.empty, active=False)
            elif node.kind == NodeKind.multiplier:
                flux = config.clamp_flux(flux + config.multiplier_bonus)
            elif node.kind in (NodeKind.stable, NodeKind.empty):
                pass
            else:
                raise ValueError(f"Unknown node kind: {node.kind}")
        elif collision.kind is CollisionKind.open:
            pass
        else:
            raise ValueError(f"Unknown collision kind: {collision.kind}")

    turn = state.turn + 1
    next_state = dataclasses.replace(
        state,
        grid=grid,
        spark=spark,
        flux=flux,
        linear_score=linear_score,
        rotational_score=rotational_score,
        last_voidout=last_voidout,
        winner=winner,
        timer=config.planning_window,
        turn=turn,
        phase=GamePhase.game_over if winner is not None else GamePhase.planning,
    )
    outcome = TurnOutcome(
        turn=turn,
        inputs=inputs,
        exhausted=exhausted,
        flux_before=flux_before,
        flux_after=flux,
        pivot=pivot,
        candidate=candidate,
        collision=collision,
        scored=scored,
        winner=winner,
    )
    logger.debug(
        "Turn %d resolved: inputs=%s exhausted=%s spark=(%.2f, %.2f) flux %.1f -> %.1f collision=%s",
        turn,
        inputs,
        exhausted,
        spark.x,
        spark.y,
        flux_before,
        flux,
        collision.kind.value if collision is not None else "-",
    )
    return ResolvedTurn(state=next_state, outcome=outcome)


def advance(
    state: GameState,
    inputs: PlayerInputs,
    elapsed: float,
    *,
    config: GameConfig = DEFAULT_CONFIG,
) -> ResolvedTurn | GameState:
    """Advance the countdown by `elapsed` seconds.

    Returns a `ResolvedTurn` when the window expired this tick, otherwise the
    state with its timer decremented. Outside planning the state is returned
    as-is. Leftover time past expiry is dropped.
    """

    if state.phase is not GamePhase.planning:
        return state

    timer = state.timer - elapsed
    if timer <= 0:
        return resolve_turn(state, inputs, config=config)
    return dataclasses.replace(state, timer=timer)
