from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable

from tether.config import DEFAULT_CONFIG, GameConfig
from tether.core.models import (
    Coord,
    EntanglementCharges,
    GamePhase,
    GameSnapshot,
    GameState,
    Grid,
    GridNode,
    NodeKind,
    PlayerInputs,
    Role,
)
from tether.events import Entangled, GameOver, MatchEvent, MatchStarted, Voidout, outcome_events
from tether.fsm import GameFSM
from tether.grid import RandomSource, generate_grid
from tether.input_mapper import IntentEvent, RoleInputMapper
from tether.turn_processing.pivots import find_pivot
from tether.turn_processing.resolver import ResolvedTurn, TurnOutcome, advance

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[GameSnapshot], None]


def new_game_state(*, grid: Grid, config: GameConfig, phase: GamePhase = GamePhase.menu) -> GameState:
    return GameState(
        grid=grid,
        spark=grid.center(),
        flux=config.flux_max,
        timer=config.planning_window,
        phase=phase,
    )


class MatchEngine:
    """Single owner of the match state.

    Contract:
      - intake: `handle_intent` and `toggle_entanglement` (commands), `start_match`.
      - clock: `tick(elapsed)` advances the countdown and resolves expired windows.
      - output: every tick, resolved turn, start, and toggle publishes a `GameSnapshot`.

    Intents only ever touch the pending accumulator; a tick resolves a frozen
    copy of it, so nothing can leak into a turn that is already being resolved.
    """

    def __init__(self, *, config: GameConfig = DEFAULT_CONFIG, rng: RandomSource | None = None) -> None:
        self.config = config
        self._rng: RandomSource = rng if rng is not None else random.Random()
        self._mapper = RoleInputMapper()
        self._state = new_game_state(grid=Grid(config.grid_size), config=config)
        self._listeners: list[SnapshotListener] = []
        # Bounded: a match with no scoring can run indefinitely.
        self.history: deque[MatchEvent] = deque(maxlen=config.history_limit)
        self.last_outcome: TurnOutcome | None = None

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def pending_inputs(self) -> PlayerInputs:
        return self._mapper.pending

    def snapshot(self) -> GameSnapshot:
        state = self._state
        pivot = find_pivot(state.spark, state.grid, min_distance=self.config.pivot_min_distance)
        return GameSnapshot.of(state, pending=self._mapper.pending, pivot=pivot)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a callable that unsubscribes it."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self) -> GameSnapshot:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
        return snap

    def _record(self, *events: MatchEvent) -> None:
        self.history.extend(events)

    def start_match(self) -> GameSnapshot:
        """(Re)start: fresh grid and state, straight into planning."""

        fsm = GameFSM(self._state)
        fsm.start_match()

        grid = generate_grid(rng=self._rng, config=self.config)
        self._state = new_game_state(grid=grid, config=self.config)
        fsm.game = self._state
        fsm.sync_phase_to_model()

        self._mapper.clear()
        self.history.clear()
        self.last_outcome = None
        self._record(MatchStarted(turn=0, grid_size=grid.size, gold=grid.count(NodeKind.gold)))
        logger.info("Match started (grid=%dx%d, gold=%d)", grid.size, grid.size, grid.count(NodeKind.gold))
        return self._publish()

    def handle_intent(self, event: IntentEvent) -> Role | None:
        """Feed a classified intent into the pending window. Dropped outside planning."""

        if self._state.phase is not GamePhase.planning:
            logger.debug("Dropped intent %s in phase %s", event, self._state.phase.value)
            return None
        return self._mapper.route(event, entangled=self._state.entangled)

    def toggle_entanglement(self) -> bool:
        """Swap the input-source mapping, consuming the one shared charge.

        Needs an unspent charge and the planning phase. In the menu or after
        game over it is a no-op (returns False) even with a charge left: there
        is no window to re-route, and a restart rebuilds the charges.
        """

        state = self._state
        if state.phase is not GamePhase.planning or not state.charges.any_available:
            return False

        state.entangled = not state.entangled
        state.charges = EntanglementCharges(linear=False, rotational=False)
        self._record(Entangled(turn=state.turn, entangled=state.entangled))
        logger.info("Entanglement toggled (entangled=%s)", state.entangled)
        self._publish()
        return True

    def convert_node(self, coord: Coord, *, kind: NodeKind | None = None, active: bool | None = None) -> GridNode:
        return self._state.grid.convert(coord, kind=kind, active=active)

    def tick(self, elapsed: float) -> GameSnapshot:
        """Advance the countdown; on expiry resolve the whole turn in one step."""

        prev = self._state
        if prev.phase is not GamePhase.planning:
            return self.snapshot()

        # Peek only; the window is drained once the turn actually resolves.
        result = advance(prev, self._mapper.pending, elapsed, config=self.config)
        if isinstance(result, ResolvedTurn):
            self._mapper.drain()
            self._apply_resolved(prev, result)
        else:
            self._state = result
        return self._publish()

    def _apply_resolved(self, prev: GameState, resolved: ResolvedTurn) -> None:
        outcome = resolved.outcome

        fsm = GameFSM(prev)
        if outcome.winner is not None:
            fsm.declare_winner()
        else:
            fsm.turn_resolved()
        fsm.game = resolved.state
        fsm.sync_phase_to_model()

        self._state = resolved.state
        self.last_outcome = outcome

        events = outcome_events(outcome, spark=self._state.spark)
        self._record(*events)

        if outcome.scored is Role.linear:
            logger.info("Gold collected (linear score=%d)", self._state.linear_score)
        for event in events:
            if isinstance(event, Voidout):
                logger.info(
                    "Voidout on turn %d at (%.2f, %.2f) (rotational score=%d)",
                    event.turn,
                    event.at.x,
                    event.at.y,
                    self._state.rotational_score,
                )
            elif isinstance(event, GameOver):
                logger.info("Match over on turn %d: %s role wins", event.turn, event.winner.value)
