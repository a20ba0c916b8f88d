from __future__ import annotations

from statemachine import State, StateMachine

from tether.core.models import GamePhase, GameState


class GameFSM(StateMachine):
    """FSM wrapper around GameState.

    Phases: menu -> planning -> (planning | game_over); a restart re-enters
    planning from anywhere. The engine computes the next state; the FSM only
    guards which phase changes are legal.

    `GamePhase.resolving` has no state here: nothing transitions into it yet, so
    building an FSM from a state in that phase fails loudly.
    """

    menu = State(GamePhase.menu.value, value=GamePhase.menu.value, initial=True)
    planning = State(GamePhase.planning.value, value=GamePhase.planning.value)
    game_over = State(GamePhase.game_over.value, value=GamePhase.game_over.value)

    start_match = menu.to(planning) | planning.to.itself() | game_over.to(planning)
    turn_resolved = planning.to.itself()
    declare_winner = planning.to(game_over)

    def __init__(self, game: GameState):
        if game.phase is GamePhase.resolving:
            raise ValueError("Phase 'resolving' is reserved and has no transitions")
        self.game = game
        super().__init__(start_value=game.phase.value)

    def sync_phase_to_model(self) -> None:
        self.game.phase = GamePhase(str(self.current_state.value))
