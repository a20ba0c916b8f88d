from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

import pytest

from tether.config import GameConfig
from tether.core.models import GamePhase, GameState, Grid, Vec2
from tether.engine import MatchEngine

T = TypeVar("T")


class ScriptedRandom:
    """Deterministic stand-in for `random.Random`: a fixed draw and first-choice picks."""

    def __init__(self, draw: float) -> None:
        self.draw = draw
        self.choices = 0

    def random(self) -> float:
        return self.draw

    def choice(self, seq: Sequence[T]) -> T:
        self.choices += 1
        return seq[0]


@pytest.fixture()
def scripted_rng() -> type[ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture()
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture()
def empty_grid() -> Grid:
    """10x10 grid of active empty nodes."""

    return Grid.filled(10)


@pytest.fixture()
def planning_state(empty_grid: Grid) -> GameState:
    return GameState(
        grid=empty_grid,
        spark=Vec2(5.0, 5.0),
        flux=100.0,
        timer=3.0,
        phase=GamePhase.planning,
    )


@pytest.fixture()
def engine() -> MatchEngine:
    return MatchEngine(rng=random.Random(1234))
