from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from tether.core.models import GamePhase, GameSnapshot
from tether.engine import MatchEngine

logger = logging.getLogger(__name__)


class TickScheduler:
    """Drives `MatchEngine.tick` from an asyncio task while the match is in planning.

    Contract:
      - `attach()` subscribes to the engine so the task is scheduled when planning
        is (re-)entered and unscheduled when the phase leaves it.
      - `tick_once()` measures elapsed time with the injected monotonic clock and
        performs one engine tick; the task just calls it every `interval` seconds.

    Everything runs on one event loop, so the engine has a single writer and
    needs no locking.
    """

    def __init__(
        self,
        engine: MatchEngine,
        *,
        interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine = engine
        self._interval = interval if interval is not None else engine.config.tick_interval
        self._clock = clock
        self._last: float | None = None
        self._task: asyncio.Task[None] | None = None
        self._detach: Callable[[], None] | None = None

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def attach(self) -> None:
        if self._detach is None:
            self._detach = self._engine.subscribe(self._on_snapshot)
        self.sync(self._engine.phase)

    def detach(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None
        self.unschedule()

    def _on_snapshot(self, snap: GameSnapshot) -> None:
        self.sync(snap.phase)

    def sync(self, phase: GamePhase) -> None:
        if phase is GamePhase.planning:
            self.schedule()
        else:
            self.unschedule()

    def schedule(self) -> None:
        if self.is_scheduled:
            return
        self._last = self._clock()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Tick scheduled (interval=%.4fs)", self._interval)

    def unschedule(self) -> None:
        task = self._task
        if task is None or task.done():
            return
        # The loop exits on its own when the phase change came from its own tick.
        if task is not asyncio.current_task():
            task.cancel()
        logger.debug("Tick unscheduled")

    def tick_once(self) -> GameSnapshot:
        now = self._clock()
        elapsed = 0.0 if self._last is None else max(0.0, now - self._last)
        self._last = now
        return self._engine.tick(elapsed)

    async def _run(self) -> None:
        while self._engine.phase is GamePhase.planning:
            await asyncio.sleep(self._interval)
            self.tick_once()
