from __future__ import annotations

import logging
import os
import random
from pathlib import Path

from tether.config import config_from_env
from tether.engine import MatchEngine
from tether.scheduler import TickScheduler

logger = logging.getLogger(__name__)

_project_root = Path(__file__).resolve().parent.parent


def configure_logging() -> None:
    level = os.environ.get("TETHER_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO))


def rng_from_env() -> random.Random:
    # TETHER_SEED makes grid layouts reproducible across runs.
    raw = os.environ.get("TETHER_SEED")
    if raw is None or not raw.strip():
        return random.Random()
    return random.Random(int(raw))


def create_engine(*, dotenv_path: Path | None = None) -> MatchEngine:
    """Host wiring: config + rng from the environment (and an optional `.env`)."""

    config = config_from_env(dotenv_path=dotenv_path if dotenv_path is not None else _project_root / ".env")
    return MatchEngine(config=config, rng=rng_from_env())


def create_scheduler(engine: MatchEngine) -> TickScheduler:
    """Must be called with a running event loop if the engine is already in planning."""

    scheduler = TickScheduler(engine)
    scheduler.attach()
    return scheduler
