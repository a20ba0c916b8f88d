from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "TETHER_"


class GameConfig(BaseModel):
    """Tunable match constants. Defaults reproduce the standard ruleset."""

    model_config = ConfigDict(frozen=True)

    grid_size: int = Field(10, ge=4, le=64)
    gold_quota: int = Field(5, ge=0)

    flux_max: float = Field(100.0, gt=0)
    flux_regen: float = Field(15.0, ge=0)
    linear_cost: float = Field(15.0, ge=0)
    rotational_cost: float = Field(20.0, ge=0)
    exhaustion_threshold: float = Field(5.0, ge=0)
    void_flux_reset: float = Field(50.0, ge=0)
    multiplier_bonus: float = Field(30.0, ge=0)

    linear_win_score: int = Field(5, ge=1)
    rotational_win_score: int = Field(3, ge=1)

    # Seconds.
    planning_window: float = Field(3.0, gt=0)
    tick_interval: float = Field(1 / 60, gt=0)

    touch_half_width: float = Field(0.4, gt=0)
    void_margin: float = Field(0.5, ge=0)
    pivot_min_distance: float = Field(0.1, ge=0)

    # Most recent match events kept by the engine.
    history_limit: int = Field(256, ge=1)

    @model_validator(mode="after")
    def _check_consistency(self) -> GameConfig:
        if self.void_flux_reset > self.flux_max:
            raise ValueError("void_flux_reset must not exceed flux_max")
        # The safe zone (4x4) is excluded from gold placement.
        if self.gold_quota > self.grid_size * self.grid_size - 16:
            raise ValueError("gold_quota does not fit outside the safe zone")
        return self

    def clamp_flux(self, value: float) -> float:
        return max(0.0, min(self.flux_max, value))


DEFAULT_CONFIG = GameConfig()


def _overrides_from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in GameConfig.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw.strip():
            overrides[name] = raw.strip()
    return overrides


def config_from_env(*, dotenv_path: Path | None = None) -> GameConfig:
    """Build a `GameConfig` from `TETHER_<FIELD>` environment variables.

    If `dotenv_path` exists it is loaded first; variables already present in the
    process environment win over the file.
    """

    if dotenv_path is not None and dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)

    overrides = _overrides_from_env(os.environ)
    if overrides:
        logger.info("Config overrides from environment: %s", ", ".join(sorted(overrides)))
    # Pydantic coerces the raw strings and raises ValidationError on bad values.
    return GameConfig.model_validate(overrides)
