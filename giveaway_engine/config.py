"""Configuration constants and environment helpers for the share engine."""

from __future__ import annotations

import os
from dataclasses import dataclass

COOLDOWN_WINDOW_HOURS = 24
URGENT_THRESHOLD_HOURS = 24
RANK_IMPROVEMENT_MAX = 10
DEFAULT_USER_RANK = 100

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def env_bool(name: str, *, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def env_int(name: str, *, default: int | None = None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _positive(value: int | None, default: int) -> int:
    if value is None or value <= 0:
        return default
    return value


@dataclass(frozen=True)
class EngineConfig:
    cooldown_window_hours: int = COOLDOWN_WINDOW_HOURS
    urgent_threshold_hours: int = URGENT_THRESHOLD_HOURS
    rank_improvement_max: int = RANK_IMPROVEMENT_MAX
    default_user_rank: int = DEFAULT_USER_RANK
    rng_seed: int | None = None

    @property
    def cooldown_window_seconds(self) -> int:
        return self.cooldown_window_hours * 3600

    @property
    def urgent_threshold_seconds(self) -> int:
        return self.urgent_threshold_hours * 3600


DEFAULT_CONFIG = EngineConfig()


def read_engine_config() -> EngineConfig:
    rank_max = env_int("RANK_IMPROVEMENT_MAX", default=RANK_IMPROVEMENT_MAX)
    if rank_max is None or rank_max < 0:
        rank_max = RANK_IMPROVEMENT_MAX
    return EngineConfig(
        cooldown_window_hours=_positive(
            env_int("SHARE_COOLDOWN_HOURS"), COOLDOWN_WINDOW_HOURS
        ),
        urgent_threshold_hours=_positive(
            env_int("URGENT_THRESHOLD_HOURS"), URGENT_THRESHOLD_HOURS
        ),
        rank_improvement_max=rank_max,
        rng_seed=env_int("RNG_SEED"),
    )


__all__ = [
    "COOLDOWN_WINDOW_HOURS",
    "URGENT_THRESHOLD_HOURS",
    "RANK_IMPROVEMENT_MAX",
    "DEFAULT_USER_RANK",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "env_bool",
    "env_int",
    "read_engine_config",
]
