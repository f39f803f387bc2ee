"""Configuration helpers for the giveaway bot runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass

from giveaway_engine.config import env_bool, env_int

DEFAULT_BOARD_REFRESH_SECONDS = 60
DEFAULT_VIEW_TIMEOUT_SECONDS = 600


@dataclass(frozen=True)
class ShadowConfig:
    enabled: bool
    channel_id: int | None


def read_shadow_config(*, default_enabled: bool = False) -> ShadowConfig:
    return ShadowConfig(
        enabled=env_bool("SHADOW_MODE", default=default_enabled),
        channel_id=env_int("SHADOW_CHANNEL_ID"),
    )


@dataclass(frozen=True)
class BotSettings:
    discord_token: str
    giveaway_channel_id: int | None
    share_table_name: str | None
    aws_region: str
    board_refresh_seconds: int
    view_timeout_seconds: int
    demo_mode: bool

    @classmethod
    def load(cls) -> BotSettings:
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            raise RuntimeError("Missing env vars: DISCORD_TOKEN")

        refresh = env_int("BOARD_REFRESH_SECONDS", default=DEFAULT_BOARD_REFRESH_SECONDS)
        if refresh is None or refresh <= 0:
            refresh = DEFAULT_BOARD_REFRESH_SECONDS
        timeout = env_int("SHARE_VIEW_TIMEOUT", default=DEFAULT_VIEW_TIMEOUT_SECONDS)
        if timeout is None or timeout <= 0:
            timeout = DEFAULT_VIEW_TIMEOUT_SECONDS

        return cls(
            discord_token=token,
            giveaway_channel_id=env_int("GIVEAWAY_CHANNEL_ID"),
            share_table_name=os.getenv("SHARE_TABLE_NAME") or None,
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            board_refresh_seconds=refresh,
            view_timeout_seconds=timeout,
            demo_mode=env_bool("GIVEAWAY_DEMO", default=False),
        )


__all__ = [
    "DEFAULT_BOARD_REFRESH_SECONDS",
    "DEFAULT_VIEW_TIMEOUT_SECONDS",
    "ShadowConfig",
    "read_shadow_config",
    "BotSettings",
    "env_bool",
    "env_int",
]
