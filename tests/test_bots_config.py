"""Tests for bots.config module."""

import os
from unittest import mock

import pytest

from bots.config import (
    DEFAULT_BOARD_REFRESH_SECONDS,
    DEFAULT_VIEW_TIMEOUT_SECONDS,
    BotSettings,
    ShadowConfig,
    read_shadow_config,
)


class TestReadShadowConfig:
    """Test read_shadow_config function."""

    def test_defaults(self):
        """Should be disabled with no channel when nothing is set."""
        with mock.patch.dict(os.environ, {}, clear=True):
            assert read_shadow_config() == ShadowConfig(enabled=False, channel_id=None)

    def test_default_enabled(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            assert read_shadow_config(default_enabled=True).enabled is True

    def test_reads_env(self):
        """Should pick up SHADOW_MODE and SHADOW_CHANNEL_ID."""
        env = {"SHADOW_MODE": "true", "SHADOW_CHANNEL_ID": "555"}
        with mock.patch.dict(os.environ, env, clear=True):
            assert read_shadow_config() == ShadowConfig(enabled=True, channel_id=555)


class TestBotSettings:
    """Test BotSettings.load."""

    def test_missing_token(self):
        """Should refuse to start without a Discord token."""
        with mock.patch.dict(os.environ, {}, clear=True):
            with pytest.raises(RuntimeError, match="DISCORD_TOKEN"):
                BotSettings.load()

    def test_minimal(self):
        with mock.patch.dict(os.environ, {"DISCORD_TOKEN": "t"}, clear=True):
            settings = BotSettings.load()
        assert settings.discord_token == "t"
        assert settings.giveaway_channel_id is None
        assert settings.share_table_name is None
        assert settings.aws_region == "us-east-1"
        assert settings.board_refresh_seconds == DEFAULT_BOARD_REFRESH_SECONDS
        assert settings.view_timeout_seconds == DEFAULT_VIEW_TIMEOUT_SECONDS
        assert settings.demo_mode is False

    def test_full(self):
        env = {
            "DISCORD_TOKEN": "t",
            "GIVEAWAY_CHANNEL_ID": "123",
            "SHARE_TABLE_NAME": "shares",
            "AWS_REGION": "eu-west-1",
            "BOARD_REFRESH_SECONDS": "30",
            "SHARE_VIEW_TIMEOUT": "120",
            "GIVEAWAY_DEMO": "yes",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = BotSettings.load()
        assert settings == BotSettings(
            discord_token="t",
            giveaway_channel_id=123,
            share_table_name="shares",
            aws_region="eu-west-1",
            board_refresh_seconds=30,
            view_timeout_seconds=120,
            demo_mode=True,
        )

    def test_non_positive_intervals_fall_back(self):
        env = {
            "DISCORD_TOKEN": "t",
            "BOARD_REFRESH_SECONDS": "0",
            "SHARE_VIEW_TIMEOUT": "-3",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = BotSettings.load()
        assert settings.board_refresh_seconds == DEFAULT_BOARD_REFRESH_SECONDS
        assert settings.view_timeout_seconds == DEFAULT_VIEW_TIMEOUT_SECONDS
