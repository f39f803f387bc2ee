"""Giveaway entry and share-cooldown engine."""

from .accrual import AccrualResult, EntryAccrualEngine
from .channels import CHANNEL_IDS, CHANNELS, build_share_target, get_channel
from .clock import Clock, ManualClock, SystemClock
from .config import (
    COOLDOWN_WINDOW_HOURS,
    RANK_IMPROVEMENT_MAX,
    URGENT_THRESHOLD_HOURS,
    EngineConfig,
    read_engine_config,
)
from .cooldown import ShareCooldownLedger, ShareDecision, share_status
from .models import (
    PHASE_FINISHED,
    PHASE_RUNNING,
    PHASE_SELECTING_WINNER,
    Giveaway,
    ShareEvent,
    UserStanding,
    Winner,
)
from .status import Countdown, countdown, filter_giveaways, resolve_status
from .store import GiveawayCard, GiveawayStore
from .validation import (
    GiveawayNotFoundError,
    InvalidTimestampError,
    InvalidValueError,
    UnknownChannelError,
)
from .verification import CommitResult, ShareDispatch, VerificationGate

__all__ = [
    "AccrualResult",
    "EntryAccrualEngine",
    "CHANNEL_IDS",
    "CHANNELS",
    "build_share_target",
    "get_channel",
    "Clock",
    "ManualClock",
    "SystemClock",
    "COOLDOWN_WINDOW_HOURS",
    "RANK_IMPROVEMENT_MAX",
    "URGENT_THRESHOLD_HOURS",
    "EngineConfig",
    "read_engine_config",
    "ShareCooldownLedger",
    "ShareDecision",
    "share_status",
    "PHASE_FINISHED",
    "PHASE_RUNNING",
    "PHASE_SELECTING_WINNER",
    "Giveaway",
    "ShareEvent",
    "UserStanding",
    "Winner",
    "Countdown",
    "countdown",
    "filter_giveaways",
    "resolve_status",
    "GiveawayCard",
    "GiveawayStore",
    "GiveawayNotFoundError",
    "InvalidTimestampError",
    "InvalidValueError",
    "UnknownChannelError",
    "CommitResult",
    "ShareDispatch",
    "VerificationGate",
]
