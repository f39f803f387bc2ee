"""Per-channel share cooldown bookkeeping.

Each (giveaway, channel) pair cools down on its own: sharing to one platform
never blocks another, and a share on one giveaway never blocks a different
giveaway. The ledger provides no atomic check-and-record across callers; it
is expected to be driven from a single event loop, and ``record_share``
re-validates against the same instant before mutating.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from .config import DEFAULT_CONFIG, EngineConfig
from .models import ShareEvent
from .validation import as_utc

log = logging.getLogger("giveaway-engine")

SHARE_STATE_NEVER = "never"
SHARE_STATE_READY = "ready"
SHARE_STATE_COOLDOWN = "cooldown"


@dataclass(slots=True, frozen=True)
class ShareDecision:
    allowed: bool
    hours_remaining: int
    prior_share_count: int
    last_shared_at: datetime | None


@dataclass(slots=True, frozen=True)
class ShareStatus:
    state: str
    share_count: int
    last_shared_at: datetime | None
    hours_ago: int | None
    hours_until_next: int

    @property
    def can_share(self) -> bool:
        return self.state != SHARE_STATE_COOLDOWN


class ShareLedger(Protocol):
    def can_share(
        self, giveaway_id: str, channel_id: str, now: datetime
    ) -> ShareDecision: ...

    def record_share(
        self, giveaway_id: str, channel_id: str, now: datetime
    ) -> ShareDecision: ...

    def history(self, giveaway_id: str) -> list[ShareEvent]: ...


def decide(
    event: ShareEvent | None, now: datetime, config: EngineConfig = DEFAULT_CONFIG
) -> ShareDecision:
    """Evaluate the cooldown for one ledger row at ``now``."""
    if event is None:
        return ShareDecision(
            allowed=True, hours_remaining=0, prior_share_count=0, last_shared_at=None
        )
    window = timedelta(seconds=config.cooldown_window_seconds)
    elapsed = as_utc(now) - event.timestamp
    if elapsed >= window:
        return ShareDecision(
            allowed=True,
            hours_remaining=0,
            prior_share_count=event.count,
            last_shared_at=event.timestamp,
        )
    remaining = (window - elapsed).total_seconds()
    return ShareDecision(
        allowed=False,
        hours_remaining=max(0, math.ceil(remaining / 3600)),
        prior_share_count=event.count,
        last_shared_at=event.timestamp,
    )


class ShareCooldownLedger:
    """In-memory share history for one user, coalesced to one row per channel."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self._events: dict[str, dict[str, ShareEvent]] = {}

    def _event(self, giveaway_id: str, channel_id: str) -> ShareEvent | None:
        return self._events.get(giveaway_id, {}).get(channel_id)

    def can_share(
        self, giveaway_id: str, channel_id: str, now: datetime
    ) -> ShareDecision:
        return decide(self._event(giveaway_id, channel_id), now, self.config)

    def record_share(
        self, giveaway_id: str, channel_id: str, now: datetime
    ) -> ShareDecision:
        now = as_utc(now)
        decision = self.can_share(giveaway_id, channel_id, now)
        if not decision.allowed:
            log.info(
                "Share on %s for giveaway %s rejected, %sh cooldown remaining",
                channel_id,
                giveaway_id,
                decision.hours_remaining,
            )
            return decision

        channels = self._events.setdefault(giveaway_id, {})
        event = channels.get(channel_id)
        if event is None:
            channels[channel_id] = ShareEvent(channel_id=channel_id, timestamp=now)
        else:
            event.timestamp = now
            event.count += 1
        return decision

    def seed_event(
        self, giveaway_id: str, channel_id: str, timestamp: datetime, count: int = 1
    ) -> None:
        self._events.setdefault(giveaway_id, {})[channel_id] = ShareEvent(
            channel_id=channel_id, timestamp=as_utc(timestamp), count=count
        )

    def history(self, giveaway_id: str) -> list[ShareEvent]:
        events = self._events.get(giveaway_id, {})
        return sorted(events.values(), key=lambda event: event.timestamp)

    def total_shares(self, giveaway_id: str) -> int:
        return sum(event.count for event in self._events.get(giveaway_id, {}).values())


def share_status(
    ledger: ShareLedger, giveaway_id: str, channel_id: str, now: datetime
) -> ShareStatus:
    now = as_utc(now)
    decision = ledger.can_share(giveaway_id, channel_id, now)
    if decision.last_shared_at is None:
        return ShareStatus(
            state=SHARE_STATE_NEVER,
            share_count=0,
            last_shared_at=None,
            hours_ago=None,
            hours_until_next=0,
        )
    hours_ago = int((now - decision.last_shared_at).total_seconds() // 3600)
    return ShareStatus(
        state=SHARE_STATE_READY if decision.allowed else SHARE_STATE_COOLDOWN,
        share_count=decision.prior_share_count,
        last_shared_at=decision.last_shared_at,
        hours_ago=hours_ago,
        hours_until_next=decision.hours_remaining,
    )


def format_time_ago(timestamp: datetime, now: datetime) -> str:
    hours_ago = int((as_utc(now) - as_utc(timestamp)).total_seconds() // 3600)
    if hours_ago < 1:
        return "Just now"
    if hours_ago < 24:
        return f"{hours_ago}h ago"
    return f"{hours_ago // 24}d ago"


__all__ = [
    "SHARE_STATE_NEVER",
    "SHARE_STATE_READY",
    "SHARE_STATE_COOLDOWN",
    "ShareDecision",
    "ShareStatus",
    "ShareLedger",
    "ShareCooldownLedger",
    "decide",
    "share_status",
    "format_time_ago",
]
