"""Read-time lifecycle derivation for giveaways.

Nothing here mutates a giveaway. The effective phase and the countdown are
recomputed from the stored record and the instant supplied by the caller, so
a periodic display refresh simply calls these functions again with a newer
``now``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    PHASE_FINISHED,
    PHASE_RUNNING,
    PHASE_SELECTING_WINNER,
    Giveaway,
)
from .validation import (
    InvalidTimestampError,
    InvalidValueError,
    as_utc,
    parse_timestamp,
)

log = logging.getLogger("giveaway-engine")

TAB_ACTIVE = "active"
TAB_EXPIRED = "expired"
TABS = (TAB_ACTIVE, TAB_EXPIRED)

_STATUS_LABELS = {
    PHASE_RUNNING: "LIVE",
    PHASE_SELECTING_WINNER: "SELECTING WINNER",
    PHASE_FINISHED: "FINISHED",
}


def resolve_status(giveaway: Giveaway, now: datetime) -> str:
    """Return the effective phase of ``giveaway`` at ``now``.

    A giveaway that has not started yet is reported as running; the product
    has no separate "upcoming" phase.
    """
    if giveaway.status == PHASE_FINISHED:
        return PHASE_FINISHED
    try:
        starts_at, ends_at = giveaway.window()
    except InvalidTimestampError as exc:
        log.warning(
            "Giveaway %s has a malformed window, keeping stored status %s: %s",
            giveaway.giveaway_id,
            giveaway.status,
            exc,
        )
        return giveaway.status
    now = as_utc(now)
    if now < starts_at:
        return PHASE_RUNNING
    if now > ends_at:
        return PHASE_SELECTING_WINNER
    return giveaway.status


@dataclass(slots=True, frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int
    seconds: int
    is_ended: bool
    is_urgent: bool

    @classmethod
    def ended(cls) -> Countdown:
        return cls(0, 0, 0, 0, is_ended=True, is_urgent=False)

    @property
    def total_seconds(self) -> int:
        return ((self.days * 24 + self.hours) * 60 + self.minutes) * 60 + self.seconds

    def format(self) -> str:
        if self.is_ended:
            return "Ended"
        clock = f"{self.hours:02d}h {self.minutes:02d}m {self.seconds:02d}s"
        if self.days > 0:
            return f"{self.days}d {clock}"
        return clock


def countdown(
    ends_at: str | datetime,
    effective_status: str,
    now: datetime,
    *,
    config: EngineConfig = DEFAULT_CONFIG,
) -> Countdown:
    if effective_status != PHASE_RUNNING:
        return Countdown.ended()
    now = as_utc(now)
    try:
        end = parse_timestamp(ends_at)
    except InvalidTimestampError as exc:
        log.warning("Cannot compute countdown for %r: %s", ends_at, exc)
        return Countdown.ended()

    delta = math.floor((end - now).total_seconds())
    if delta <= 0:
        return Countdown.ended()

    days, remainder = divmod(delta, 86_400)
    hours, remainder = divmod(remainder, 3_600)
    minutes, seconds = divmod(remainder, 60)
    return Countdown(
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        is_ended=False,
        is_urgent=delta < config.urgent_threshold_seconds,
    )


def status_label(phase: str) -> str:
    return _STATUS_LABELS.get(phase, phase.upper())


def filter_giveaways(
    giveaways: Iterable[Giveaway], tab: str, now: datetime
) -> list[Giveaway]:
    if tab not in TABS:
        raise InvalidValueError(f"Unknown giveaway tab: {tab}")
    selected: list[Giveaway] = []
    for giveaway in giveaways:
        phase = resolve_status(giveaway, now)
        if tab == TAB_ACTIVE and phase == PHASE_RUNNING:
            selected.append(giveaway)
        elif tab == TAB_EXPIRED and phase in (PHASE_SELECTING_WINNER, PHASE_FINISHED):
            selected.append(giveaway)
    return selected


__all__ = [
    "TAB_ACTIVE",
    "TAB_EXPIRED",
    "TABS",
    "Countdown",
    "countdown",
    "resolve_status",
    "status_label",
    "filter_giveaways",
]
