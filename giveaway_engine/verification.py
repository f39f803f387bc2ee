"""Confirmation step between asserting a share and committing its entries.

A flow collects the channels a user says they shared to. Nothing is awarded
until the user confirms; cancelling throws the pending set away. A commit is
reported as the ``committed`` outcome and the flow returns to ``selecting``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .accrual import EntryAccrualEngine
from .channels import ShareTarget, build_share_target, channel_name, get_channel
from .cooldown import ShareDecision
from .models import PHASE_RUNNING, Giveaway
from .status import resolve_status

log = logging.getLogger("giveaway-engine")

STATE_SELECTING = "selecting"
STATE_AWAITING_CONFIRMATION = "awaiting-confirmation"

OUTCOME_COMMITTED = "committed"
OUTCOME_EMPTY = "empty"
OUTCOME_DUPLICATE = "duplicate"

EMPTY_CONFIRMATION_NOTICE = "Please share on at least one platform first!"
NOT_RUNNING_NOTICE = "This giveaway is no longer accepting entries."


@dataclass(slots=True, frozen=True)
class ShareDispatch:
    channel_id: str
    allowed: bool
    decision: ShareDecision | None
    target: ShareTarget | None
    notice: str | None = None


@dataclass(slots=True)
class CommitResult:
    outcome: str
    giveaway: Giveaway | None = None
    awarded: list[str] = field(default_factory=list)
    rejected: dict[str, ShareDecision] = field(default_factory=dict)
    notice: str | None = None

    @property
    def committed(self) -> bool:
        return self.outcome == OUTCOME_COMMITTED


def _plural(count: int) -> str:
    return "entry" if count == 1 else "entries"


class VerificationGate:
    def __init__(
        self,
        giveaway_id: str,
        *,
        load: Callable[[], Giveaway],
        engine: EntryAccrualEngine,
        on_commit: Callable[[Giveaway], None] | None = None,
    ) -> None:
        self.giveaway_id = giveaway_id
        self._load = load
        self._engine = engine
        self._on_commit = on_commit
        self._pending: list[str] = []
        self._state = STATE_SELECTING
        self._committed_since_dispatch = False

    @property
    def state(self) -> str:
        return self._state

    @property
    def pending_channels(self) -> tuple[str, ...]:
        return tuple(self._pending)

    @property
    def pending_entries(self) -> int:
        return len(self._pending)

    def share_on_channel(self, channel_id: str) -> ShareDispatch:
        get_channel(channel_id)
        giveaway = self._load()
        now = self._engine.clock.now()

        if resolve_status(giveaway, now) != PHASE_RUNNING:
            return ShareDispatch(
                channel_id=channel_id,
                allowed=False,
                decision=None,
                target=None,
                notice=NOT_RUNNING_NOTICE,
            )

        decision = self._engine.ledger.can_share(self.giveaway_id, channel_id, now)
        if not decision.allowed:
            return ShareDispatch(
                channel_id=channel_id,
                allowed=False,
                decision=decision,
                target=None,
                notice=(
                    f"Wait {decision.hours_remaining}h before sharing on "
                    f"{channel_name(channel_id)} again"
                ),
            )

        if channel_id not in self._pending:
            self._pending.append(channel_id)
        self._state = STATE_AWAITING_CONFIRMATION
        self._committed_since_dispatch = False
        return ShareDispatch(
            channel_id=channel_id,
            allowed=True,
            decision=decision,
            target=build_share_target(channel_id, giveaway),
        )

    def confirm_shares(self) -> CommitResult:
        if not self._pending:
            if self._committed_since_dispatch:
                return CommitResult(outcome=OUTCOME_DUPLICATE)
            return CommitResult(outcome=OUTCOME_EMPTY, notice=EMPTY_CONFIRMATION_NOTICE)

        pending = list(self._pending)
        accrual = self._engine.award_entries(self._load(), pending)
        if self._on_commit is not None:
            self._on_commit(accrual.giveaway)

        self._pending.clear()
        self._state = STATE_SELECTING
        self._committed_since_dispatch = True

        if accrual.awarded:
            names = ", ".join(channel_name(cid) for cid in accrual.awarded)
            count = accrual.entries_awarded
            notice = f"🎉 {count} {_plural(count)} added! Thanks for sharing on {names}."
        else:
            notice = "No new entries: those shares are still cooling down."

        return CommitResult(
            outcome=OUTCOME_COMMITTED,
            giveaway=accrual.giveaway,
            awarded=accrual.awarded,
            rejected=accrual.rejected,
            notice=notice,
        )

    def cancel(self) -> tuple[str, ...]:
        discarded = tuple(self._pending)
        if discarded:
            log.debug(
                "Discarding %s unconfirmed shares on giveaway %s",
                len(discarded),
                self.giveaway_id,
            )
        self._pending.clear()
        self._state = STATE_SELECTING
        self._committed_since_dispatch = False
        return discarded


__all__ = [
    "STATE_SELECTING",
    "STATE_AWAITING_CONFIRMATION",
    "OUTCOME_COMMITTED",
    "OUTCOME_EMPTY",
    "OUTCOME_DUPLICATE",
    "EMPTY_CONFIRMATION_NOTICE",
    "NOT_RUNNING_NOTICE",
    "ShareDispatch",
    "CommitResult",
    "VerificationGate",
]
