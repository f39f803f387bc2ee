"""Single owner of the mutable giveaway state.

The catalog, each user's standing and each user's share ledger live here and
are handed out to the engine and verification flows. Presentation code only
ever sees copies.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, replace

from .accrual import EntryAccrualEngine
from .clock import Clock, SystemClock
from .config import DEFAULT_CONFIG, EngineConfig
from .cooldown import ShareCooldownLedger, ShareLedger
from .models import Giveaway, UserStanding, validate_giveaway
from .status import TAB_ACTIVE, Countdown, countdown, filter_giveaways, resolve_status
from .validation import GiveawayNotFoundError
from .verification import VerificationGate

log = logging.getLogger("giveaway-engine")


@dataclass(slots=True, frozen=True)
class GiveawayCard:
    giveaway: Giveaway
    phase: str
    countdown: Countdown


class GiveawayStore:
    def __init__(
        self,
        *,
        clock: Clock | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
        ledger_factory: Callable[[str], ShareLedger] | None = None,
    ) -> None:
        self.clock = clock or SystemClock()
        self.config = config or DEFAULT_CONFIG
        self.rng = rng or random.Random(self.config.rng_seed)
        self._ledger_factory = ledger_factory
        self._catalog: dict[str, Giveaway] = {}
        self._standings: dict[tuple[str, str], UserStanding] = {}
        self._ledgers: dict[str, ShareLedger] = {}
        self._engines: dict[str, EntryAccrualEngine] = {}

    # ----- Catalog -----
    def add(self, giveaway: Giveaway, *, validate: bool = True) -> Giveaway:
        if validate:
            validate_giveaway(giveaway)
        base = replace(giveaway, user_entries=0, user_rank=None)
        self._catalog[giveaway.giveaway_id] = base
        return base

    def get(self, giveaway_id: str) -> Giveaway:
        try:
            return self._catalog[giveaway_id]
        except KeyError:
            raise GiveawayNotFoundError(f"Unknown giveaway: {giveaway_id}") from None

    def giveaways(self) -> list[Giveaway]:
        return list(self._catalog.values())

    def __len__(self) -> int:
        return len(self._catalog)

    # ----- Per-user state -----
    def standing(self, user_id: str, giveaway_id: str) -> UserStanding:
        return self._standings.get((user_id, giveaway_id), UserStanding())

    def set_standing(
        self, user_id: str, giveaway_id: str, standing: UserStanding
    ) -> None:
        self.get(giveaway_id)
        self._standings[(user_id, giveaway_id)] = standing

    def view(self, giveaway_id: str, user_id: str | None = None) -> Giveaway:
        base = self.get(giveaway_id)
        if user_id is None:
            return replace(base)
        return base.with_user(self.standing(user_id, giveaway_id))

    def ledger(self, user_id: str) -> ShareLedger:
        ledger = self._ledgers.get(user_id)
        if ledger is None:
            if self._ledger_factory is not None:
                ledger = self._ledger_factory(user_id)
            else:
                ledger = ShareCooldownLedger(self.config)
            self._ledgers[user_id] = ledger
        return ledger

    def engine(self, user_id: str) -> EntryAccrualEngine:
        engine = self._engines.get(user_id)
        if engine is None:
            engine = EntryAccrualEngine(
                self.ledger(user_id), self.clock, rng=self.rng, config=self.config
            )
            self._engines[user_id] = engine
        return engine

    def apply(self, user_id: str, updated: Giveaway) -> None:
        base = self.get(updated.giveaway_id)
        self._catalog[updated.giveaway_id] = replace(
            base,
            total_entries=max(base.total_entries, updated.total_entries),
            total_participants=max(base.total_participants, updated.total_participants),
        )
        self._standings[(user_id, updated.giveaway_id)] = updated.standing()
        log.debug(
            "Giveaway %s now at %s total entries (user %s has %s)",
            updated.giveaway_id,
            self._catalog[updated.giveaway_id].total_entries,
            user_id,
            updated.user_entries,
        )

    def open_share_flow(self, user_id: str, giveaway_id: str) -> VerificationGate:
        self.get(giveaway_id)
        return VerificationGate(
            giveaway_id,
            load=lambda: self.view(giveaway_id, user_id),
            engine=self.engine(user_id),
            on_commit=lambda giveaway: self.apply(user_id, giveaway),
        )

    # ----- Derived, read-only -----
    def effective_status(self, giveaway_id: str) -> str:
        return resolve_status(self.get(giveaway_id), self.clock.now())

    def countdown(self, giveaway_id: str) -> Countdown:
        giveaway = self.get(giveaway_id)
        now = self.clock.now()
        return countdown(
            giveaway.ends_at, resolve_status(giveaway, now), now, config=self.config
        )

    def card(self, giveaway_id: str, user_id: str | None = None) -> GiveawayCard:
        giveaway = self.view(giveaway_id, user_id)
        now = self.clock.now()
        phase = resolve_status(giveaway, now)
        return GiveawayCard(
            giveaway=giveaway,
            phase=phase,
            countdown=countdown(giveaway.ends_at, phase, now, config=self.config),
        )

    def board(
        self, tab: str = TAB_ACTIVE, user_id: str | None = None
    ) -> list[GiveawayCard]:
        now = self.clock.now()
        selected = filter_giveaways(self._catalog.values(), tab, now)
        return [self.card(giveaway.giveaway_id, user_id) for giveaway in selected]

    def tick(self) -> list[GiveawayCard]:
        """Snapshot every giveaway at the current instant."""
        return [self.card(giveaway_id) for giveaway_id in self._catalog]


__all__ = ["GiveawayCard", "GiveawayStore"]
