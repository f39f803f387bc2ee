from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from .channels import get_channel
from .clock import Clock
from .config import DEFAULT_CONFIG, EngineConfig
from .cooldown import ShareDecision, ShareLedger
from .models import Giveaway

log = logging.getLogger("giveaway-engine")


@dataclass(slots=True)
class AccrualResult:
    giveaway: Giveaway
    awarded: list[str] = field(default_factory=list)
    rejected: dict[str, ShareDecision] = field(default_factory=dict)

    @property
    def entries_awarded(self) -> int:
        return len(self.awarded)


class EntryAccrualEngine:
    """Turn confirmed shares into entry increments.

    Every award goes through the ledger first, so a channel contributes at
    most one entry per cooldown window no matter how often this is called.
    The rank change is a rough simulation, not a real leaderboard position,
    and is applied once per call that awards anything.
    """

    def __init__(
        self,
        ledger: ShareLedger,
        clock: Clock,
        rng: random.Random | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.ledger = ledger
        self.clock = clock
        self.config = config or DEFAULT_CONFIG
        self.rng = rng or random.Random(self.config.rng_seed)

    def improve_rank(self, rank: int | None) -> int:
        current = rank if rank is not None else self.config.default_user_rank
        return max(1, current - self.rng.randint(0, self.config.rank_improvement_max))

    def award_entries(
        self, giveaway: Giveaway, channel_ids: Iterable[str]
    ) -> AccrualResult:
        now = self.clock.now()
        unique = list(dict.fromkeys(channel_ids))
        for channel_id in unique:
            get_channel(channel_id)

        updated = replace(giveaway)
        result = AccrualResult(giveaway=updated)
        for channel_id in unique:
            decision = self.ledger.record_share(giveaway.giveaway_id, channel_id, now)
            if not decision.allowed:
                result.rejected[channel_id] = decision
                continue
            updated.user_entries += 1
            updated.total_entries += 1
            result.awarded.append(channel_id)

        if result.awarded:
            # One rank step per award batch, however many channels it covers.
            updated.user_rank = self.improve_rank(updated.user_rank)
            log.info(
                "Awarded %s entries on giveaway %s via %s",
                len(result.awarded),
                giveaway.giveaway_id,
                ", ".join(result.awarded),
            )
        return result


__all__ = ["AccrualResult", "EntryAccrualEngine"]
