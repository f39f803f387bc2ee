"""Sample giveaways used by the demo runtime and the simulator."""

from __future__ import annotations

from datetime import datetime, timedelta

from .cooldown import ShareCooldownLedger
from .models import (
    PHASE_FINISHED,
    PHASE_RUNNING,
    Giveaway,
    UserStanding,
    Winner,
)
from .store import GiveawayStore
from .validation import format_timestamp

DEMO_STANDINGS: dict[str, UserStanding] = {
    "ftmo-100k": UserStanding(entries=12, rank=47),
    "apex-200k": UserStanding(entries=8, rank=89),
    "myfundedfx-50k": UserStanding(entries=24, rank=123),
}


def demo_catalog(now: datetime) -> list[Giveaway]:
    def at(**kwargs: float) -> str:
        return format_timestamp(now + timedelta(**kwargs))

    return [
        Giveaway(
            giveaway_id="ftmo-100k",
            title="FTMO $100k Challenge",
            prize="$100k Challenge FREE",
            description=(
                "Win a free FTMO $100k challenge. No purchase required, just share "
                "to enter and earn additional entries."
            ),
            firm="FTMO",
            status=PHASE_RUNNING,
            starts_at=at(days=-9),
            ends_at=at(days=5, hours=12),
            total_entries=2847,
            total_participants=1256,
            share_url="https://coopung.com/giveaway/ftmo-100k",
            rules=(
                "Must be 18+ years old. One entry per person. Winner will be "
                "selected randomly. Prize must be claimed within 30 days."
            ),
        ),
        Giveaway(
            giveaway_id="apex-200k",
            title="Apex Trader $200k Account",
            prize="$200k Funded Account FREE",
            description=(
                "Win a fully funded $200k Apex Trader account with 90% profit split."
            ),
            firm="Apex Trader",
            status=PHASE_RUNNING,
            starts_at=at(days=-4),
            ends_at=at(hours=20),
            total_entries=4521,
            total_participants=2187,
            share_url="https://coopung.com/giveaway/apex-200k",
            rules=(
                "Must be 18+ years old. One entry per person. Winner will be "
                "selected randomly from all valid entries."
            ),
        ),
        Giveaway(
            giveaway_id="myfundedfx-50k",
            title="MyFundedFX $50k Account",
            prize="$50k Funded Account",
            description="Win a fully funded $50k trading account with MyFundedFX.",
            firm="MyFundedFX",
            # Stored phase is stale on purpose: the window has already closed.
            status=PHASE_RUNNING,
            starts_at=at(days=-20),
            ends_at=at(days=-3),
            total_entries=4521,
            total_participants=1876,
            share_url="https://coopung.com/giveaway/myfundedfx-50k",
            rules="Winner must pass a basic trading assessment.",
        ),
        Giveaway(
            giveaway_id="topstep-package",
            title="TopStep Trading Package",
            prize="Free Combine + Reset",
            description=(
                "Complete TopStep trading package including Trader Combine and one "
                "free reset if needed."
            ),
            firm="TopStep",
            status=PHASE_FINISHED,
            starts_at=at(days=-60),
            ends_at=at(days=-30),
            finished_at=at(days=-29),
            total_entries=3124,
            total_participants=1543,
            winner=Winner(name="Alex from California", entries=45),
            share_url="https://coopung.com/giveaway/topstep-package",
            rules="Must be used within 6 months of winning.",
        ),
    ]


def seed_demo_history(ledger: ShareCooldownLedger, now: datetime) -> None:
    ledger.seed_event("ftmo-100k", "facebook", now - timedelta(hours=2))
    ledger.seed_event("ftmo-100k", "twitter", now - timedelta(hours=5))


def load_demo_store(store: GiveawayStore, user_id: str | None = None) -> GiveawayStore:
    now = store.clock.now()
    for giveaway in demo_catalog(now):
        store.add(giveaway)
    if user_id is not None:
        for giveaway_id, standing in DEMO_STANDINGS.items():
            store.set_standing(user_id, giveaway_id, standing)
        ledger = store.ledger(user_id)
        if isinstance(ledger, ShareCooldownLedger):
            seed_demo_history(ledger, now)
    return store


__all__ = ["DEMO_STANDINGS", "demo_catalog", "seed_demo_history", "load_demo_store"]
