from __future__ import annotations

import random
from datetime import UTC, datetime

import pytest

from giveaway_engine.clock import ManualClock
from giveaway_engine.cooldown import ShareCooldownLedger
from giveaway_engine.models import PHASE_RUNNING, Giveaway
from giveaway_engine.store import GiveawayStore

BASE_TIME = datetime(2025, 9, 10, 12, 0, tzinfo=UTC)


def make_giveaway(
    giveaway_id: str = "gw-1",
    *,
    status: str = PHASE_RUNNING,
    starts_at: str = "2025-09-01T00:00:00Z",
    ends_at: str = "2025-09-15T12:00:00Z",
    **overrides,
) -> Giveaway:
    fields = {
        "giveaway_id": giveaway_id,
        "title": f"Giveaway {giveaway_id}",
        "prize": "$100k Challenge FREE",
        "status": status,
        "starts_at": starts_at,
        "ends_at": ends_at,
        "total_entries": 100,
        "total_participants": 40,
    }
    fields.update(overrides)
    return Giveaway(**fields)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(BASE_TIME)


@pytest.fixture
def ledger() -> ShareCooldownLedger:
    return ShareCooldownLedger()


@pytest.fixture
def store(clock: ManualClock) -> GiveawayStore:
    return GiveawayStore(clock=clock, rng=random.Random(1234))


@pytest.fixture(name="make_giveaway")
def make_giveaway_fixture():
    return make_giveaway
