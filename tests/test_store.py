from datetime import timedelta

import pytest

from giveaway_engine.cooldown import ShareCooldownLedger
from giveaway_engine.models import PHASE_RUNNING, PHASE_SELECTING_WINNER, UserStanding
from giveaway_engine.status import TAB_ACTIVE, TAB_EXPIRED
from giveaway_engine.store import GiveawayStore
from giveaway_engine.validation import GiveawayNotFoundError, InvalidValueError


class TestCatalog:
    def test_add_strips_per_user_fields(self, store, make_giveaway):
        stored = store.add(make_giveaway(user_entries=9, user_rank=3))
        assert stored.user_entries == 0
        assert stored.user_rank is None
        assert len(store) == 1

    def test_add_validates_by_default(self, store, make_giveaway):
        with pytest.raises(InvalidValueError):
            store.add(make_giveaway(status="paused"))
        store.add(make_giveaway(status="paused"), validate=False)
        assert store.get("gw-1").status == "paused"

    def test_unknown_giveaway(self, store):
        with pytest.raises(GiveawayNotFoundError):
            store.get("missing")
        with pytest.raises(GiveawayNotFoundError):
            store.open_share_flow("u", "missing")
        with pytest.raises(GiveawayNotFoundError):
            store.set_standing("u", "missing", UserStanding(1, 1))

    def test_view_returns_copy(self, store, make_giveaway):
        store.add(make_giveaway())
        view = store.view("gw-1")
        view.total_entries = 0
        assert store.get("gw-1").total_entries == 100


class TestPerUserState:
    def test_standing_is_overlaid_on_view(self, store, make_giveaway):
        store.add(make_giveaway())
        store.set_standing("alice", "gw-1", UserStanding(entries=5, rank=10))
        assert store.view("gw-1", "alice").user_entries == 5
        assert store.view("gw-1", "alice").user_rank == 10
        assert store.view("gw-1", "bob").user_entries == 0

    def test_ledger_and_engine_are_cached_per_user(self, store):
        assert store.ledger("alice") is store.ledger("alice")
        assert store.ledger("alice") is not store.ledger("bob")
        assert store.engine("alice").ledger is store.ledger("alice")
        assert store.engine("alice") is store.engine("alice")

    def test_custom_ledger_factory(self, clock):
        created = []

        def factory(user_id):
            created.append(user_id)
            return ShareCooldownLedger()

        store = GiveawayStore(clock=clock, ledger_factory=factory)
        store.ledger("alice")
        store.ledger("alice")
        assert created == ["alice"]

    def test_apply_never_lowers_totals(self, store, make_giveaway):
        store.add(make_giveaway())
        stale = store.view("gw-1", "alice")
        stale.total_entries = 50
        stale.user_entries = 2
        store.apply("alice", stale)
        assert store.get("gw-1").total_entries == 100
        assert store.standing("alice", "gw-1").entries == 2


class TestDerivedViews:
    def test_card_tracks_clock(self, store, clock, make_giveaway):
        store.add(make_giveaway(ends_at="2025-09-11T08:00:00Z"))
        card = store.card("gw-1")
        assert card.phase == PHASE_RUNNING
        assert card.countdown.is_urgent is True

        clock.advance(hours=21)
        assert store.effective_status("gw-1") == PHASE_SELECTING_WINNER
        assert store.countdown("gw-1").is_ended is True
        assert store.get("gw-1").status == PHASE_RUNNING

    def test_board_splits_tabs(self, store, clock, make_giveaway):
        store.add(make_giveaway("a"))
        store.add(make_giveaway("b", ends_at="2025-09-10T13:00:00Z"))
        assert [c.giveaway.giveaway_id for c in store.board(TAB_ACTIVE)] == ["a", "b"]
        clock.advance(hours=2)
        assert [c.giveaway.giveaway_id for c in store.board(TAB_ACTIVE)] == ["a"]
        assert [c.giveaway.giveaway_id for c in store.board(TAB_EXPIRED)] == ["b"]

    def test_tick_snapshots_every_giveaway(self, store, clock, make_giveaway):
        store.add(make_giveaway("a"))
        store.add(make_giveaway("b"))
        first = store.tick()
        clock.advance(seconds=1)
        second = store.tick()
        assert len(first) == 2
        assert (
            first[0].countdown.total_seconds - second[0].countdown.total_seconds == 1
        )

    def test_board_reflects_commits_for_user(self, store, make_giveaway):
        store.add(make_giveaway())
        gate = store.open_share_flow("alice", "gw-1")
        gate.share_on_channel("twitter")
        gate.confirm_shares()
        card = store.board(TAB_ACTIVE, "alice")[0]
        assert card.giveaway.user_entries == 1
        assert card.giveaway.total_entries == 101
        assert store.ledger("alice").can_share(
            "gw-1", "twitter", store.clock.now() + timedelta(hours=1)
        ).allowed is False
