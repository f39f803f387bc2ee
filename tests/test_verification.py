"""Tests for the share confirmation gate."""

from datetime import timedelta

import pytest

from giveaway_engine.channels import DISPATCH_COPY, DISPATCH_OPEN_URL
from giveaway_engine.models import PHASE_FINISHED, UserStanding
from giveaway_engine.validation import UnknownChannelError
from giveaway_engine.verification import (
    EMPTY_CONFIRMATION_NOTICE,
    NOT_RUNNING_NOTICE,
    OUTCOME_COMMITTED,
    OUTCOME_DUPLICATE,
    OUTCOME_EMPTY,
    STATE_AWAITING_CONFIRMATION,
    STATE_SELECTING,
)

USER = "user-1"


@pytest.fixture
def flow(store, make_giveaway):
    store.add(make_giveaway())
    store.set_standing(USER, "gw-1", UserStanding(entries=12, rank=47))
    return store.open_share_flow(USER, "gw-1")


class TestShareOnChannel:
    def test_dispatch_adds_pending_without_awarding(self, store, flow):
        dispatch = flow.share_on_channel("twitter")

        assert dispatch.allowed is True
        assert dispatch.target.action == DISPATCH_OPEN_URL
        assert flow.state == STATE_AWAITING_CONFIRMATION
        assert flow.pending_channels == ("twitter",)
        assert store.view("gw-1", USER).user_entries == 12
        assert store.ledger(USER).history("gw-1") == []

    def test_copy_channels_return_clipboard_payload(self, flow):
        assert flow.share_on_channel("instagram").target.action == DISPATCH_COPY

    def test_same_channel_twice_is_pending_once(self, flow):
        flow.share_on_channel("telegram")
        flow.share_on_channel("telegram")
        assert flow.pending_entries == 1

    def test_cooling_channel_is_blocked(self, store, clock, flow):
        store.ledger(USER).seed_event("gw-1", "facebook", clock.now() - timedelta(hours=2))

        dispatch = flow.share_on_channel("facebook")

        assert dispatch.allowed is False
        assert dispatch.target is None
        assert dispatch.decision.hours_remaining == 22
        assert dispatch.notice == "Wait 22h before sharing on Facebook again"
        assert flow.pending_entries == 0
        assert flow.state == STATE_SELECTING

    def test_unknown_channel_raises(self, flow):
        with pytest.raises(UnknownChannelError):
            flow.share_on_channel("myspace")

    def test_ended_giveaway_refuses_shares(self, clock, flow):
        clock.advance(days=10)
        dispatch = flow.share_on_channel("twitter")
        assert dispatch.allowed is False
        assert dispatch.notice == NOT_RUNNING_NOTICE

    def test_finished_giveaway_refuses_shares(self, store, make_giveaway):
        store.add(
            make_giveaway(
                "done", status=PHASE_FINISHED, finished_at="2025-09-16T00:00:00Z"
            )
        )
        gate = store.open_share_flow(USER, "done")
        assert gate.share_on_channel("twitter").notice == NOT_RUNNING_NOTICE


class TestConfirmShares:
    def test_confirm_commits_pending_entries(self, store, flow):
        for channel_id in ("twitter", "linkedin", "telegram"):
            flow.share_on_channel(channel_id)

        result = flow.confirm_shares()

        assert result.outcome == OUTCOME_COMMITTED
        assert result.committed is True
        assert result.awarded == ["twitter", "linkedin", "telegram"]
        assert result.notice == (
            "🎉 3 entries added! Thanks for sharing on Twitter, LinkedIn, Telegram."
        )
        assert flow.state == STATE_SELECTING
        assert flow.pending_entries == 0
        view = store.view("gw-1", USER)
        assert view.user_entries == 15
        assert view.total_entries == 103
        assert 37 <= view.user_rank <= 47

    def test_single_entry_notice_is_singular(self, flow):
        flow.share_on_channel("discord")
        assert flow.confirm_shares().notice.startswith("🎉 1 entry added!")

    def test_confirm_with_nothing_pending_is_refused(self, store, flow):
        result = flow.confirm_shares()
        assert result.outcome == OUTCOME_EMPTY
        assert result.notice == EMPTY_CONFIRMATION_NOTICE
        assert store.view("gw-1", USER).user_entries == 12

    def test_double_confirm_is_silent_noop(self, store, flow):
        flow.share_on_channel("twitter")
        flow.confirm_shares()

        again = flow.confirm_shares()

        assert again.outcome == OUTCOME_DUPLICATE
        assert again.notice is None
        assert flow.state == STATE_SELECTING
        assert store.view("gw-1", USER).user_entries == 13

    def test_cancel_discards_pending(self, store, flow):
        flow.share_on_channel("twitter")
        flow.share_on_channel("whatsapp")

        assert flow.cancel() == ("twitter", "whatsapp")
        assert flow.state == STATE_SELECTING
        assert flow.confirm_shares().outcome == OUTCOME_EMPTY
        assert store.view("gw-1", USER).user_entries == 12
        assert store.ledger(USER).can_share("gw-1", "twitter", store.clock.now()).allowed

    def test_share_after_commit_starts_new_batch(self, store, flow):
        flow.share_on_channel("twitter")
        flow.confirm_shares()
        flow.share_on_channel("linkedin")
        assert flow.state == STATE_AWAITING_CONFIRMATION
        assert flow.confirm_shares().awarded == ["linkedin"]
        assert store.view("gw-1", USER).user_entries == 14

    def test_two_flows_cannot_double_award(self, store, flow):
        other = store.open_share_flow(USER, "gw-1")
        flow.share_on_channel("twitter")
        other.share_on_channel("twitter")

        first = flow.confirm_shares()
        second = other.confirm_shares()

        assert first.awarded == ["twitter"]
        assert second.outcome == OUTCOME_COMMITTED
        assert second.awarded == []
        assert "cooling down" in second.notice
        assert store.view("gw-1", USER).user_entries == 13

    def test_other_users_are_unaffected(self, store, flow):
        flow.share_on_channel("twitter")
        flow.confirm_shares()
        assert store.view("gw-1", "someone-else").user_entries == 0
        other = store.open_share_flow("someone-else", "gw-1")
        assert other.share_on_channel("twitter").allowed is True

    def test_cancel_after_commit_makes_next_confirm_empty(self, flow):
        flow.share_on_channel("twitter")
        flow.confirm_shares()
        flow.cancel()
        assert flow.confirm_shares().outcome == OUTCOME_EMPTY

