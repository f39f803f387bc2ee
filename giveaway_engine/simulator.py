"""Run a scripted share flow against the demo catalog from the CLI."""

from __future__ import annotations

import argparse
import random
from datetime import UTC, datetime

from giveaway_engine.channels import CHANNEL_IDS, channel_name
from giveaway_engine.clock import ManualClock
from giveaway_engine.cooldown import format_time_ago, share_status
from giveaway_engine.seed import load_demo_store
from giveaway_engine.status import TAB_ACTIVE, TABS, status_label
from giveaway_engine.store import GiveawayStore
from giveaway_engine.validation import InvalidValueError, parse_timestamp

DEFAULT_BASE_TIME = datetime(2025, 9, 10, 12, tzinfo=UTC)
SIM_USER = "sim-user"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate sharing a giveaway and confirming the entries"
    )
    parser.add_argument("--seed", type=int, default=7, help="Seed for rank simulation")
    parser.add_argument(
        "--giveaway",
        default="ftmo-100k",
        help="Giveaway id to share (defaults to the first demo giveaway)",
    )
    parser.add_argument(
        "--channels",
        default="twitter,linkedin,telegram",
        help="Comma separated channel ids to share on",
    )
    parser.add_argument(
        "--advance-hours",
        type=float,
        default=0.0,
        help="Move the clock forward before sharing",
    )
    parser.add_argument("--tab", choices=TABS, default=TAB_ACTIVE)
    parser.add_argument(
        "--base-time",
        type=str,
        default=DEFAULT_BASE_TIME.isoformat().replace("+00:00", "Z"),
        help="Simulation start instant (ISO-8601)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def render_board(store: GiveawayStore, tab: str) -> list[str]:
    lines = [f"=== {tab.title()} giveaways @ {store.clock.now().isoformat()} ==="]
    for card in store.board(tab, SIM_USER):
        giveaway = card.giveaway
        line = (
            f"[{status_label(card.phase)}] {giveaway.title}: "
            f"{giveaway.total_entries} entries"
        )
        if not card.countdown.is_ended:
            urgent = " (ending soon)" if card.countdown.is_urgent else ""
            line += f", ends in {card.countdown.format()}{urgent}"
        if giveaway.user_entries:
            line += f", you have {giveaway.user_entries} (rank #{giveaway.user_rank})"
        if giveaway.winner is not None:
            line += f", winner {giveaway.winner.name}"
        lines.append(line)
    return lines


def run(args: argparse.Namespace) -> list[str]:
    base_time = parse_timestamp(args.base_time)
    clock = ManualClock(base_time)
    store = GiveawayStore(clock=clock, rng=random.Random(args.seed))
    load_demo_store(store, SIM_USER)

    if args.advance_hours:
        clock.advance(hours=args.advance_hours)

    output = render_board(store, args.tab)
    output.append("")
    ledger = store.ledger(SIM_USER)
    for channel_id in CHANNEL_IDS:
        status = share_status(ledger, args.giveaway, channel_id, clock.now())
        if status.last_shared_at is None:
            output.append(f"{channel_name(channel_id)}: never shared")
        else:
            output.append(
                f"{channel_name(channel_id)}: {status.state}, last shared "
                f"{format_time_ago(status.last_shared_at, clock.now())}"
            )

    gate = store.open_share_flow(SIM_USER, args.giveaway)
    output.append("")
    for channel_id in [c.strip() for c in args.channels.split(",") if c.strip()]:
        dispatch = gate.share_on_channel(channel_id)
        if dispatch.allowed and dispatch.target is not None:
            output.append(f"share {channel_id}: {dispatch.target.action}")
        else:
            output.append(f"share {channel_id}: blocked ({dispatch.notice})")
    output.append(f"pending entries: {gate.pending_entries}")

    result = gate.confirm_shares()
    output.append(f"confirm: {result.outcome} - {result.notice}")
    output.append("")
    output.extend(render_board(store, args.tab))
    return output


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        lines = run(args)
    except InvalidValueError as exc:
        parser.error(str(exc))
    for line in lines:
        print(line)


if __name__ == "__main__":
    main()
