"""The fixed set of sharing destinations and how a share is dispatched to each."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from .models import Giveaway
from .validation import InvalidValueError, UnknownChannelError

DISPATCH_OPEN_URL = "open_url"
DISPATCH_COPY = "copy"

DEFAULT_SHARE_URL = "https://reduzed.com/giveaways?ref=social"
SHARE_HASHTAGS = "PropTrading,TradingGiveaway,REDUZED"


@dataclass(slots=True, frozen=True)
class Channel:
    channel_id: str
    name: str
    icon: str
    url_template: str | None
    dispatch: str = DISPATCH_OPEN_URL


@dataclass(slots=True, frozen=True)
class ShareTarget:
    channel: Channel
    action: str
    payload: str
    instructions: str


CHANNELS: tuple[Channel, ...] = (
    Channel(
        "twitter",
        "Twitter",
        "𝕏",
        "https://twitter.com/intent/tweet?text={text}&url={url}&hashtags={hashtags}",
    ),
    Channel(
        "facebook",
        "Facebook",
        "📘",
        "https://www.facebook.com/sharer/sharer.php?u={url}&quote={text}",
    ),
    Channel("instagram", "Instagram", "📸", None, DISPATCH_COPY),
    Channel(
        "linkedin",
        "LinkedIn",
        "💼",
        "https://www.linkedin.com/sharing/share-offsite/?url={url}&summary={text}",
    ),
    Channel("discord", "Discord", "🎮", None, DISPATCH_COPY),
    Channel("telegram", "Telegram", "✈️", "https://t.me/share/url?url={url}&text={text}"),
    Channel("whatsapp", "WhatsApp", "💬", "https://wa.me/?text={text_and_url}"),
)

CHANNEL_IDS: tuple[str, ...] = tuple(channel.channel_id for channel in CHANNELS)
_BY_ID = {channel.channel_id: channel for channel in CHANNELS}


def get_channel(channel_id: str) -> Channel:
    try:
        return _BY_ID[channel_id]
    except KeyError:
        raise UnknownChannelError(f"Unknown share channel: {channel_id}") from None


def channel_name(channel_id: str) -> str:
    channel = _BY_ID.get(channel_id)
    return channel.name if channel else channel_id


def build_share_text(giveaway: Giveaway) -> str:
    return (
        f"🎯 I just entered to win {giveaway.prize} on REDUZED - the AI Deal Finder "
        "for Traders! 🚀 Free to join and win trading challenges & bonuses. "
        "No purchase required! Get your FREE access: "
        "#PropTrading #TradingGiveaway #REDUZED"
    )


def build_share_target(channel_id: str, giveaway: Giveaway) -> ShareTarget:
    channel = get_channel(channel_id)
    text = build_share_text(giveaway)
    url = giveaway.share_url or DEFAULT_SHARE_URL

    if channel.dispatch == DISPATCH_COPY:
        if channel.channel_id == "instagram":
            return ShareTarget(
                channel=channel,
                action=DISPATCH_COPY,
                payload=url,
                instructions=(
                    "Paste this link in your Instagram story or post to share "
                    "the giveaway!"
                ),
            )
        return ShareTarget(
            channel=channel,
            action=DISPATCH_COPY,
            payload=f"{text}\n{url}",
            instructions=(
                f"Paste this message in your {channel.name} server or DM to share "
                "the giveaway!"
            ),
        )

    if channel.url_template is None:
        raise InvalidValueError(f"Channel {channel.channel_id} has no share URL")
    link = channel.url_template.format(
        text=quote(text, safe=""),
        url=quote(url, safe=""),
        hashtags=SHARE_HASHTAGS,
        text_and_url=quote(f"{text} {url}", safe=""),
    )
    return ShareTarget(
        channel=channel,
        action=DISPATCH_OPEN_URL,
        payload=link,
        instructions=f"Open {channel.name}, publish the post, then come back to confirm.",
    )


__all__ = [
    "DISPATCH_OPEN_URL",
    "DISPATCH_COPY",
    "DEFAULT_SHARE_URL",
    "Channel",
    "ShareTarget",
    "CHANNELS",
    "CHANNEL_IDS",
    "get_channel",
    "channel_name",
    "build_share_text",
    "build_share_target",
]
