from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import ClassVar

from .validation import (
    InvalidValueError,
    parse_timestamp,
    validate_counter,
    validate_window,
)

PHASE_RUNNING = "running"
PHASE_SELECTING_WINNER = "selecting-winner"
PHASE_FINISHED = "finished"
PHASES = (PHASE_RUNNING, PHASE_SELECTING_WINNER, PHASE_FINISHED)


@dataclass(slots=True, frozen=True)
class Winner:
    name: str
    entries: int

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "entries": self.entries}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Winner:
        return cls(name=str(data.get("name", "")), entries=int(data.get("entries", 0)))


@dataclass(slots=True, frozen=True)
class UserStanding:
    entries: int = 0
    rank: int | None = None


@dataclass(slots=True)
class ShareEvent:
    channel_id: str
    timestamp: datetime
    count: int = 1


@dataclass(slots=True)
class Giveaway:
    giveaway_id: str
    title: str
    prize: str
    status: str
    starts_at: str
    ends_at: str
    description: str = ""
    firm: str | None = None
    logo_url: str | None = None
    image_url: str | None = None
    banner_url: str | None = None
    share_url: str | None = None
    rules: str = ""
    finished_at: str | None = None
    total_entries: int = 0
    total_participants: int = 0
    user_entries: int = 0
    user_rank: int | None = None
    winner: Winner | None = None

    # Keys used by the web catalog export.
    _CAMEL_KEYS: ClassVar[dict[str, str]] = {
        "id": "giveaway_id",
        "startDate": "starts_at",
        "endDate": "ends_at",
        "finishedDate": "finished_at",
        "totalEntries": "total_entries",
        "totalParticipants": "total_participants",
        "userEntries": "user_entries",
        "userRank": "user_rank",
        "logoUrl": "logo_url",
        "imageUrl": "image_url",
        "bannerUrl": "banner_url",
        "shareUrl": "share_url",
    }

    def window(self) -> tuple[datetime, datetime]:
        return parse_timestamp(self.starts_at), parse_timestamp(self.ends_at)

    def standing(self) -> UserStanding:
        return UserStanding(entries=self.user_entries, rank=self.user_rank)

    def with_user(self, standing: UserStanding) -> Giveaway:
        return replace(self, user_entries=standing.entries, user_rank=standing.rank)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "giveaway_id": self.giveaway_id,
            "title": self.title,
            "prize": self.prize,
            "description": self.description,
            "status": self.status,
            "starts_at": self.starts_at,
            "ends_at": self.ends_at,
            "rules": self.rules,
            "total_entries": self.total_entries,
            "total_participants": self.total_participants,
            "user_entries": self.user_entries,
        }
        for name in ("firm", "logo_url", "image_url", "banner_url", "share_url"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        if self.user_rank is not None:
            data["user_rank"] = self.user_rank
        if self.finished_at is not None:
            data["finished_at"] = self.finished_at
        if self.winner is not None:
            data["winner"] = self.winner.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Giveaway:
        normalized = {cls._CAMEL_KEYS.get(key, key): value for key, value in data.items()}
        winner_data = normalized.get("winner")
        rank_value = normalized.get("user_rank")
        return cls(
            giveaway_id=str(normalized["giveaway_id"]),
            title=str(normalized.get("title", "")),
            prize=str(normalized.get("prize", "")),
            status=str(normalized.get("status", PHASE_RUNNING)),
            starts_at=str(normalized.get("starts_at", "")),
            ends_at=str(normalized.get("ends_at", "")),
            description=str(normalized.get("description", "")),
            firm=_optional_str(normalized.get("firm")),
            logo_url=_optional_str(normalized.get("logo_url")),
            image_url=_optional_str(normalized.get("image_url")),
            banner_url=_optional_str(normalized.get("banner_url")),
            share_url=_optional_str(normalized.get("share_url")),
            rules=str(normalized.get("rules", "")),
            finished_at=_optional_str(normalized.get("finished_at")),
            total_entries=int(normalized.get("total_entries", 0)),
            total_participants=int(normalized.get("total_participants", 0)),
            user_entries=int(normalized.get("user_entries") or 0),
            user_rank=int(rank_value) if rank_value not in (None, "") else None,
            winner=Winner.from_dict(winner_data) if isinstance(winner_data, dict) else None,
        )


def _optional_str(value: object) -> str | None:
    if value in (None, ""):
        return None
    return str(value)


def validate_giveaway(giveaway: Giveaway) -> Giveaway:
    if giveaway.status not in PHASES:
        raise InvalidValueError(f"Unknown giveaway status: {giveaway.status}")
    finished = giveaway.status == PHASE_FINISHED
    if finished != (giveaway.finished_at is not None):
        raise InvalidValueError("finished_at must be set exactly when finished")
    if giveaway.winner is not None and not finished:
        raise InvalidValueError("Only finished giveaways can have a winner")
    validate_window(*giveaway.window())
    validate_counter("total_entries", giveaway.total_entries)
    validate_counter("total_participants", giveaway.total_participants)
    validate_counter("user_entries", giveaway.user_entries)
    if giveaway.user_rank is not None and giveaway.user_rank < 1:
        raise InvalidValueError("user_rank must be at least 1")
    return giveaway


__all__ = [
    "PHASE_RUNNING",
    "PHASE_SELECTING_WINNER",
    "PHASE_FINISHED",
    "PHASES",
    "Giveaway",
    "Winner",
    "UserStanding",
    "ShareEvent",
    "validate_giveaway",
]
