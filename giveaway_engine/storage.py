from __future__ import annotations

import logging
from datetime import datetime
from typing import ClassVar

from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from .config import DEFAULT_CONFIG, EngineConfig
from .cooldown import ShareDecision, decide
from .models import ShareEvent
from .validation import format_timestamp, parse_timestamp

log = logging.getLogger("giveaway-engine")


class DynamoShareLedger:
    """Share ledger for one user backed by a DynamoDB table.

    Items are keyed ``pk=USER#<user>#GIVEAWAY#<giveaway>``,
    ``sk=CHANNEL#<channel>``. Writes are conditional on the row being
    unchanged since it was read, so two processes racing on the same
    (user, giveaway, channel) cannot both award inside one window.
    """

    PK_TEMPLATE: ClassVar[str] = "USER#%s#GIVEAWAY#%s"
    SK_TEMPLATE: ClassVar[str] = "CHANNEL#%s"
    SK_PREFIX: ClassVar[str] = "CHANNEL#"

    def __init__(self, table, user_id: str, config: EngineConfig | None = None) -> None:
        self._table = table
        self.user_id = user_id
        self.config = config or DEFAULT_CONFIG

    def ensure_table(self) -> None:
        if self._table is None:
            raise RuntimeError("Share ledger table is not configured")

    def key(self, giveaway_id: str, channel_id: str) -> dict[str, str]:
        return {
            "pk": self.PK_TEMPLATE % (self.user_id, giveaway_id),
            "sk": self.SK_TEMPLATE % channel_id,
        }

    @staticmethod
    def _event_from_item(item: dict[str, object]) -> ShareEvent:
        channel_id = str(item.get("channel_id") or str(item["sk"]).split("#", 1)[1])
        return ShareEvent(
            channel_id=channel_id,
            timestamp=parse_timestamp(item["last_shared_at"]),
            count=int(item.get("share_count", 1)),
        )

    def _get_event(self, giveaway_id: str, channel_id: str) -> ShareEvent | None:
        self.ensure_table()
        resp = self._table.get_item(Key=self.key(giveaway_id, channel_id))
        item = resp.get("Item")
        if not item:
            return None
        return self._event_from_item(item)

    def can_share(
        self, giveaway_id: str, channel_id: str, now: datetime
    ) -> ShareDecision:
        return decide(self._get_event(giveaway_id, channel_id), now, self.config)

    def record_share(
        self, giveaway_id: str, channel_id: str, now: datetime
    ) -> ShareDecision:
        event = self._get_event(giveaway_id, channel_id)
        decision = decide(event, now, self.config)
        if not decision.allowed:
            return decision

        item = self.key(giveaway_id, channel_id)
        item.update(
            {
                "user_id": self.user_id,
                "giveaway_id": giveaway_id,
                "channel_id": channel_id,
                "last_shared_at": format_timestamp(now),
                "share_count": (event.count if event else 0) + 1,
            }
        )
        if event is None:
            condition = "attribute_not_exists(pk)"
            values = None
        else:
            condition = "last_shared_at = :prior"
            values = {":prior": format_timestamp(event.timestamp)}

        kwargs: dict[str, object] = {"Item": item, "ConditionExpression": condition}
        if values is not None:
            kwargs["ExpressionAttributeValues"] = values
        try:
            self._table.put_item(**kwargs)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code != "ConditionalCheckFailedException":
                raise
            log.warning(
                "Lost share race for user %s on %s/%s, re-reading cooldown",
                self.user_id,
                giveaway_id,
                channel_id,
            )
            latest = decide(self._get_event(giveaway_id, channel_id), now, self.config)
            if latest.allowed:
                # A lost race never awards, even if the row reads as shareable.
                return ShareDecision(
                    allowed=False,
                    hours_remaining=self.config.cooldown_window_hours,
                    prior_share_count=latest.prior_share_count,
                    last_shared_at=latest.last_shared_at,
                )
            return latest
        return decision

    def history(self, giveaway_id: str) -> list[ShareEvent]:
        self.ensure_table()
        resp = self._table.query(
            KeyConditionExpression=Key("pk").eq(
                self.PK_TEMPLATE % (self.user_id, giveaway_id)
            )
            & Key("sk").begins_with(self.SK_PREFIX),
            Select="ALL_ATTRIBUTES",
        )
        events = [self._event_from_item(item) for item in resp.get("Items", [])]
        events.sort(key=lambda event: event.timestamp)
        return events

    def total_shares(self, giveaway_id: str) -> int:
        return sum(event.count for event in self.history(giveaway_id))


def dynamo_ledger_factory(table, config: EngineConfig | None = None):
    def factory(user_id: str) -> DynamoShareLedger:
        return DynamoShareLedger(table, user_id, config)

    return factory


__all__ = ["DynamoShareLedger", "dynamo_ledger_factory"]
