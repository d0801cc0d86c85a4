"""SlackMessage entity for conversation history entries."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

# Subtypes that record membership changes rather than conversation
MEMBERSHIP_SUBTYPES = frozenset(
    {"channel_join", "channel_leave", "group_join", "group_leave"}
)


class SlackMessage(BaseModel):
    """Slack message read from conversations.history.

    Attributes:
        user_id: Sender's user ID (empty for some system messages).
        text: Message content.
        ts: Slack timestamp string.
        subtype: Slack message subtype, if any.
        is_bot: Whether message is from a bot.
        timestamp: Message sent time (UTC).
    """

    user_id: str = ""
    text: str = ""
    ts: str
    subtype: str | None = None
    is_bot: bool = False
    timestamp: datetime

    @property
    def is_membership_notice(self) -> bool:
        """Whether this is a join/leave notice rather than conversation."""
        return self.subtype in MEMBERSHIP_SUBTYPES

    @classmethod
    def from_slack(cls, data: dict[str, Any]) -> "SlackMessage":
        """Build a SlackMessage from a conversations.history message object."""
        ts = data["ts"]
        return cls(
            user_id=data.get("user", ""),
            text=data.get("text", ""),
            ts=ts,
            subtype=data.get("subtype"),
            is_bot=bool(data.get("bot_id")) or data.get("subtype") == "bot_message",
            timestamp=datetime.fromtimestamp(float(ts), tz=timezone.utc),
        )
