"""Channel entity."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel


class Channel(BaseModel):
    """Slack channel as returned by conversations.list.

    Attributes:
        id: Slack channel ID.
        name: Channel name without the leading '#'.
        created: Creation time (UTC).
        member_count: Number of members, informational only.
        is_archived: Whether the channel is archived.
        is_member: Whether the bot is already a member.
        is_private: Whether the channel is private.
        purpose: Channel purpose text.
        creator: User ID of the creator.
    """

    id: str
    name: str
    created: datetime
    member_count: int = 0
    is_archived: bool = False
    is_member: bool = False
    is_private: bool = False
    purpose: str = ""
    creator: str = ""

    @classmethod
    def from_slack(cls, data: dict[str, Any]) -> "Channel":
        """Build a Channel from a conversations.list channel object."""
        purpose = data.get("purpose") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            created=datetime.fromtimestamp(int(data.get("created", 0)), tz=timezone.utc),
            member_count=data.get("num_members", 0),
            is_archived=data.get("is_archived", False),
            is_member=data.get("is_member", False),
            is_private=data.get("is_private", False),
            purpose=purpose.get("value", ""),
            creator=data.get("creator", ""),
        )

