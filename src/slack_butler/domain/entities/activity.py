"""Activity entities derived from a channel's recent history."""

from datetime import datetime, timedelta

from pydantic import BaseModel

# Hidden sentinel embedded in every warning the bot posts
WARNING_MARKER = "<!-- inactive channel warning -->"


class WarningMarker(BaseModel):
    """A warning previously posted by the bot into the channel."""

    sent_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.sent_at


class LastMessage(BaseModel):
    """Most recent message of a channel, kept for the report."""

    user_id: str
    author: str
    text: str
    is_bot: bool
    timestamp: datetime


class ActivitySummary(BaseModel):
    """Reduction of a channel's recent history.

    Attributes:
        last_activity: Time of the newest message that is neither a warning
            marker nor a join/leave notice. Falls back to the newest notice,
            then to the channel's creation time.
        marker: Newest warning marker posted by the bot, if any.
        last_message: Newest message overall, if any.
        message_count: Number of messages inspected.
    """

    last_activity: datetime
    marker: WarningMarker | None = None
    last_message: LastMessage | None = None
    message_count: int = 0
