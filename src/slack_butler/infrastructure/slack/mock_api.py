"""In-memory Slack API for testing and offline runs."""

from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any

from slack_sdk.errors import SlackApiError
from slack_sdk.web import SlackResponse

from slack_butler.domain.repositories.slack_api import HISTORY_LIMIT, Page

MOCK_BOT_USER_ID = "UBOT000001"
MOCK_SCOPES = (
    "channels:read",
    "channels:history",
    "channels:join",
    "channels:manage",
    "chat:write",
    "users:read",
)


def slack_api_error(
    code: str,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> SlackApiError:
    """Build a SlackApiError shaped like the ones slack_sdk raises."""
    response = SlackResponse(
        client=None,
        http_verb="POST",
        api_url="https://slack.com/api/mock",
        req_args={},
        data={"ok": False, "error": code, **extra},
        headers=headers or {},
        status_code=status_code,
    )
    return SlackApiError(f"The request to the Slack API failed. (error: {code})", response)


def rate_limit_error(retry_after: int = 1) -> SlackApiError:
    return slack_api_error(
        "ratelimited", status_code=429, headers={"Retry-After": str(retry_after)}
    )


def format_ts(moment: datetime) -> str:
    return f"{moment.timestamp():.6f}"


class MockSlackAPI:
    """Mock SlackAPI keeping channels, messages and users in memory.

    Posted messages are appended to the channel history, so a second run over
    the same instance sees the warnings left by the first.
    """

    def __init__(
        self, bot_user_id: str = MOCK_BOT_USER_ID, page_size: int | None = None
    ) -> None:
        """Initialize the mock.

        Args:
            bot_user_id: User ID reported by auth_test and used for posts.
            page_size: Items per listing page; None returns everything at once.
        """
        self.bot_user_id = bot_user_id
        self.page_size = page_size
        self.scopes: list[str] = list(MOCK_SCOPES)
        self.channels: dict[str, dict[str, Any]] = {}
        self.history: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.users: list[dict[str, Any]] = []
        self.posted_messages: list[tuple[str, str]] = []
        self.joined_channels: list[str] = []
        self.archived_channels: list[str] = []
        self.calls: list[tuple[str, str | None]] = []
        self._errors: dict[tuple[str, str | None], deque[SlackApiError]] = defaultdict(deque)

    # Setup helpers

    def add_channel(
        self,
        channel_id: str,
        name: str,
        created: datetime,
        purpose: str = "",
        creator: str = "",
        is_member: bool = False,
        member_count: int = 0,
    ) -> None:
        self.channels[channel_id] = {
            "id": channel_id,
            "name": name,
            "created": int(created.timestamp()),
            "num_members": member_count,
            "is_archived": False,
            "is_member": is_member,
            "is_private": False,
            "purpose": {"value": purpose},
            "creator": creator,
        }

    def add_message(
        self,
        channel_id: str,
        text: str,
        user: str,
        timestamp: datetime,
        subtype: str | None = None,
        bot_id: str | None = None,
    ) -> None:
        message: dict[str, Any] = {"type": "message", "user": user, "text": text}
        message["ts"] = format_ts(timestamp)
        if subtype:
            message["subtype"] = subtype
        if bot_id:
            message["bot_id"] = bot_id
        self.history[channel_id].append(message)
        self.history[channel_id].sort(key=lambda m: float(m["ts"]))

    def add_user(
        self, user_id: str, name: str = "", real_name: str = "", display_name: str = ""
    ) -> None:
        self.users.append(
            {
                "id": user_id,
                "name": name,
                "real_name": real_name,
                "profile": {"display_name": display_name},
            }
        )

    def fail(
        self,
        operation: str,
        error: SlackApiError,
        channel_id: str | None = None,
        times: int = 1,
    ) -> None:
        """Queue an error for the next ``times`` calls of an operation.

        Args:
            operation: Method name, e.g. "conversation_history".
            error: Error to raise.
            channel_id: Restrict to one channel, or for listings to the page
                with this cursor; None applies to any call.
            times: How many consecutive calls fail.
        """
        for _ in range(times):
            self._errors[(operation, channel_id)].append(error)

    def call_count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    def _page(self, items: list[dict[str, Any]], cursor: str | None) -> Page[dict[str, Any]]:
        start = int(cursor) if cursor else 0
        if self.page_size is None:
            return Page(items[start:])
        end = start + self.page_size
        return Page(items[start:end], str(end) if end < len(items) else None)

    def _record(self, operation: str, channel_id: str | None = None) -> None:
        self.calls.append((operation, channel_id))
        for key in ((operation, channel_id), (operation, None)):
            queued = self._errors.get(key)
            if queued:
                raise queued.popleft()

    # SlackAPI protocol

    def auth_test(self) -> dict[str, Any]:
        self._record("auth_test")
        return {
            "ok": True,
            "user": "slack-butler",
            "user_id": self.bot_user_id,
            "team": "Mock Team",
            "team_id": "T0000000",
            "scopes": list(self.scopes),
        }

    def list_channels(
        self,
        include_private: bool = False,
        cursor: str | None = None,
        timeout: int = 120,
    ) -> Page[dict[str, Any]]:
        self._record("list_channels", cursor)
        channels = [
            dict(channel)
            for channel in self.channels.values()
            if not channel["is_archived"] and (include_private or not channel["is_private"])
        ]
        return self._page(channels, cursor)

    def conversation_history(
        self, channel_id: str, limit: int = HISTORY_LIMIT, timeout: int = 30
    ) -> list[dict[str, Any]]:
        self._record("conversation_history", channel_id)
        if channel_id not in self.channels:
            raise slack_api_error("channel_not_found")
        newest_first = list(reversed(self.history[channel_id]))
        return [dict(message) for message in newest_first[:limit]]

    def post_message(self, channel_id: str, text: str, timeout: int = 30) -> str:
        self._record("post_message", channel_id)
        if channel_id not in self.channels:
            raise slack_api_error("channel_not_found")
        now = datetime.now(timezone.utc)
        self.add_message(channel_id, text, self.bot_user_id, now, bot_id="BMOCK")
        self.posted_messages.append((channel_id, text))
        return format_ts(now)

    def join_channel(self, channel_id: str, timeout: int = 30) -> None:
        self._record("join_channel", channel_id)
        if channel_id not in self.channels:
            raise slack_api_error("channel_not_found")
        self.channels[channel_id]["is_member"] = True
        self.joined_channels.append(channel_id)

    def archive_channel(self, channel_id: str, timeout: int = 30) -> None:
        self._record("archive_channel", channel_id)
        channel = self.channels.get(channel_id)
        if channel is None:
            raise slack_api_error("channel_not_found")
        if channel["is_archived"]:
            raise slack_api_error("already_archived")
        channel["is_archived"] = True
        self.archived_channels.append(channel_id)

    def list_users(
        self, cursor: str | None = None, timeout: int = 120
    ) -> Page[dict[str, Any]]:
        self._record("list_users", cursor)
        return self._page([dict(user) for user in self.users], cursor)
