"""SlackAPI protocol."""

from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

# Hard ceiling on history reads for non-privileged apps
HISTORY_LIMIT = 15

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a cursor-paginated listing."""

    items: list[T] = field(default_factory=list)
    next_cursor: str | None = None


class SlackAPI(Protocol):
    """Protocol for the Slack Web API operations the bot relies on.

    Implementations raise ``slack_sdk.errors.SlackApiError`` on API failures;
    classification into domain errors happens in the gateway. Listings return
    a single page; the gateway follows the cursor.
    """

    def auth_test(self) -> dict[str, Any]:
        """Return the auth.test payload (user_id, user, team, team_id).

        The payload also carries ``scopes``, the OAuth scopes granted to the
        token, when the transport exposes them.
        """
        ...

    def list_channels(
        self,
        include_private: bool = False,
        cursor: str | None = None,
        timeout: int = 120,
    ) -> Page[dict[str, Any]]:
        """Return one page of non-archived channels.

        Args:
            include_private: Also list private channels.
            cursor: Cursor from the previous page, None for the first page.
            timeout: Request timeout in seconds.

        Returns:
            Raw channel objects in listing order and the next cursor, if any.
        """
        ...

    def conversation_history(
        self, channel_id: str, limit: int = HISTORY_LIMIT, timeout: int = 30
    ) -> list[dict[str, Any]]:
        """Return the most recent messages of a channel, newest first.

        Args:
            channel_id: The channel ID.
            limit: Maximum number of messages to return.
            timeout: Request timeout in seconds.
        """
        ...

    def post_message(self, channel_id: str, text: str, timeout: int = 30) -> str:
        """Post a message and return its ts."""
        ...

    def join_channel(self, channel_id: str, timeout: int = 30) -> None:
        """Join a channel. Joining a channel twice is not an error."""
        ...

    def archive_channel(self, channel_id: str, timeout: int = 30) -> None:
        """Archive a channel."""
        ...

    def list_users(
        self, cursor: str | None = None, timeout: int = 120
    ) -> Page[dict[str, Any]]:
        """Return one page of users."""
        ...
