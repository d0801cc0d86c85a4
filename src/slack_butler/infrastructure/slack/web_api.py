"""SlackAPI implementation backed by slack_sdk's WebClient."""

from typing import Any

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from slack_butler.domain.repositories.slack_api import HISTORY_LIMIT, Page

PAGE_SIZE = 200


class SlackWebAPI:
    """Thin wrapper over WebClient returning one page per listing call.

    A WebClient is kept per timeout value, since slack_sdk applies its
    timeout per client rather than per request.
    """

    def __init__(self, token: str) -> None:
        """Initialize the API wrapper.

        Args:
            token: Slack bot token.
        """
        self._token = token
        self._clients: dict[int, WebClient] = {}

    def _client(self, timeout: int) -> WebClient:
        client = self._clients.get(timeout)
        if client is None:
            client = WebClient(token=self._token, timeout=timeout)
            self._clients[timeout] = client
        return client

    def auth_test(self) -> dict[str, Any]:
        response = self._client(30).auth_test()
        data = dict(response.data) if isinstance(response.data, dict) else {}
        scopes = _header(response.headers, "x-oauth-scopes")
        if scopes is not None:
            data["scopes"] = [s.strip() for s in scopes.split(",") if s.strip()]
        return data

    def list_channels(
        self,
        include_private: bool = False,
        cursor: str | None = None,
        timeout: int = 120,
    ) -> Page[dict[str, Any]]:
        types = "public_channel,private_channel" if include_private else "public_channel"
        response = self._client(timeout).conversations_list(
            exclude_archived=True,
            types=types,
            limit=PAGE_SIZE,
            cursor=cursor,
        )
        return Page(list(response.get("channels", [])), _next_cursor(response))

    def conversation_history(
        self, channel_id: str, limit: int = HISTORY_LIMIT, timeout: int = 30
    ) -> list[dict[str, Any]]:
        response = self._client(timeout).conversations_history(
            channel=channel_id, limit=limit
        )
        return list(response.get("messages", []))

    def post_message(self, channel_id: str, text: str, timeout: int = 30) -> str:
        response = self._client(timeout).chat_postMessage(channel=channel_id, text=text)
        return str(response.get("ts", ""))

    def join_channel(self, channel_id: str, timeout: int = 30) -> None:
        try:
            self._client(timeout).conversations_join(channel=channel_id)
        except SlackApiError as e:
            if e.response.get("error") != "already_in_channel":
                raise

    def archive_channel(self, channel_id: str, timeout: int = 30) -> None:
        self._client(timeout).conversations_archive(channel=channel_id)

    def list_users(
        self, cursor: str | None = None, timeout: int = 120
    ) -> Page[dict[str, Any]]:
        response = self._client(timeout).users_list(limit=PAGE_SIZE, cursor=cursor)
        return Page(list(response.get("members", [])), _next_cursor(response))


def _next_cursor(response: Any) -> str | None:
    return (response.get("response_metadata") or {}).get("next_cursor") or None


def _header(headers: dict[str, Any] | None, name: str) -> str | None:
    for key, value in (headers or {}).items():
        if key.lower() == name:
            if isinstance(value, list):
                return value[0] if value else None
            return str(value)
    return None
