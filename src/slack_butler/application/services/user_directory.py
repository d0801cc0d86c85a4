"""User ID to display name resolution."""

from typing import Any

from structlog.stdlib import BoundLogger

from slack_butler.domain.errors import MissingPermissionError, SlackButlerError
from slack_butler.domain.repositories.slack_api import SlackAPI
from slack_butler.infrastructure.slack.gateway import CallTimeout, RateLimitedGateway


def display_name(user: dict[str, Any]) -> str:
    """Pick a user's name: real name, then username, then display name, then ID."""
    profile = user.get("profile") or {}
    return (
        user.get("real_name")
        or user.get("name")
        or profile.get("display_name")
        or user["id"]
    )


class UserDirectory:
    """Loads the workspace user list for human-readable reports."""

    def __init__(
        self, api: SlackAPI, gateway: RateLimitedGateway, logger: BoundLogger
    ) -> None:
        self._api = api
        self._gateway = gateway
        self._logger = logger

    def load(self) -> dict[str, str]:
        """Return a user ID to display name map.

        Failures degrade to an empty map, so reports show raw user IDs
        instead of aborting the run.
        """
        try:
            users = self._gateway.collect_pages(
                lambda cursor, timeout: self._api.list_users(cursor=cursor, timeout=timeout),
                action="list users",
                scope="users:read",
                target="user list",
                timeout=CallTimeout.LONG,
            )
        except MissingPermissionError as e:
            self._logger.warning(
                "Cannot resolve user names, showing raw IDs", scope=e.scope
            )
            return {}
        except SlackButlerError as e:
            self._logger.warning(
                "Failed to load users, showing raw IDs", error=str(e)
            )
            return {}

        return {user["id"]: display_name(user) for user in users if user.get("id")}
