"""Duplicate announcement detection.

The announcement channel's own history is the only record of what has
already been announced. Before posting, the last messages the bot left there
are searched for references to each candidate channel.

Failure policy: a missing OAuth scope is a configuration error and is
raised, since the operator must fix it. Any other failure (rate limiting,
a transient API error, an unreadable channel) is logged and treated as "no
duplicates", so a flaky read degrades to a possible repeat announcement
instead of blocking announcements indefinitely.
"""

import html
import re
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field
from structlog.stdlib import BoundLogger

from slack_butler.domain.entities.slack_message import SlackMessage
from slack_butler.domain.errors import MissingPermissionError, SlackButlerError
from slack_butler.domain.repositories.slack_api import HISTORY_LIMIT, SlackAPI
from slack_butler.infrastructure.slack.gateway import CallTimeout, RateLimitedGateway


class DuplicateCheck(BaseModel):
    """Result of a duplicate announcement check."""

    is_duplicate: bool = False
    already_announced: set[str] = Field(default_factory=set)


def mentions_channel(text: str, name: str, channel_id: str | None = None) -> bool:
    """Whether a message references a channel.

    Recognises ``#name`` as a whole word, and Slack's ``<#ID>`` and
    ``<#ID|name>`` link syntax.
    """
    text = html.unescape(text)
    if re.search(rf"(?<![\w-])#{re.escape(name)}(?![\w-])", text):
        return True
    if re.search(rf"<#[A-Z0-9]+\|{re.escape(name)}>", text):
        return True
    if channel_id and re.search(rf"<#{re.escape(channel_id)}(\|[^>]*)?>", text):
        return True
    return False


class DuplicateAnnouncementDetector:
    """Finds channels the bot already announced."""

    def __init__(
        self,
        api: SlackAPI,
        gateway: RateLimitedGateway,
        bot_user_id: str,
        logger: BoundLogger,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        """Initialize the detector.

        Args:
            api: Slack API implementation.
            gateway: Gateway applying the retry policy.
            bot_user_id: User ID of this bot; only its messages are considered.
            logger: Logger instance.
            history_limit: Number of recent messages to inspect.
        """
        self._api = api
        self._gateway = gateway
        self._bot_user_id = bot_user_id
        self._logger = logger
        self._history_limit = history_limit

    def check(
        self,
        announce_channel_id: str,
        candidate_names: Iterable[str],
        channel_ids: Mapping[str, str] | None = None,
    ) -> DuplicateCheck:
        """Check which candidate channels were already announced.

        Args:
            announce_channel_id: ID of the announcement channel.
            candidate_names: Names of the channels about to be announced.
            channel_ids: Channel name to ID mapping, to recognise ``<#ID>`` links.

        Returns:
            The subset of candidate names already announced.

        Raises:
            MissingPermissionError: If the announcement channel history
                cannot be read for lack of a scope.
        """
        candidates = [name.removeprefix("#") for name in candidate_names]
        channel_ids = channel_ids or {}

        try:
            raw_messages = self._gateway.call(
                lambda timeout: self._api.conversation_history(
                    announce_channel_id, limit=self._history_limit, timeout=timeout
                ),
                action="read announcement channel history",
                scope="channels:history",
                target="announcement channel",
                timeout=CallTimeout.SHORT,
            )
        except MissingPermissionError:
            raise
        except SlackButlerError as e:
            self._logger.warning(
                "Could not check for duplicate announcements, assuming none",
                channel_id=announce_channel_id,
                error=str(e),
            )
            return DuplicateCheck()

        bot_texts = [
            message.text
            for message in (SlackMessage.from_slack(m) for m in raw_messages if m.get("ts"))
            if message.user_id == self._bot_user_id
        ]

        already_announced = {
            name
            for name in candidates
            if any(mentions_channel(text, name, channel_ids.get(name)) for text in bot_texts)
        }
        if already_announced:
            self._logger.info(
                "Found previously announced channels",
                channels=sorted(already_announced),
            )
        return DuplicateCheck(
            is_duplicate=bool(already_announced),
            already_announced=already_announced,
        )
