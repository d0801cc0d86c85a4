"""Channel activity scanning."""

import html
from collections.abc import Mapping, Sequence

from structlog.stdlib import BoundLogger

from slack_butler.domain.entities.activity import (
    WARNING_MARKER,
    ActivitySummary,
    LastMessage,
    WarningMarker,
)
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.entities.slack_message import SlackMessage
from slack_butler.domain.repositories.slack_api import HISTORY_LIMIT, SlackAPI
from slack_butler.infrastructure.slack.gateway import CallTimeout, RateLimitedGateway


def is_warning_marker(message: SlackMessage, bot_user_id: str) -> bool:
    """Whether a message is a warning previously posted by this bot."""
    if message.user_id != bot_user_id:
        return False
    # Slack may hand the text back HTML-escaped
    return WARNING_MARKER in html.unescape(message.text)


def summarize_history(
    messages: Sequence[SlackMessage],
    channel: Channel,
    bot_user_id: str,
    user_map: Mapping[str, str] | None = None,
) -> ActivitySummary:
    """Reduce a channel's recent messages to an ActivitySummary.

    Args:
        messages: Recent messages in any order.
        channel: The channel the messages belong to.
        bot_user_id: User ID of this bot, used to recognise warning markers.
        user_map: User ID to display name mapping for the last message.

    Returns:
        The summary. An empty history yields ``last_activity == channel.created``.
    """
    newest_first = sorted(messages, key=lambda m: m.timestamp, reverse=True)
    user_map = user_map or {}

    marker: WarningMarker | None = None
    last_activity = None
    last_notice = None
    for message in newest_first:
        if is_warning_marker(message, bot_user_id):
            if marker is None:
                marker = WarningMarker(sent_at=message.timestamp)
            continue
        if message.is_membership_notice:
            # Join/leave notices only count when nothing else was said
            if last_notice is None:
                last_notice = message.timestamp
            continue
        if last_activity is None:
            last_activity = message.timestamp

    if last_activity is None:
        last_activity = last_notice if last_notice is not None else channel.created

    last_message = None
    if newest_first:
        newest = newest_first[0]
        last_message = LastMessage(
            user_id=newest.user_id,
            author=user_map.get(newest.user_id, newest.user_id) or "unknown",
            text=newest.text,
            is_bot=newest.is_bot,
            timestamp=newest.timestamp,
        )

    return ActivitySummary(
        last_activity=last_activity,
        marker=marker,
        last_message=last_message,
        message_count=len(newest_first),
    )


class ActivityScanner:
    """Reads a channel's recent history and summarizes its activity."""

    def __init__(
        self,
        api: SlackAPI,
        gateway: RateLimitedGateway,
        bot_user_id: str,
        logger: BoundLogger,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        """Initialize the scanner.

        Args:
            api: Slack API implementation.
            gateway: Gateway applying the retry policy.
            bot_user_id: User ID of this bot.
            logger: Logger instance.
            history_limit: Number of recent messages to inspect.
        """
        self._api = api
        self._gateway = gateway
        self._bot_user_id = bot_user_id
        self._logger = logger
        self._history_limit = history_limit

    def scan(
        self, channel: Channel, user_map: Mapping[str, str] | None = None
    ) -> ActivitySummary:
        """Summarize a channel's activity.

        Raises:
            MissingPermissionError: If the token cannot read channel history.
            SlackButlerError: For any other failure reading the history.
        """
        raw_messages = self._gateway.call(
            lambda timeout: self._api.conversation_history(
                channel.id, limit=self._history_limit, timeout=timeout
            ),
            action="read channel history",
            scope="channels:history",
            target=f"channel #{channel.name}",
            timeout=CallTimeout.SHORT,
        )
        messages = [SlackMessage.from_slack(m) for m in raw_messages if m.get("ts")]
        summary = summarize_history(messages, channel, self._bot_user_id, user_map)

        self._logger.debug(
            "Scanned channel activity",
            channel=channel.name,
            messages=summary.message_count,
            last_activity=summary.last_activity.isoformat(),
            has_warning=summary.marker is not None,
        )
        return summary
