"""Warn and archive actions."""

from pydantic import BaseModel
from structlog.stdlib import BoundLogger

from slack_butler.application.messages import render_archival_notice, render_warning
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.entities.thresholds import Thresholds
from slack_butler.domain.errors import (
    MissingPermissionError,
    SlackButlerError,
    TransientAPIError,
)
from slack_butler.domain.lifecycle import Decision
from slack_butler.domain.repositories.slack_api import SlackAPI
from slack_butler.infrastructure.slack.gateway import RateLimitedGateway


class ActionResult(BaseModel):
    """Outcome of acting on one channel.

    Attributes:
        channel: The channel acted on.
        decision: What was decided for it.
        message: Text that was (or, on a dry run, would have been) posted.
        performed: Whether side effects were carried out.
        error: Failure description, if the action failed.
    """

    channel: Channel
    decision: Decision
    message: str = ""
    performed: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ActionExecutor:
    """Posts warnings and archives channels through the gateway."""

    def __init__(
        self,
        api: SlackAPI,
        gateway: RateLimitedGateway,
        thresholds: Thresholds,
        logger: BoundLogger,
        activity_cancels_warning: bool = True,
    ) -> None:
        """Initialize the executor.

        Args:
            api: Slack API implementation.
            gateway: Gateway applying the retry policy.
            thresholds: Thresholds quoted in the posted messages.
            logger: Logger instance.
            activity_cancels_warning: Whether a later message cancels a
                warning, as explained in the posted messages.
        """
        self._api = api
        self._gateway = gateway
        self._thresholds = thresholds
        self._logger = logger
        self._activity_cancels_warning = activity_cancels_warning

    def execute(self, decision: Decision, channel: Channel, dry_run: bool) -> ActionResult:
        """Carry out a decision for a channel.

        Failures are reported in the returned result so the caller can go on
        with the next channel. A missing OAuth scope is raised instead, since
        every later channel would fail the same way.

        Raises:
            MissingPermissionError: If the token lacks a required scope.
        """
        if decision is Decision.NONE:
            return ActionResult(channel=channel, decision=decision)

        if decision is Decision.WARN:
            message = render_warning(self._thresholds, self._activity_cancels_warning)
            action = self._warn
        else:
            message = render_archival_notice(
                self._thresholds, self._activity_cancels_warning
            )
            action = self._archive

        result = ActionResult(channel=channel, decision=decision, message=message)
        if dry_run:
            return result

        try:
            action(channel, message)
        except MissingPermissionError:
            raise
        except SlackButlerError as e:
            self._logger.error(
                "Channel action failed",
                channel=channel.name,
                decision=decision.value,
                error=str(e),
            )
            result.error = e.describe()
            return result

        result.performed = True
        return result

    def _join(self, channel: Channel) -> None:
        if channel.is_member:
            return
        self._gateway.call(
            lambda timeout: self._api.join_channel(channel.id, timeout=timeout),
            action="join channel",
            scope="channels:join",
            target=f"channel #{channel.name}",
        )
        channel.is_member = True

    def _post(self, channel: Channel, text: str) -> None:
        self._gateway.call(
            lambda timeout: self._api.post_message(channel.id, text, timeout=timeout),
            action="post message",
            scope="chat:write",
            target=f"channel #{channel.name}",
        )

    def _warn(self, channel: Channel, message: str) -> None:
        self._join(channel)
        self._post(channel, message)
        self._logger.info("Warned inactive channel", channel=channel.name)

    def _archive(self, channel: Channel, message: str) -> None:
        # The notice is best effort; archiving proceeds without it
        try:
            self._join(channel)
            self._post(channel, message)
        except SlackButlerError as e:
            self._logger.warning(
                "Could not post archival notice", channel=channel.name, error=str(e)
            )

        try:
            self._gateway.call(
                lambda timeout: self._api.archive_channel(channel.id, timeout=timeout),
                action="archive channel",
                scope="channels:manage",
                target=f"channel #{channel.name}",
            )
        except TransientAPIError as e:
            if e.code != "already_archived":
                raise
            self._logger.info("Channel already archived", channel=channel.name)
            return
        self._logger.info("Archived inactive channel", channel=channel.name)
