"""Inactive channel warn/archive run."""

from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from pydantic import BaseModel, Field
from structlog.stdlib import BoundLogger

from slack_butler.application.services.action_executor import ActionExecutor, ActionResult
from slack_butler.application.services.activity_scanner import ActivityScanner
from slack_butler.domain.entities.activity import ActivitySummary
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.entities.exclusions import ExclusionSet
from slack_butler.domain.entities.thresholds import Thresholds
from slack_butler.domain.errors import (
    AuthenticationError,
    MissingPermissionError,
    NotFoundError,
    SlackButlerError,
)
from slack_butler.domain.lifecycle import Decision, classify
from slack_butler.domain.repositories.slack_api import SlackAPI
from slack_butler.infrastructure.slack.gateway import CallTimeout, RateLimitedGateway


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChannelEvaluation(BaseModel):
    """Classification of one channel, for the report."""

    channel: Channel
    activity: ActivitySummary
    decision: Decision


class ChannelFailure(BaseModel):
    """A channel that could not be evaluated."""

    channel: Channel
    error: str


class ArchiveRun(BaseModel):
    """Everything a warn/archive run found and did.

    Attributes:
        now: Evaluation time shared by every channel of the run.
        dry_run: Whether side effects were suppressed.
        evaluations: Classified channels, in listing order.
        excluded: Names of channels skipped by the exclusion rules.
        failures: Channels whose history could not be read.
        results: Outcome of every warn or archive action.
    """

    now: datetime
    dry_run: bool
    evaluations: list[ChannelEvaluation] = Field(default_factory=list)
    excluded: list[str] = Field(default_factory=list)
    failures: list[ChannelFailure] = Field(default_factory=list)
    results: list[ActionResult] = Field(default_factory=list)

    def channels_for(self, decision: Decision) -> list[Channel]:
        return [e.channel for e in self.evaluations if e.decision is decision]

    @property
    def to_warn(self) -> list[Channel]:
        return self.channels_for(Decision.WARN)

    @property
    def to_archive(self) -> list[Channel]:
        return self.channels_for(Decision.ARCHIVE)

    @property
    def action_failures(self) -> list[ActionResult]:
        return [r for r in self.results if not r.ok]


class InactiveChannelService:
    """Finds inactive channels, then warns or archives them.

    Channels are processed one at a time in listing order. Slack allows
    roughly one history read per channel per minute, so running reads in
    parallel would only trade throughput for rate limit waits.
    """

    def __init__(
        self,
        api: SlackAPI,
        gateway: RateLimitedGateway,
        scanner: ActivityScanner,
        executor: ActionExecutor,
        logger: BoundLogger,
        include_private: bool = False,
        activity_cancels_warning: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._api = api
        self._gateway = gateway
        self._scanner = scanner
        self._executor = executor
        self._logger = logger
        self._include_private = include_private
        self._activity_cancels_warning = activity_cancels_warning
        self._clock = clock

    def list_channels(self) -> list[Channel]:
        """List non-archived channels.

        Raises:
            SlackButlerError: If the channels cannot be listed.
        """
        raw_channels = self._gateway.collect_pages(
            lambda cursor, timeout: self._api.list_channels(
                include_private=self._include_private, cursor=cursor, timeout=timeout
            ),
            action="list channels",
            scope="channels:read",
            target="channel list",
            timeout=CallTimeout.LONG,
        )
        channels = [Channel.from_slack(raw) for raw in raw_channels]
        return [channel for channel in channels if not channel.is_archived]

    def evaluate(
        self,
        thresholds: Thresholds,
        exclusions: ExclusionSet,
        user_map: Mapping[str, str] | None = None,
    ) -> ArchiveRun:
        """Classify every channel without acting on any of them.

        Raises:
            MissingPermissionError: If channels or history cannot be read for
                lack of a scope.
            SlackButlerError: If the channel list cannot be fetched.
        """
        run = ArchiveRun(now=self._clock(), dry_run=True)
        channels = self.list_channels()
        self._logger.info("Analyzing channels", total=len(channels))

        for channel in channels:
            if exclusions.is_excluded(channel.name):
                self._logger.debug("Skipping excluded channel", channel=channel.name)
                run.excluded.append(channel.name)
                continue

            try:
                activity = self._scanner.scan(channel, user_map)
            except (MissingPermissionError, AuthenticationError):
                raise
            except NotFoundError as e:
                self._logger.info(
                    "Channel disappeared, skipping", channel=channel.name, error=str(e)
                )
                continue
            except SlackButlerError as e:
                self._logger.error(
                    "Failed to read channel activity", channel=channel.name, error=str(e)
                )
                run.failures.append(ChannelFailure(channel=channel, error=e.describe()))
                continue

            decision = classify(
                channel,
                activity,
                thresholds,
                run.now,
                activity_cancels_warning=self._activity_cancels_warning,
            )
            run.evaluations.append(
                ChannelEvaluation(channel=channel, activity=activity, decision=decision)
            )

        self._logger.info(
            "Channel analysis completed",
            to_warn=len(run.to_warn),
            to_archive=len(run.to_archive),
            excluded=len(run.excluded),
            failed=len(run.failures),
        )
        return run

    def run(
        self,
        thresholds: Thresholds,
        exclusions: ExclusionSet,
        dry_run: bool,
        user_map: Mapping[str, str] | None = None,
    ) -> ArchiveRun:
        """Classify every channel, then warn or archive those that need it.

        One channel's failure never stops the others; failures are collected
        in the returned run.

        Args:
            thresholds: Warn and archive thresholds.
            exclusions: Channels that are never touched.
            dry_run: Render messages without posting or archiving.
            user_map: User ID to display name mapping for the report.

        Returns:
            The completed ArchiveRun.

        Raises:
            MissingPermissionError: If a required OAuth scope is missing.
        """
        run = self.evaluate(thresholds, exclusions, user_map)
        run.dry_run = dry_run

        for evaluation in run.evaluations:
            if evaluation.decision is Decision.NONE:
                continue
            result = self._executor.execute(
                evaluation.decision, evaluation.channel, dry_run
            )
            run.results.append(result)

        return run
