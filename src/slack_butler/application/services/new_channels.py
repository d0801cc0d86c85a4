"""New channel detection and announcement."""

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field
from structlog.stdlib import BoundLogger

from slack_butler.application.messages import render_announcement
from slack_butler.application.services.duplicate_detector import (
    DuplicateAnnouncementDetector,
)
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.errors import NotFoundError
from slack_butler.domain.repositories.slack_api import SlackAPI
from slack_butler.infrastructure.slack.gateway import CallTimeout, RateLimitedGateway
from slack_butler.infrastructure.slack.security import normalize_channel_name


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def find_new_channels(
    channels: Sequence[Channel], since: timedelta, now: datetime
) -> list[Channel]:
    """Return channels created strictly after ``now - since``, oldest first."""
    cutoff = now - since
    recent = [c for c in channels if not c.is_archived and c.created > cutoff]
    return sorted(recent, key=lambda c: c.created)


class DetectResult(BaseModel):
    """Outcome of a detect run.

    Attributes:
        new_channels: Every channel created inside the window.
        announced: Channels included in the announcement.
        duplicates: Names of channels skipped as already announced.
        announce_to: Normalised announcement channel name, if any.
        message: Announcement text (a preview on dry runs).
        posted: Whether the announcement was posted.
    """

    new_channels: list[Channel] = Field(default_factory=list)
    announced: list[Channel] = Field(default_factory=list)
    duplicates: list[str] = Field(default_factory=list)
    announce_to: str | None = None
    message: str = ""
    posted: bool = False


class NewChannelService:
    """Finds recently created channels and announces them once."""

    def __init__(
        self,
        api: SlackAPI,
        gateway: RateLimitedGateway,
        detector: DuplicateAnnouncementDetector,
        logger: BoundLogger,
        include_private: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._api = api
        self._gateway = gateway
        self._detector = detector
        self._logger = logger
        self._include_private = include_private
        self._clock = clock

    def _list_channels(self) -> list[Channel]:
        raw_channels = self._gateway.collect_pages(
            lambda cursor, timeout: self._api.list_channels(
                include_private=self._include_private, cursor=cursor, timeout=timeout
            ),
            action="list channels",
            scope="channels:read",
            target="channel list",
            timeout=CallTimeout.LONG,
        )
        return [Channel.from_slack(raw) for raw in raw_channels]

    def run(
        self,
        since: timedelta,
        announce_to: str | None = None,
        dry_run: bool = False,
        user_map: Mapping[str, str] | None = None,
    ) -> DetectResult:
        """Detect new channels and optionally announce them.

        Args:
            since: How far back to look for created channels.
            announce_to: Channel name to post the announcement in.
            dry_run: Render the announcement without posting.
            user_map: User ID to display name mapping for the preview.

        Returns:
            The DetectResult.

        Raises:
            ValidationError: If ``announce_to`` is not a valid channel name.
            NotFoundError: If the announcement channel does not exist.
            SlackButlerError: If listing channels or posting fails.
        """
        announce_name = normalize_channel_name(announce_to) if announce_to else None
        channels = self._list_channels()
        new_channels = find_new_channels(channels, since, self._clock())
        result = DetectResult(new_channels=new_channels, announce_to=announce_name)
        self._logger.info("Detected new channels", count=len(new_channels))

        if not new_channels:
            return result

        if announce_name is None:
            result.announced = new_channels
            result.message = render_announcement(new_channels, user_map or {})
            return result

        announce_channel = next((c for c in channels if c.name == announce_name), None)
        if announce_channel is None:
            raise NotFoundError(f"channel #{announce_name}", "announce new channels")

        check = self._detector.check(
            announce_channel.id,
            [c.name for c in new_channels],
            channel_ids={c.name: c.id for c in new_channels},
        )
        result.duplicates = sorted(check.already_announced)
        result.announced = [
            c for c in new_channels if c.name not in check.already_announced
        ]
        if not result.announced:
            self._logger.info("All new channels were already announced")
            return result

        if dry_run:
            result.message = render_announcement(result.announced, user_map or {})
            return result

        result.message = render_announcement(result.announced)
        if not announce_channel.is_member:
            self._gateway.call(
                lambda timeout: self._api.join_channel(announce_channel.id, timeout=timeout),
                action="join announcement channel",
                scope="channels:join",
                target=f"channel #{announce_name}",
            )
        self._gateway.call(
            lambda timeout: self._api.post_message(
                announce_channel.id, result.message, timeout=timeout
            ),
            action="post announcement",
            scope="chat:write",
            target=f"channel #{announce_name}",
        )
        result.posted = True
        self._logger.info(
            "Announced new channels",
            channel=announce_name,
            count=len(result.announced),
        )
        return result
