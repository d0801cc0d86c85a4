"""Warn/archive state inference for inactive channels.

A channel's lifecycle state is never stored. It is recomputed on every run
from its creation time, its last activity and the newest warning marker the
bot left in its history. Everything here is a pure function of those inputs
and the current time.
"""

from datetime import datetime
from enum import Enum

from slack_butler.domain.entities.activity import ActivitySummary, WarningMarker
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.entities.thresholds import Thresholds


class ChannelState(str, Enum):
    """Position of a channel in the warn/archive lifecycle."""

    ACTIVE = "active"
    PENDING_WARNING = "pending_warning"
    WARNED = "warned"
    ARCHIVABLE = "archivable"


class Decision(str, Enum):
    """Action to take for a channel on this run."""

    NONE = "none"
    WARN = "warn"
    ARCHIVE = "archive"


_DECISIONS = {
    ChannelState.ACTIVE: Decision.NONE,
    ChannelState.PENDING_WARNING: Decision.WARN,
    ChannelState.WARNED: Decision.NONE,
    ChannelState.ARCHIVABLE: Decision.ARCHIVE,
}


def effective_marker(
    activity: ActivitySummary, activity_cancels_warning: bool = True
) -> WarningMarker | None:
    """Return the warning marker that still governs the channel.

    With ``activity_cancels_warning``, a marker older than the last non-marker
    message has been answered and no longer counts.
    """
    marker = activity.marker
    if marker is None:
        return None
    if activity_cancels_warning and activity.last_activity > marker.sent_at:
        return None
    return marker


def infer_state(
    channel: Channel,
    activity: ActivitySummary,
    thresholds: Thresholds,
    now: datetime,
    activity_cancels_warning: bool = True,
) -> ChannelState:
    """Infer the lifecycle state of a channel.

    Args:
        channel: The channel being evaluated.
        activity: Summary of the channel's recent history.
        thresholds: Warn and archive thresholds.
        now: Evaluation time.
        activity_cancels_warning: Whether a message newer than the warning
            marker returns the channel to ACTIVE.

    Returns:
        The inferred ChannelState.
    """
    # Too young to judge, whatever the history says
    if channel.created > now - thresholds.warn_after:
        return ChannelState.ACTIVE
    if activity.last_activity < channel.created:
        return ChannelState.ACTIVE

    marker = effective_marker(activity, activity_cancels_warning)
    if marker is None:
        if now - activity.last_activity > thresholds.warn_after:
            return ChannelState.PENDING_WARNING
        return ChannelState.ACTIVE

    if marker.age(now) > thresholds.archive_after:
        return ChannelState.ARCHIVABLE
    return ChannelState.WARNED


def classify(
    channel: Channel,
    activity: ActivitySummary,
    thresholds: Thresholds,
    now: datetime,
    activity_cancels_warning: bool = True,
) -> Decision:
    """Decide whether to warn, archive or leave a channel alone."""
    state = infer_state(channel, activity, thresholds, now, activity_cancels_warning)
    return _DECISIONS[state]
