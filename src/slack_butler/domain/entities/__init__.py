"""Domain entities."""

from slack_butler.domain.entities.activity import (
    WARNING_MARKER,
    ActivitySummary,
    LastMessage,
    WarningMarker,
)
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.entities.exclusions import ExclusionSet
from slack_butler.domain.entities.slack_message import SlackMessage
from slack_butler.domain.entities.thresholds import Thresholds

__all__ = [
    "WARNING_MARKER",
    "ActivitySummary",
    "Channel",
    "ExclusionSet",
    "LastMessage",
    "SlackMessage",
    "Thresholds",
    "WarningMarker",
]
