"""Slack Web API infrastructure."""

from slack_butler.infrastructure.slack.factory import create_slack_api
from slack_butler.infrastructure.slack.gateway import (
    CallTimeout,
    RateLimitedGateway,
    RequestPacer,
    RetryPolicy,
)
from slack_butler.infrastructure.slack.mock_api import MockSlackAPI
from slack_butler.infrastructure.slack.web_api import SlackWebAPI

__all__ = [
    "CallTimeout",
    "MockSlackAPI",
    "RateLimitedGateway",
    "RequestPacer",
    "RetryPolicy",
    "SlackWebAPI",
    "create_slack_api",
]
