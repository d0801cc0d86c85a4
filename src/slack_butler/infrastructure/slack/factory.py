"""SlackAPI factory."""

import os

from slack_butler.infrastructure.slack.mock_api import MockSlackAPI
from slack_butler.infrastructure.slack.security import validate_slack_token
from slack_butler.infrastructure.slack.web_api import SlackWebAPI

# Union type for all supported APIs
SlackAPIImpl = SlackWebAPI | MockSlackAPI


def create_slack_api(token: str) -> SlackAPIImpl:
    """Create a Slack API client based on the token and environment.

    Args:
        token: Slack bot token.

    Returns:
        MockSlackAPI if MOCK_SLACK=true, otherwise SlackWebAPI.

    Raises:
        ValidationError: If the token is malformed.
    """
    if os.getenv("MOCK_SLACK", "").lower() == "true":
        return MockSlackAPI()

    validate_slack_token(token)
    return SlackWebAPI(token)
