"""Repository protocols."""

from slack_butler.domain.repositories.slack_api import HISTORY_LIMIT, Page, SlackAPI

__all__ = ["HISTORY_LIMIT", "Page", "SlackAPI"]
