"""Tests for duplicate announcement detection."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from slack_butler.application.services.duplicate_detector import (
    DuplicateAnnouncementDetector,
    mentions_channel,
)
from slack_butler.domain.errors import MissingPermissionError
from slack_butler.infrastructure.slack.gateway import RateLimitedGateway, RetryPolicy
from slack_butler.infrastructure.slack.mock_api import (
    MOCK_BOT_USER_ID,
    MockSlackAPI,
    rate_limit_error,
    slack_api_error,
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def api() -> MockSlackAPI:
    api = MockSlackAPI()
    api.add_channel("CANN", "announcements", NOW - timedelta(days=100))
    return api


@pytest.fixture
def detector(api: MockSlackAPI) -> DuplicateAnnouncementDetector:
    logger = structlog.stdlib.get_logger("test")
    gateway = RateLimitedGateway(
        RetryPolicy(max_attempts=2, sleep=lambda _: None), logger=logger
    )
    return DuplicateAnnouncementDetector(api, gateway, MOCK_BOT_USER_ID, logger=logger)


class TestMentionsChannel:
    @pytest.mark.parametrize(
        "text",
        [
            "New channel alert!\n• #project-x - created today",
            "see <#C123|project-x>",
            "see <#C999>",
            "see <#C999|>",
        ],
    )
    def test_mentions(self, text: str) -> None:
        assert mentions_channel(text, "project-x", channel_id="C999") is True

    @pytest.mark.parametrize(
        "text",
        [
            "#project-xyz was created",
            "#my-project-x was created",
            "project-x without a hash",
            "<#C123|project-xy>",
        ],
    )
    def test_no_partial_matches(self, text: str) -> None:
        assert mentions_channel(text, "project-x") is False


class TestDuplicateAnnouncementDetector:
    def test_batch_with_one_duplicate(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.add_message(
            "CANN",
            "New channel alert!\n\n• <#CX> - created May 31, 2024",
            MOCK_BOT_USER_ID,
            NOW - timedelta(hours=1),
            bot_id="B1",
        )

        result = detector.check(
            "CANN", ["x", "y"], channel_ids={"x": "CX", "y": "CY"}
        )

        assert result.is_duplicate is True
        assert result.already_announced == {"x"}

    def test_only_bot_messages_count(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.add_message("CANN", "did anyone see #x?", "U1", NOW - timedelta(hours=1))

        result = detector.check("CANN", ["x"])

        assert result.is_duplicate is False
        assert result.already_announced == set()

    def test_hash_prefixed_candidates(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.add_message("CANN", "• #x - created", MOCK_BOT_USER_ID, NOW)

        result = detector.check("CANN", ["#x"])

        assert result.already_announced == {"x"}

    def test_only_recent_messages_scanned(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.add_message("CANN", "• #x - created", MOCK_BOT_USER_ID, NOW - timedelta(days=2))
        for i in range(15):
            api.add_message("CANN", f"chatter {i}", "U1", NOW - timedelta(minutes=15 - i))

        result = detector.check("CANN", ["x"])

        assert result.is_duplicate is False

    def test_missing_permission_propagates(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.fail("conversation_history", slack_api_error("missing_scope"))

        with pytest.raises(MissingPermissionError):
            detector.check("CANN", ["x"])

    def test_rate_limit_resolves_to_no_duplicates(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.fail("conversation_history", rate_limit_error(), times=2)

        result = detector.check("CANN", ["x"])

        assert result.is_duplicate is False

    def test_transient_error_resolves_to_no_duplicates(
        self, api: MockSlackAPI, detector: DuplicateAnnouncementDetector
    ) -> None:
        api.fail("conversation_history", slack_api_error("internal_error"))

        assert detector.check("CANN", ["x"]).is_duplicate is False
