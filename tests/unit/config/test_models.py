"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from slack_butler.config.models import (
    AppConfig,
    ArchiveConfig,
    DetectConfig,
    LoggingConfig,
    SlackConfig,
)


class TestSlackConfig:
    def test_defaults(self) -> None:
        config = SlackConfig()

        assert config.token is None
        assert config.include_private is False
        assert config.min_request_interval == 1.0

    def test_negative_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SlackConfig(min_request_interval=-1)


class TestLoggingConfig:
    def test_defaults(self) -> None:
        config = LoggingConfig()

        assert config.level == "INFO"
        assert config.format == "text"

    def test_invalid_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")  # type: ignore[arg-type]

    def test_invalid_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")  # type: ignore[arg-type]


class TestArchiveConfig:
    def test_defaults(self) -> None:
        """Defaults are 30 days to warn and 7 days to archive."""
        config = ArchiveConfig()

        assert config.warn_seconds == 30 * 24 * 3600
        assert config.archive_seconds == 7 * 24 * 3600
        assert config.exclude_channels == ""
        assert config.exclude_prefixes == ""
        assert config.activity_cancels_warning is True


class TestDetectConfig:
    def test_defaults(self) -> None:
        config = DetectConfig()

        assert config.since_days == 1.0
        assert config.announce_to is None

    def test_negative_since_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DetectConfig(since_days=-1)

    def test_assignment_is_validated(self) -> None:
        config = DetectConfig()

        with pytest.raises(ValidationError):
            config.since_days = -1
        assert config.since_days == 1.0


class TestAppConfig:
    def test_all_sections_default(self) -> None:
        config = AppConfig()

        assert isinstance(config.slack, SlackConfig)
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.archive, ArchiveConfig)
        assert isinstance(config.detect, DetectConfig)

    def test_from_nested_dict(self) -> None:
        config = AppConfig(
            **{
                "slack": {"token": "xoxb-x", "include_private": True},
                "logging": {"level": "DEBUG", "format": "json"},
                "archive": {"warn_seconds": 10, "activity_cancels_warning": False},
            }
        )

        assert config.slack.include_private is True
        assert config.logging.format == "json"
        assert config.archive.warn_seconds == 10
        assert config.archive.activity_cancels_warning is False
