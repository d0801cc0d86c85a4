"""Pydantic models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class SlackConfig(BaseModel):
    """Slack integration configuration."""

    model_config = {"validate_assignment": True}

    token: str | None = Field(
        default=None,
        description=(
            "Slack bot token used for Web API calls (typically starts with 'xoxb-'). "
            "Overridden by the SLACK_TOKEN environment variable or --token."
        ),
    )
    include_private: bool = Field(
        default=False,
        description=(
            "Also list private channels. Requires the 'groups:read' OAuth scope."
        ),
    )
    min_request_interval: float = Field(
        default=1.0,
        ge=0,
        description="Minimum seconds between Slack API requests; 0 disables pacing.",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = {"validate_assignment": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"


class ArchiveConfig(BaseModel):
    """Inactive channel warn/archive configuration."""

    model_config = {"validate_assignment": True}

    warn_seconds: int = Field(
        default=2_592_000,
        description="Seconds of inactivity before a channel is warned (30 days).",
    )
    archive_seconds: int = Field(
        default=604_800,
        description="Grace period in seconds after a warning before archiving (7 days).",
    )
    exclude_channels: str = Field(
        default="",
        description="Comma-separated channel names that are never warned or archived.",
    )
    exclude_prefixes: str = Field(
        default="",
        description="Comma-separated channel name prefixes that are never warned or archived.",
    )
    activity_cancels_warning: bool = Field(
        default=True,
        description=(
            "Treat a message posted after the warning as renewed activity that "
            "cancels the pending archive."
        ),
    )


class DetectConfig(BaseModel):
    """New channel detection configuration."""

    model_config = {"validate_assignment": True}

    since_days: float = Field(default=1.0, ge=0)
    announce_to: str | None = None


class AppConfig(BaseModel):
    """Application configuration."""

    slack: SlackConfig = Field(default_factory=SlackConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig)
    detect: DetectConfig = Field(default_factory=DetectConfig)
