"""Warn/archive thresholds."""

from datetime import timedelta

from pydantic import BaseModel, field_validator


class Thresholds(BaseModel):
    """Inactivity thresholds for the warn/archive lifecycle.

    Attributes:
        warn_after: Inactivity before a channel is warned.
        archive_after: Grace period after a warning before archiving.
    """

    model_config = {"frozen": True}

    warn_after: timedelta
    archive_after: timedelta

    @field_validator("warn_after", "archive_after")
    @classmethod
    def _must_be_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError(f"must be positive, got {int(value.total_seconds())}")
        return value

    @classmethod
    def from_seconds(cls, warn_seconds: int, archive_seconds: int) -> "Thresholds":
        """Build thresholds from second counts.

        Raises:
            ValidationError: If either value is not strictly positive.
        """
        return cls(
            warn_after=timedelta(seconds=warn_seconds),
            archive_after=timedelta(seconds=archive_seconds),
        )
