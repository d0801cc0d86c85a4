"""Token and channel name validation, and log redaction."""

import re

BOT_TOKEN_PATTERN = re.compile(r"^xoxb-\d+-\d+-[a-zA-Z0-9]+$")
REDACT_PATTERNS = (
    re.compile(r"xox[abposr]-[a-zA-Z0-9-]+"),
    re.compile(r"MOCK-[A-Z0-9-]+"),
)
CHANNEL_NAME_PATTERN = re.compile(r"^[a-z0-9_-]+$")
MAX_CHANNEL_NAME_LENGTH = 80


class ValidationError(ValueError):
    """Raised when a token or channel name is malformed."""


def is_test_token(token: str) -> bool:
    return token.startswith("MOCK-") or "TESTING-ONLY" in token


def validate_slack_token(token: str) -> None:
    """Check that a token looks like a Slack bot token.

    Test tokens (``MOCK-...`` or containing ``TESTING-ONLY``) are accepted.

    Raises:
        ValidationError: If the token is empty or malformed.
    """
    if not token:
        raise ValidationError("token cannot be empty")
    if is_test_token(token):
        return
    if not token.startswith("xoxb-"):
        raise ValidationError("invalid token format: bot tokens must start with 'xoxb-'")
    if not BOT_TOKEN_PATTERN.match(token):
        raise ValidationError(
            "invalid token format: token does not match expected Slack bot token pattern"
        )
    if len(token) < 50:
        raise ValidationError("invalid token: token appears too short")


def sanitize_for_logging(text: str) -> str:
    """Replace anything that looks like a token with [REDACTED]."""
    for pattern in REDACT_PATTERNS:
        text = pattern.sub("[REDACTED]", text)
    return text


def normalize_channel_name(channel_name: str) -> str:
    """Validate a channel name given by the operator and strip its '#'.

    Raises:
        ValidationError: If the name is empty, too long or has invalid characters.
    """
    name = channel_name.strip().removeprefix("#")
    if not name:
        raise ValidationError("channel name cannot be empty")
    if len(name) > MAX_CHANNEL_NAME_LENGTH:
        raise ValidationError(
            f"invalid channel name: too long (max {MAX_CHANNEL_NAME_LENGTH} characters)"
        )
    if not CHANNEL_NAME_PATTERN.match(name):
        raise ValidationError(
            "invalid channel name: must contain only lowercase letters, numbers, "
            "hyphens, and underscores"
        )
    return name
