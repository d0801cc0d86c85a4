"""Error taxonomy for Slack operations.

Every error carries a ``hint`` telling the operator what to do about it.
"""

SLACK_APPS_URL = "https://api.slack.com/apps"


class SlackButlerError(Exception):
    """Base exception for failures talking to Slack."""

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint

    def describe(self) -> str:
        """Return the message followed by the remediation hint, if any."""
        message = str(self)
        if self.hint:
            return f"{message}\n  Fix: {self.hint}"
        return message


class RateLimitedError(SlackButlerError):
    """Raised when Slack keeps rate limiting after all retries."""

    def __init__(self, action: str, retry_after: float, attempts: int) -> None:
        super().__init__(
            f"rate limited by Slack API while trying to {action} "
            f"(gave up after {attempts} attempts)",
            hint=(
                f"wait at least {int(retry_after)} seconds and re-run; larger "
                "thresholds or fewer channels reduce the number of API calls"
            ),
        )
        self.action = action
        self.retry_after = retry_after
        self.attempts = attempts


class MissingPermissionError(SlackButlerError):
    """Raised when the bot token lacks an OAuth scope."""

    def __init__(self, scope: str, action: str) -> None:
        super().__init__(
            f"missing required permission to {action}. "
            f"Your bot needs the '{scope}' OAuth scope",
            hint=f"add the '{scope}' scope in your Slack app settings at {SLACK_APPS_URL}",
        )
        self.scope = scope
        self.action = action


class NotFoundError(SlackButlerError):
    """Raised when a channel or user does not exist or is not visible."""

    def __init__(self, entity: str, action: str) -> None:
        super().__init__(
            f"{entity} not found while trying to {action}",
            hint="make sure it still exists and the bot can see it",
        )
        self.entity = entity
        self.action = action


class AuthenticationError(SlackButlerError):
    """Raised when the token is invalid or revoked."""

    def __init__(self, code: str) -> None:
        super().__init__(
            f"authentication failed: {code}",
            hint="check your SLACK_TOKEN; it may be invalid or revoked",
        )
        self.code = code


class TransientAPIError(SlackButlerError):
    """Raised for any other Slack API failure."""

    def __init__(self, action: str, code: str, attempts: int) -> None:
        super().__init__(
            f"failed to {action}: {code} (attempt {attempts})",
            hint="this is usually temporary; re-run later",
        )
        self.action = action
        self.code = code
        self.attempts = attempts
