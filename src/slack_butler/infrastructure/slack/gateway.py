"""Rate-limited gateway around Slack Web API calls."""

import time
from collections.abc import Callable
from enum import IntEnum
from functools import partial
from typing import Any, TypeVar

from slack_sdk.errors import SlackApiError
from structlog.stdlib import BoundLogger

from slack_butler.domain.errors import (
    AuthenticationError,
    MissingPermissionError,
    NotFoundError,
    RateLimitedError,
    SlackButlerError,
    TransientAPIError,
)
from slack_butler.domain.repositories.slack_api import Page
from slack_butler.infrastructure.slack.security import sanitize_for_logging

T = TypeVar("T")

MAX_ATTEMPTS = 3
# Slack's Retry-After is rounded down; wait one more second to be safe
RETRY_AFTER_BUFFER = 1.0
# Baseline spacing between requests, one per second
MIN_REQUEST_INTERVAL = 1.0
# Backoff without Retry-After doubles per consecutive rate limit, up to 2**6 s
BACKOFF_BASE = 1.0
MAX_BACKOFF_EXPONENT = 6
MAX_BACKOFF = BACKOFF_BASE * 2**MAX_BACKOFF_EXPONENT

RATE_LIMIT_CODES = frozenset({"ratelimited", "rate_limited"})
NOT_FOUND_CODES = frozenset({"channel_not_found", "user_not_found", "not_in_channel"})
AUTH_CODES = frozenset(
    {"invalid_auth", "not_authed", "token_revoked", "token_expired", "account_inactive"}
)


class CallTimeout(IntEnum):
    """Per-call deadlines in seconds."""

    SHORT = 30
    LONG = 120


def is_rate_limit_error(error: SlackApiError) -> bool:
    response = error.response
    if getattr(response, "status_code", None) == 429:
        return True
    return _error_code(error) in RATE_LIMIT_CODES


def exponential_backoff(consecutive: int) -> float:
    """Wait after ``consecutive`` rate limits in a row when Slack gives no hint."""
    return BACKOFF_BASE * 2 ** min(max(consecutive, 0), MAX_BACKOFF_EXPONENT)


def retry_after_seconds(error: SlackApiError, fallback: float = MAX_BACKOFF) -> float | None:
    """Return how long Slack asks us to wait, or None if not rate limited.

    Args:
        error: The error raised by slack_sdk.
        fallback: Wait used when the response has no usable Retry-After header.
    """
    if not is_rate_limit_error(error):
        return None
    headers: dict[str, Any] = getattr(error.response, "headers", None) or {}
    for key, value in headers.items():
        if key.lower() != "retry-after":
            continue
        if isinstance(value, list):
            value = value[0] if value else None
        try:
            return float(value) + RETRY_AFTER_BUFFER
        except (TypeError, ValueError):
            break
    return fallback


def _error_code(error: SlackApiError) -> str:
    response = error.response
    try:
        code = response.get("error")
    except AttributeError:
        code = None
    return str(code) if code else "unknown_error"


def classify_slack_error(
    error: SlackApiError,
    action: str,
    attempts: int,
    scope: str | None = None,
    target: str = "channel",
) -> SlackButlerError:
    """Map a Slack API error onto the domain error taxonomy.

    Args:
        error: The error raised by slack_sdk.
        action: What we were trying to do, e.g. "archive channels".
        attempts: Number of attempts made so far.
        scope: OAuth scope the action needs, used when Slack does not say.
        target: Name of the entity the action operates on.
    """
    code = _error_code(error)
    if code == "missing_scope":
        needed = error.response.get("needed") or scope or "unknown"
        return MissingPermissionError(str(needed), action)
    if code in NOT_FOUND_CODES:
        return NotFoundError(target, action)
    if code in AUTH_CODES:
        return AuthenticationError(code)
    if code in RATE_LIMIT_CODES:
        return RateLimitedError(action, MAX_BACKOFF, attempts)
    return TransientAPIError(action, code, attempts)


class RetryPolicy:
    """How the gateway reacts to rate limiting.

    Attributes:
        max_attempts: Total attempts per call, including the first one.
        wait_for: Extracts the wait in seconds from an error, or None when the
            error is not a rate limit. Receives the backoff wait to fall back on.
        backoff: Fallback wait for the n-th consecutive rate limit.
        sleep: Blocks for the given number of seconds.
    """

    def __init__(
        self,
        max_attempts: int = MAX_ATTEMPTS,
        wait_for: Callable[[SlackApiError, float], float | None] = retry_after_seconds,
        backoff: Callable[[int], float] = exponential_backoff,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.wait_for = wait_for
        self.backoff = backoff
        self.sleep = sleep


class RequestPacer:
    """Keeps consecutive requests at least ``min_interval`` seconds apart."""

    def __init__(
        self,
        min_interval: float = MIN_REQUEST_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None

    def wait(self) -> None:
        """Block until the next request may be sent, then mark it as sent."""
        if self._last_request is not None:
            remaining = self.min_interval - (self._clock() - self._last_request)
            if remaining > 0:
                self._sleep(remaining)
        self._last_request = self._clock()


class RateLimitedGateway:
    """Runs Slack API calls with bounded retry on rate limiting.

    Only rate limit errors are retried. Every other failure is raised at once
    as a domain error from ``slack_butler.domain.errors``. Consecutive rate
    limits across calls grow the fallback backoff; any success resets it.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        logger: BoundLogger,
        pacer: RequestPacer | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            policy: Retry policy.
            logger: Logger instance.
            pacer: Spaces out requests; None sends them back to back.
        """
        self._policy = policy
        self._logger = logger
        self._pacer = pacer
        self._rate_limit_streak = 0

    def call(
        self,
        operation: Callable[[int], T],
        *,
        action: str,
        scope: str | None = None,
        target: str = "channel",
        timeout: CallTimeout = CallTimeout.SHORT,
    ) -> T:
        """Run an operation through the retry policy.

        Args:
            operation: Callable receiving the request timeout in seconds.
            action: Human readable description used in errors and logs.
            scope: OAuth scope the operation requires.
            target: Entity the operation acts on, for not-found errors.
            timeout: Per-call deadline.

        Returns:
            Whatever the operation returns.

        Raises:
            RateLimitedError: If every attempt was rate limited.
            SlackButlerError: For any other API failure.
        """
        max_attempts = self._policy.max_attempts
        for attempt in range(1, max_attempts + 1):
            if self._pacer is not None:
                self._pacer.wait()
            try:
                result = operation(int(timeout))
            except SlackApiError as e:
                fallback = self._policy.backoff(self._rate_limit_streak + 1)
                wait = self._policy.wait_for(e, fallback)
                if wait is None:
                    self._logger.debug(
                        "Slack API error",
                        action=action,
                        error=sanitize_for_logging(_error_code(e)),
                        attempt=attempt,
                    )
                    raise classify_slack_error(
                        e, action, attempt, scope=scope, target=target
                    ) from e
                self._rate_limit_streak += 1
                if attempt >= max_attempts:
                    self._logger.error(
                        "Rate limit retries exhausted",
                        action=action,
                        attempts=attempt,
                        retry_after=wait,
                    )
                    raise RateLimitedError(action, wait, attempt) from e
                self._logger.warning(
                    "Rate limited, waiting before retry",
                    action=action,
                    attempt=attempt,
                    retry_after=wait,
                    streak=self._rate_limit_streak,
                )
                self._policy.sleep(wait)
            except OSError as e:
                # Network failures and request timeouts
                raise TransientAPIError(
                    action, sanitize_for_logging(str(e)) or type(e).__name__, attempt
                ) from e
            else:
                self._rate_limit_streak = 0
                return result
        raise AssertionError("unreachable")

    def collect_pages(
        self,
        fetch_page: Callable[[str | None, int], Page[T]],
        *,
        action: str,
        scope: str | None = None,
        target: str = "channel",
        timeout: CallTimeout = CallTimeout.LONG,
    ) -> list[T]:
        """Follow cursor pagination, running every page as its own call.

        A rate limit on one page retries that page only; pages already
        fetched are kept.

        Args:
            fetch_page: Callable receiving the cursor (None for the first page)
                and the request timeout, returning one page.
            action: Human readable description used in errors and logs.
            scope: OAuth scope the listing requires.
            target: Entity listed, for not-found errors.
            timeout: Per-page deadline.

        Returns:
            Items of every page in listing order.
        """
        items: list[T] = []
        cursor: str | None = None
        while True:
            page = self.call(
                partial(fetch_page, cursor),
                action=action,
                scope=scope,
                target=target,
                timeout=timeout,
            )
            items.extend(page.items)
            if not page.next_cursor:
                return items
            cursor = page.next_cursor
