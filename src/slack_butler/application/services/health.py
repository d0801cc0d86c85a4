"""Connectivity and permission diagnostics."""

from collections.abc import Callable

from pydantic import BaseModel, Field
from structlog.stdlib import BoundLogger

from slack_butler.domain.errors import SlackButlerError
from slack_butler.domain.repositories.slack_api import SlackAPI
from slack_butler.infrastructure.slack.gateway import CallTimeout, RateLimitedGateway
from slack_butler.infrastructure.slack.security import ValidationError, validate_slack_token

REQUIRED_SCOPES = (
    "channels:read",
    "channels:history",
    "channels:join",
    "channels:manage",
    "chat:write",
)
OPTIONAL_SCOPES = ("users:read", "groups:read")


class HealthCheck(BaseModel):
    """Outcome of one diagnostic step."""

    name: str
    ok: bool
    detail: str = ""


class HealthReport(BaseModel):
    """All diagnostic results, in the order they ran."""

    checks: list[HealthCheck] = Field(default_factory=list)
    missing_scopes: list[str] = Field(default_factory=list)
    missing_optional_scopes: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(check.ok for check in self.checks)


class HealthChecker:
    """Verifies the token, its OAuth scopes and basic API access."""

    def __init__(
        self,
        api_factory: Callable[[str], SlackAPI],
        gateway: RateLimitedGateway,
        logger: BoundLogger,
    ) -> None:
        """Initialize the checker.

        Args:
            api_factory: Builds a SlackAPI for a token that passed validation.
            gateway: Gateway applying the retry policy.
            logger: Logger instance.
        """
        self._api_factory = api_factory
        self._gateway = gateway
        self._logger = logger

    def run(self, token: str) -> HealthReport:
        """Run every diagnostic.

        Later steps are skipped once authentication fails, since they
        would fail the same way.
        """
        report = HealthReport()

        try:
            validate_slack_token(token)
            report.checks.append(HealthCheck(name="token format", ok=True))
        except ValidationError as e:
            report.checks.append(HealthCheck(name="token format", ok=False, detail=str(e)))
            return report

        api = self._api_factory(token)
        try:
            auth = self._gateway.call(
                lambda timeout: api.auth_test(),
                action="authenticate",
                target="bot user",
            )
        except SlackButlerError as e:
            report.checks.append(
                HealthCheck(name="authentication", ok=False, detail=e.describe())
            )
            return report
        report.checks.append(
            HealthCheck(
                name="authentication",
                ok=True,
                detail=f"bot {auth.get('user', '?')} ({auth.get('user_id', '?')}) "
                f"in team {auth.get('team', '?')}",
            )
        )

        granted = set(auth.get("scopes") or [])
        report.missing_scopes = [s for s in REQUIRED_SCOPES if s not in granted]
        report.missing_optional_scopes = [s for s in OPTIONAL_SCOPES if s not in granted]
        if report.missing_scopes:
            detail = "missing: " + ", ".join(report.missing_scopes)
        else:
            detail = "all required scopes granted"
        report.checks.append(
            HealthCheck(name="oauth scopes", ok=not report.missing_scopes, detail=detail)
        )

        try:
            channels = self._gateway.collect_pages(
                lambda cursor, timeout: api.list_channels(cursor=cursor, timeout=timeout),
                action="list channels",
                scope="channels:read",
                target="channel list",
                timeout=CallTimeout.LONG,
            )
        except SlackButlerError as e:
            report.checks.append(
                HealthCheck(name="channel listing", ok=False, detail=e.describe())
            )
        else:
            report.checks.append(
                HealthCheck(
                    name="channel listing",
                    ok=True,
                    detail=f"{len(channels)} channels visible",
                )
            )

        self._logger.info("Health check completed", ok=report.ok)
        return report
