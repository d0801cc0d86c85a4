"""Application entry point for slack-butler."""

import argparse
import os
import sys
from datetime import timedelta
from pathlib import Path

from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from slack_butler import __version__
from slack_butler.application.services.action_executor import ActionExecutor
from slack_butler.application.services.activity_scanner import ActivityScanner
from slack_butler.application.services.channel_lifecycle import InactiveChannelService
from slack_butler.application.services.duplicate_detector import (
    DuplicateAnnouncementDetector,
)
from slack_butler.application.services.health import HealthChecker
from slack_butler.application.services.new_channels import NewChannelService
from slack_butler.application.services.user_directory import UserDirectory
from slack_butler.config import (
    AppConfig,
    ConfigError,
    ConfigFileNotFoundError,
    load_config,
    require_token,
)
from slack_butler.domain.entities.exclusions import ExclusionSet
from slack_butler.domain.entities.thresholds import Thresholds
from slack_butler.domain.errors import SlackButlerError
from slack_butler.domain.repositories.slack_api import SlackAPI
from slack_butler.infrastructure.logging import get_logger, setup_logging
from slack_butler.infrastructure.slack import (
    RateLimitedGateway,
    RequestPacer,
    RetryPolicy,
    create_slack_api,
)
from slack_butler.infrastructure.slack.security import ValidationError as InputError
from slack_butler.presentation.console.progress import wait_with_progress
from slack_butler.presentation.console.report import (
    print_archive_report,
    print_detect_report,
    print_health_report,
)

# Conventional exit status for SIGINT
EXIT_INTERRUPTED = 130


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="slack-butler",
        description="slack-butler - Slack channel lifecycle management",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: built-in defaults)",
    )
    parser.add_argument("--token", help="Slack bot token (overrides SLACK_TOKEN)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version", action="version", version=f"slack-butler version {__version__}"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    channels = commands.add_parser("channels", help="Manage channels")
    channel_commands = channels.add_subparsers(dest="channels_command", required=True)

    detect = channel_commands.add_parser("detect", help="Detect and announce new channels")
    detect.add_argument(
        "--since", type=float, default=None, help="Days to look back (default: 1)"
    )
    detect.add_argument(
        "--announce-to", default=None, help="Channel to announce new channels in"
    )
    detect.add_argument(
        "--dry-run", action="store_true", help="Preview the announcement without posting"
    )

    archive = channel_commands.add_parser(
        "archive", help="Warn and archive inactive channels"
    )
    archive.add_argument(
        "--warn-seconds",
        type=int,
        default=None,
        help="Seconds of inactivity before warning (default: 2592000, 30 days)",
    )
    archive.add_argument(
        "--archive-seconds",
        type=int,
        default=None,
        help="Seconds after the warning before archiving (default: 604800, 7 days)",
    )
    archive.add_argument(
        "--exclude-channels", default=None, help="Comma-separated channel names to skip"
    )
    archive.add_argument(
        "--exclude-prefixes",
        default=None,
        help="Comma-separated channel name prefixes to skip",
    )
    archive.add_argument(
        "--dry-run", action="store_true", help="Show what would happen without acting"
    )

    health = commands.add_parser("health", help="Check token, permissions and connectivity")
    health.add_argument("--verbose", action="store_true", help="Show details for every check")

    return parser.parse_args(args)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Apply command line flags and environment switches on top of the config."""
    if args.token:
        config.slack.token = args.token
    if args.debug or os.getenv("SLACK_DEBUG", "").lower() in ("1", "true"):
        config.logging.level = "DEBUG"

    if getattr(args, "since", None) is not None:
        config.detect.since_days = args.since
    if getattr(args, "announce_to", None) is not None:
        config.detect.announce_to = args.announce_to

    if getattr(args, "warn_seconds", None) is not None:
        config.archive.warn_seconds = args.warn_seconds
    if getattr(args, "archive_seconds", None) is not None:
        config.archive.archive_seconds = args.archive_seconds
    if getattr(args, "exclude_channels", None) is not None:
        config.archive.exclude_channels = args.exclude_channels
    if getattr(args, "exclude_prefixes", None) is not None:
        config.archive.exclude_prefixes = args.exclude_prefixes
    return config


def build_gateway(config: AppConfig, logger: BoundLogger) -> RateLimitedGateway:
    interval = config.slack.min_request_interval
    return RateLimitedGateway(
        RetryPolicy(sleep=wait_with_progress),
        logger=logger,
        pacer=RequestPacer(interval) if interval > 0 else None,
    )


def authenticate(api: SlackAPI, gateway: RateLimitedGateway) -> str:
    """Return the bot's own user ID."""
    auth = gateway.call(
        lambda timeout: api.auth_test(),
        action="authenticate",
        target="bot user",
    )
    return auth.get("user_id", "")


def run_detect(config: AppConfig, args: argparse.Namespace) -> int:
    logger = get_logger("detect")
    api = create_slack_api(require_token(config))
    gateway = build_gateway(config, get_logger("gateway"))
    bot_user_id = authenticate(api, gateway)

    user_map = UserDirectory(api, gateway, get_logger("users")).load() if args.dry_run else None
    detector = DuplicateAnnouncementDetector(
        api, gateway, bot_user_id, logger=get_logger("duplicates")
    )
    service = NewChannelService(
        api,
        gateway,
        detector,
        logger=logger,
        include_private=config.slack.include_private,
    )
    result = service.run(
        since=timedelta(days=config.detect.since_days),
        announce_to=config.detect.announce_to,
        dry_run=args.dry_run,
        user_map=user_map,
    )
    print_detect_report(result, dry_run=args.dry_run)
    return 0


def run_archive(config: AppConfig, args: argparse.Namespace) -> int:
    logger = get_logger("archive")
    thresholds = Thresholds.from_seconds(
        config.archive.warn_seconds, config.archive.archive_seconds
    )
    exclusions = ExclusionSet.parse(
        config.archive.exclude_channels, config.archive.exclude_prefixes
    )

    api = create_slack_api(require_token(config))
    gateway = build_gateway(config, get_logger("gateway"))
    bot_user_id = authenticate(api, gateway)
    user_map = UserDirectory(api, gateway, get_logger("users")).load()

    service = InactiveChannelService(
        api,
        gateway,
        scanner=ActivityScanner(api, gateway, bot_user_id, logger=get_logger("scanner")),
        executor=ActionExecutor(
            api,
            gateway,
            thresholds,
            logger=get_logger("executor"),
            activity_cancels_warning=config.archive.activity_cancels_warning,
        ),
        logger=logger,
        include_private=config.slack.include_private,
        activity_cancels_warning=config.archive.activity_cancels_warning,
    )
    logger.info(
        "Starting inactive channel run",
        warn_seconds=config.archive.warn_seconds,
        archive_seconds=config.archive.archive_seconds,
        dry_run=args.dry_run,
    )
    run = service.run(thresholds, exclusions, dry_run=args.dry_run, user_map=user_map)
    print_archive_report(run)
    return 1 if run.failures or run.action_failures else 0


def run_health(config: AppConfig, args: argparse.Namespace) -> int:
    checker = HealthChecker(
        create_slack_api,
        build_gateway(config, get_logger("gateway")),
        logger=get_logger("health"),
    )
    report = checker.run(config.slack.token or "")
    print_health_report(report, verbose=args.verbose)
    return 0 if report.ok else 1


def run(args: argparse.Namespace) -> int:
    """Load configuration and dispatch to the selected command.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    config = apply_overrides(load_config(args.config), args)

    setup_logging(config.logging)
    logger = get_logger(__name__)
    logger.debug("Starting slack-butler", version=__version__, command=args.command)

    if args.command == "health":
        return run_health(config, args)
    if args.channels_command == "detect":
        return run_detect(config, args)
    return run_archive(config, args)


def main() -> None:
    """Main entry point."""
    args = parse_args()

    try:
        sys.exit(run(args))
    except ConfigFileNotFoundError:
        print(f"Error: {args.config} not found", file=sys.stderr)
        sys.exit(1)
    except ConfigError as e:
        print(f"Error: Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Configuration validation error: {e}", file=sys.stderr)
        sys.exit(1)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except SlackButlerError as e:
        print(f"Error: {e.describe()}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print(file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    main()
