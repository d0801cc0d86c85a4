"""Human readable run reports printed to stdout."""

import sys
from collections.abc import Iterable
from datetime import datetime
from typing import TextIO

from slack_butler.application.services.channel_lifecycle import ArchiveRun, ChannelEvaluation
from slack_butler.application.services.health import HealthReport
from slack_butler.application.services.new_channels import DetectResult
from slack_butler.domain.lifecycle import Decision

PREVIEW_LENGTH = 60
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_DECISION_LABELS = {
    Decision.NONE: "ok",
    Decision.WARN: "warn",
    Decision.ARCHIVE: "archive",
}


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Collapse whitespace and truncate a message for a one-line preview."""
    flat = " ".join(text.split())
    if len(flat) <= length:
        return flat
    return flat[: length - 3] + "..."


def format_time(moment: datetime) -> str:
    return moment.strftime(TIME_FORMAT)


def _write(out: TextIO, line: str = "") -> None:
    out.write(line + "\n")


def _evaluation_lines(evaluation: ChannelEvaluation) -> Iterable[str]:
    channel = evaluation.channel
    activity = evaluation.activity
    yield (
        f"  #{channel.name} [{_DECISION_LABELS[evaluation.decision]}] "
        f"last activity: {format_time(activity.last_activity)}, "
        f"members: {channel.member_count}"
    )
    if activity.last_message is not None:
        message = activity.last_message
        author = f"{message.author} (bot)" if message.is_bot else message.author
        yield f"    last message by {author}: {preview(message.text)}"
    if activity.marker is not None:
        yield f"    warned at: {format_time(activity.marker.sent_at)}"


def print_archive_report(run: ArchiveRun, out: TextIO | None = None) -> None:
    """Print the per-channel classification and the final summary."""
    out = out if out is not None else sys.stdout

    _write(out, f"Channel activity as of {format_time(run.now)}:")
    for evaluation in run.evaluations:
        for line in _evaluation_lines(evaluation):
            _write(out, line)

    if run.excluded:
        _write(out)
        _write(out, f"Excluded channels ({len(run.excluded)}):")
        for name in run.excluded:
            _write(out, f"  #{name}")

    if run.failures:
        _write(out)
        _write(out, f"Channels that could not be checked ({len(run.failures)}):")
        for failure in run.failures:
            _write(out, f"  #{failure.channel.name}: {failure.error}")

    if run.dry_run:
        for result in run.results:
            _write(out)
            _write(out, "--- DRY RUN ---")
            _write(out, f"Would {result.decision.value} #{result.channel.name} with message:")
            _write(out, result.message)
            _write(out, "--- END DRY RUN ---")

    action_failures = run.action_failures
    if action_failures:
        _write(out)
        _write(out, f"Failed actions ({len(action_failures)}):")
        for result in action_failures:
            _write(out, f"  #{result.channel.name} ({result.decision.value}): {result.error}")

    warned = [r for r in run.results if r.decision is Decision.WARN and r.ok]
    archived = [r for r in run.results if r.decision is Decision.ARCHIVE and r.ok]
    _write(out)
    if run.dry_run:
        _write(
            out,
            f"Summary (dry run): {len(warned)} channels would be warned, "
            f"{len(archived)} would be archived",
        )
    else:
        _write(
            out,
            f"Summary: {len(warned)} channels warned, {len(archived)} archived",
        )


def print_detect_report(
    result: DetectResult, dry_run: bool, out: TextIO | None = None
) -> None:
    """Print detected channels and what happened to the announcement."""
    out = out if out is not None else sys.stdout

    if not result.new_channels:
        _write(out, "No new channels found")
        return

    _write(out, f"New channels found ({len(result.new_channels)}):")
    for channel in result.new_channels:
        _write(out, f"  #{channel.name} (created: {format_time(channel.created)})")

    if result.duplicates:
        _write(out)
        _write(out, "Already announced, skipped: " + ", ".join(f"#{n}" for n in result.duplicates))

    if result.announce_to is None:
        return
    if not result.announced:
        _write(out, "Nothing new to announce")
        return

    if dry_run:
        _write(out)
        _write(out, "--- DRY RUN ---")
        _write(out, f"Would announce to channel: #{result.announce_to}")
        _write(out, "Message content:")
        _write(out, result.message)
        _write(out, "--- END DRY RUN ---")
    elif result.posted:
        _write(out, f"Announcement posted to #{result.announce_to}")


def print_health_report(
    report: HealthReport, verbose: bool = False, out: TextIO | None = None
) -> None:
    out = out if out is not None else sys.stdout

    _write(out, "Running health checks...")
    _write(out)
    for check in report.checks:
        _write(out, f"{check.name}: {'PASSED' if check.ok else 'FAILED'}")
        if check.detail and (verbose or not check.ok):
            for line in check.detail.splitlines():
                _write(out, f"  {line}")

    if report.missing_optional_scopes:
        _write(
            out,
            "optional scopes: WARNING (missing "
            + ", ".join(report.missing_optional_scopes)
            + "; user names and private channels may be unavailable)",
        )

    _write(out)
    if report.ok:
        _write(out, "Health check completed successfully")
    else:
        _write(out, "Health check failed")
