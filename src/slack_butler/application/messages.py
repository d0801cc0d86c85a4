"""Message templates posted to Slack."""

from collections.abc import Mapping, Sequence
from datetime import timedelta

from jinja2 import Environment, StrictUndefined

from slack_butler.domain.entities.activity import WARNING_MARKER
from slack_butler.domain.entities.channel import Channel
from slack_butler.domain.entities.thresholds import Thresholds

_env = Environment(undefined=StrictUndefined)

WARNING_TEMPLATE = _env.from_string(
    """\
:rotating_light: *Inactive Channel Warning* :rotating_light:

This channel has been inactive for more than {{ warn_after }}. \
{% if activity_cancels_warning %}\
It will be archived in {{ archive_after }} if it stays inactive.

*To keep this channel active:*
• Post a message in this channel
• Any new message resets the inactivity timer

If no one posts within {{ archive_after }}, the channel will be archived automatically.
{% else %}\
It will be archived in {{ archive_after }}.

*To keep this channel:*
• Ask a workspace admin to exclude it from automatic archiving

New messages posted after this warning do not cancel it.
{% endif %}\
Archived channels can be restored by workspace admins.

{{ marker }}"""
)

ARCHIVAL_TEMPLATE = _env.from_string(
    """\
:clipboard: *Channel Archival Notice*

This channel is being archived because it has been inactive for more than \
{{ warn_after }} and \
{% if activity_cancels_warning %}nobody posted during{% else %}it was not excluded within{% endif %} \
the {{ archive_after }} grace period after the inactivity warning.

Workspace admins can unarchive it if it is needed again.

_This action was performed by the slack-butler bot._"""
)

ANNOUNCEMENT_ENTRY_TEMPLATE = _env.from_string(
    "• {{ mention }} - created {{ created }}"
    "{% if creator %} by {{ creator }}{% endif %}"
    "{% if purpose %}\n  Purpose: {{ purpose }}{% endif %}"
)

_UNITS = (
    ("day", 86_400),
    ("hour", 3_600),
    ("minute", 60),
    ("second", 1),
)


def format_duration(duration: timedelta) -> str:
    """Render a duration in its largest whole unit, e.g. "2 hours".

    Smaller remainders are dropped: 90 minutes renders as "1 hour".
    """
    seconds = int(duration.total_seconds())
    if seconds <= 0:
        return "0 seconds"
    for unit, size in _UNITS:
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return "0 seconds"


def render_warning(thresholds: Thresholds, activity_cancels_warning: bool = True) -> str:
    """Render the inactivity warning, including the hidden marker.

    Args:
        thresholds: Thresholds quoted in the text.
        activity_cancels_warning: Whether a later message cancels the warning,
            which decides how readers are told to keep the channel.
    """
    return WARNING_TEMPLATE.render(
        activity_cancels_warning=activity_cancels_warning,
        warn_after=format_duration(thresholds.warn_after),
        archive_after=format_duration(thresholds.archive_after),
        marker=WARNING_MARKER,
    )


def render_archival_notice(
    thresholds: Thresholds, activity_cancels_warning: bool = True
) -> str:
    return ARCHIVAL_TEMPLATE.render(
        activity_cancels_warning=activity_cancels_warning,
        warn_after=format_duration(thresholds.warn_after),
        archive_after=format_duration(thresholds.archive_after),
    )


def render_announcement(
    channels: Sequence[Channel], user_map: Mapping[str, str] | None = None
) -> str:
    """Render a new channel announcement.

    Without a user map the text uses Slack mention syntax (``<#C123>``,
    ``<@U123>``), which Slack renders as links. With a user map it uses plain
    names, for previews printed to the terminal.

    Args:
        channels: Channels to announce, in order.
        user_map: User ID to display name mapping for previews.

    Returns:
        The announcement text.
    """
    if len(channels) == 1:
        header = "New channel alert!"
    else:
        header = f"{len(channels)} new channels created!"

    entries = []
    for channel in channels:
        if user_map is None:
            mention = f"<#{channel.id}>"
            creator = f"<@{channel.creator}>" if channel.creator else ""
        else:
            mention = f"#{channel.name}"
            creator = user_map.get(channel.creator, channel.creator)
        entries.append(
            ANNOUNCEMENT_ENTRY_TEMPLATE.render(
                mention=mention,
                created=f"{channel.created:%B} {channel.created.day}, {channel.created.year}",
                creator=creator,
                purpose=channel.purpose,
            )
        )
    return header + "\n\n" + "\n\n".join(entries) + "\n"
