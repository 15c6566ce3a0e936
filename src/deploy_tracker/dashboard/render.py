"""Plain-text rendering of a channel's deploy history."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from ..deploy.models import Deploy

HEADER = "Deploy history\n--------------"
NO_DEPLOYS_MESSAGE = "No deploys in channel so far"

# RFC 822 layout: "04 Aug 16 09:28 CEST", or "04 Aug 16 09:28 +0200" without a zone abbreviation
RFC822_FORMAT = "%d %b %y %H:%M"


def format_time(value: datetime) -> str:
    zone = value.tzname()
    if zone and zone.isalpha() and len(zone) <= 5:
        return f"{value.strftime(RFC822_FORMAT)} {zone}"
    return value.strftime(f"{RFC822_FORMAT} %z").rstrip()


def render_deploy(deploy: Deploy) -> str:
    """Render a single history line."""

    if deploy.finished_at is None:
        return (
            f"* {deploy.user.name} is currently deploying {deploy.subject} "
            f"since {format_time(deploy.started_at)}"
        )

    line = (
        f"* {deploy.user.name} was deploying {deploy.subject} "
        f"since {format_time(deploy.started_at)} until {format_time(deploy.finished_at)}"
    )
    if deploy.aborted:
        suffix = f"aborted, {deploy.abort_reason}" if deploy.abort_reason else "aborted"
        line += f" ({suffix})"
    return line


def render_report(deploys: Iterable[Deploy]) -> str:
    """Render the history report for an ordered sequence of deploys."""

    lines = [render_deploy(deploy) for deploy in deploys]
    body = "\n".join(lines) if lines else NO_DEPLOYS_MESSAGE
    return f"{HEADER}\n\n{body}\n"


__all__ = ["NO_DEPLOYS_MESSAGE", "format_time", "render_deploy", "render_report"]
