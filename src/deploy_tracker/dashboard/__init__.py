"""Deploy history rendering and the HTTP dashboard."""

from .render import NO_DEPLOYS_MESSAGE, render_report
from .since import MALFORMED_SINCE_MESSAGE, parse_rfc3339

__all__ = [
    "MALFORMED_SINCE_MESSAGE",
    "NO_DEPLOYS_MESSAGE",
    "parse_rfc3339",
    "render_report",
]
