"""Tool registration for the deploy tracker MCP server."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from fastmcp import Context, FastMCP

from ..dashboard.render import format_time, render_report
from ..dashboard.since import parse_rfc3339
from ..deploy import ChannelDeploys, Deploy, User
from ..storage import DeployRepository

NOBODY_DEPLOYING_MESSAGE = "No one is deploying at the moment"


@dataclass(slots=True)
class ToolHandles:
    current_deploy: Any
    start_deploy: Any
    finish_deploy: Any
    abort_deploy: Any
    deploy_history: Any


def _deploy_summary(deploy: Deploy | None) -> dict[str, Any] | None:
    if deploy is None:
        return None
    summary = deploy.to_payload()
    summary["state"] = deploy.state.value
    return summary


def conflict_message(deploy: Deploy) -> str:
    return (
        f"{deploy.user.name} is already deploying {deploy.subject} "
        f"since {format_time(deploy.started_at)}"
    )


def current_message(deploy: Deploy) -> str:
    return (
        f"{deploy.user.name} is deploying {deploy.subject} "
        f"since {format_time(deploy.started_at)}"
    )


def started_message(deploy: Deploy) -> str:
    return f"{deploy.user.name} is deploying {deploy.subject}"


def finished_message(deploy: Deploy) -> str:
    return f"{deploy.user.name} has finished deploying {deploy.subject}"


def aborted_message(deploy: Deploy) -> str:
    message = f"{deploy.user.name} has aborted deploying {deploy.subject}"
    if deploy.abort_reason:
        message += f": {deploy.abort_reason}"
    return message


def register_tools(
    server: FastMCP,
    *,
    tracker: ChannelDeploys,
    repository: DeployRepository,
) -> ToolHandles:
    """Register deploy tracking tools on the server."""

    def _current_deploy(channel_id: str, context: Context | None = None) -> dict[str, Any]:
        """Report the deploy currently running in a channel."""

        deploy, in_progress = tracker.current(channel_id)
        message = current_message(deploy) if in_progress else NOBODY_DEPLOYING_MESSAGE

        _emit_log(
            context,
            "debug",
            "Reported current deploy",
            extra={"channel_id": channel_id, "in_progress": in_progress},
        )
        return {
            "channel_id": channel_id,
            "in_progress": in_progress,
            "deploy": _deploy_summary(deploy if in_progress else None),
            "message": message,
        }

    def _start_deploy(
        channel_id: str,
        user_id: str,
        user_name: str,
        subject: str,
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Announce a deploy in a channel."""

        candidate = Deploy(user=User(id=user_id, name=user_name), subject=subject)
        deploy, started = tracker.start(channel_id, candidate)
        message = started_message(deploy) if started else conflict_message(deploy)

        _emit_log(
            context,
            "info" if started else "warning",
            "Deploy started" if started else "Deploy conflict",
            extra={"channel_id": channel_id, "user_id": user_id, "owner_id": deploy.user.id},
        )
        return {
            "channel_id": channel_id,
            "started": started,
            "deploy": _deploy_summary(deploy),
            "message": message,
        }

    def _finish_deploy(channel_id: str, context: Context | None = None) -> dict[str, Any]:
        """Mark the channel's running deploy as finished."""

        deploy, ok = tracker.finish(channel_id)
        _emit_log(context, "info", "Finish requested", extra={"channel_id": channel_id, "ok": ok})
        return {
            "channel_id": channel_id,
            "ok": ok,
            "deploy": _deploy_summary(deploy),
            "message": finished_message(deploy) if ok else NOBODY_DEPLOYING_MESSAGE,
        }

    def _abort_deploy(
        channel_id: str,
        reason: str = "",
        context: Context | None = None,
    ) -> dict[str, Any]:
        """Abort the channel's running deploy with an optional reason."""

        deploy, ok = tracker.abort(channel_id, reason)
        _emit_log(
            context,
            "warning" if ok else "info",
            "Abort requested",
            extra={"channel_id": channel_id, "ok": ok, "reason": reason},
        )
        return {
            "channel_id": channel_id,
            "ok": ok,
            "deploy": _deploy_summary(deploy),
            "message": aborted_message(deploy) if ok else NOBODY_DEPLOYING_MESSAGE,
        }

    def _deploy_history(
        channel_id: str,
        since: str | None = None,
        context: Context | None = None,
    ) -> str:
        """Render the channel's deploy history, optionally from an RFC 3339 time on."""

        if since:
            deploys = repository.since(channel_id, parse_rfc3339(since))
        else:
            deploys = repository.all(channel_id)

        _emit_log(
            context,
            "debug",
            "Rendered deploy history",
            extra={"channel_id": channel_id, "count": len(deploys)},
        )
        return render_report(deploys)

    tool_current = server.tool(
        name="current_deploy",
        description="Show who is deploying what in a channel right now, if anyone.",
    )(_current_deploy)

    tool_start = server.tool(
        name="start_deploy",
        description=(
            "Announce a deploy in a channel. Rejected while another user is deploying "
            "there; a deploy left running by the same user is finished first."
        ),
    )(_start_deploy)

    tool_finish = server.tool(
        name="finish_deploy",
        description="Mark the deploy running in a channel as finished.",
    )(_finish_deploy)

    tool_abort = server.tool(
        name="abort_deploy",
        description="Abort the deploy running in a channel, optionally giving a reason.",
    )(_abort_deploy)

    tool_history = server.tool(
        name="deploy_history",
        description=(
            "Render a channel's deploy history as text. Pass since as an RFC 3339 "
            "timestamp to limit it to deploys started at or after that time."
        ),
    )(_deploy_history)

    return ToolHandles(
        current_deploy=tool_current,
        start_deploy=tool_start,
        finish_deploy=tool_finish,
        abort_deploy=tool_abort,
        deploy_history=tool_history,
    )


__all__ = [
    "NOBODY_DEPLOYING_MESSAGE",
    "ToolHandles",
    "aborted_message",
    "conflict_message",
    "current_message",
    "finished_message",
    "register_tools",
    "started_message",
]

logger = logging.getLogger(__name__)


def _emit_log(
    context: Context | None,
    level: str,
    message: str,
    *,
    extra: dict[str, Any] | None = None,
) -> None:
    """Best-effort logging that prefers the MCP context logger when available."""

    payload = extra or {}

    if context is not None:
        ctx_logger = getattr(context, "logger", None)
        if ctx_logger is not None:
            log_method = getattr(ctx_logger, level, None)
            if callable(log_method):
                log_method(message, extra=payload)
                return

    fallback = getattr(logger, level, logger.info)
    fallback(message, extra=payload)
