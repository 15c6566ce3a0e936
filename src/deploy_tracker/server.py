"""FastMCP server bootstrap for the deploy tracker."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastmcp import Context, FastMCP

from . import __version__
from .config import DeployTrackerSettings, get_settings
from .deploy import ChannelDeploys
from .storage import ChromaUnavailableError, DeployLog, InMemoryDeployLog, open_deploy_log
from .tools import register_tools


def configure_logging(level: str) -> None:
    """Configure root logging for the deploy tracker."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def create_server(
    settings: Optional[DeployTrackerSettings] = None,
    deploy_log: DeployLog | None = None,
) -> FastMCP:
    """Instantiate the FastMCP server with the deploy tools and status resource."""

    settings = settings or get_settings()

    storage_metadata: dict[str, Any] = {
        "backend": settings.storage_backend,
        "available": False,
        "path": str(settings.chroma_persist_path),
        "collection": settings.chroma_collection,
        "error": None,
    }

    if deploy_log is None:
        try:
            deploy_log = open_deploy_log(settings)
            storage_metadata["available"] = True
        except ChromaUnavailableError as exc:
            logging.getLogger(__name__).warning(
                "Chroma unavailable, deploy history will not survive restarts",
                extra={"error": str(exc)},
            )
            storage_metadata["backend"] = "memory"
            storage_metadata["error"] = str(exc)
            deploy_log = InMemoryDeployLog()
    else:
        storage_metadata["available"] = True

    tracker = ChannelDeploys(deploy_log)

    server = FastMCP(
        name="Deploy Tracker",
        version=__version__,
        instructions=(
            "Tracks deploys per chat channel. At most one deploy runs in a channel at a "
            "time; use the tools to start, finish or abort a deploy and to render the "
            "channel's deploy history."
        ),
    )

    handles = register_tools(server, tracker=tracker, repository=deploy_log)

    @server.resource(
        "resource://deploy-tracker/status",
        name="deploy_tracker_status",
        title="Deploy Tracker Status",
        description="Provides the current runtime status for the deploy tracker.",
        mime_type="application/json",
        tags={"status", "health"},
    )
    def status_resource(context: Context) -> str:
        """Return a JSON string summarizing basic runtime state."""

        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "server_version": __version__,
            "log_level": settings.log_level,
            "storage": storage_metadata,
            "request_id": getattr(context, "request_id", None),
        }
        return json.dumps(payload)

    setattr(server, "deploy_log", deploy_log)
    setattr(server, "deploy_tracker", tracker)
    setattr(server, "storage_metadata", storage_metadata)
    setattr(server, "tool_handles", handles)
    return server


def main() -> None:
    """Entry point for running the deploy tracker MCP server via CLI."""

    settings = get_settings()
    configure_logging(settings.log_level)

    server = create_server(settings)
    logging.getLogger(__name__).info(
        "Launching deploy tracker MCP server",
        extra={
            "version": __version__,
            "log_level": settings.log_level,
            "storage_backend": getattr(server, "storage_metadata", {}).get("backend"),
        },
    )
    server.run()


if __name__ == "__main__":
    main()
