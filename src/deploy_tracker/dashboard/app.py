"""HTTP endpoint serving a channel's deploy history as plain text."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, status
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..config import DeployTrackerSettings, get_settings
from ..storage import DeployRepository, open_deploy_log
from .render import render_report
from .since import MALFORMED_SINCE_MESSAGE, parse_rfc3339

logger = logging.getLogger(__name__)


def channel_id_from_path(path: str) -> str:
    """Return the channel id addressed by a request path.

    The id is the first path segment with any extension dropped, so
    ``/C024BE91L.txt/anything`` addresses ``C024BE91L``.
    """

    segment = path.lstrip("/").split("/", 1)[0]
    return segment.split(".", 1)[0]


def create_app(repository: DeployRepository) -> FastAPI:
    """Build the dashboard application reading from ``repository``."""

    app = FastAPI(
        title="Deploy history dashboard",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.repository = repository

    @app.get("/{channel_path:path}", response_class=PlainTextResponse)
    def deploy_history(channel_path: str, since: str | None = None) -> PlainTextResponse:
        channel_id = channel_id_from_path(channel_path)
        if not channel_id:
            return PlainTextResponse("Not Found", status_code=status.HTTP_404_NOT_FOUND)

        if since:
            try:
                timestamp = parse_rfc3339(since)
            except ValueError:
                logger.info(
                    "Rejected malformed since parameter",
                    extra={"channel_id": channel_id, "since": since},
                )
                return PlainTextResponse(
                    MALFORMED_SINCE_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST
                )
            deploys = repository.since(channel_id, timestamp)
        else:
            deploys = repository.all(channel_id)

        logger.debug(
            "Rendering deploy history",
            extra={"channel_id": channel_id, "count": len(deploys)},
        )
        return PlainTextResponse(render_report(deploys))

    return app


def main(settings: DeployTrackerSettings | None = None) -> None:
    """Entry point for serving the dashboard via uvicorn."""

    from ..server import configure_logging

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = create_app(open_deploy_log(settings))
    logger.info(
        "Launching deploy history dashboard",
        extra={
            "host": settings.dashboard_host,
            "port": settings.dashboard_port,
            "storage_backend": settings.storage_backend,
        },
    )
    uvicorn.run(
        app,
        host=settings.dashboard_host,
        port=settings.dashboard_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
