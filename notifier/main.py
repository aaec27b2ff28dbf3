"""FastAPI application factory and server entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notifier import __version__
from notifier.application.use_cases import ChangeFeedListener, DispatchCoordinator
from notifier.config import Settings, get_settings
from notifier.infrastructure.change_sources import ChangeSource, build_change_source
from notifier.infrastructure.channels import ChannelSender, build_channel_senders
from notifier.infrastructure.realtime import DashboardHub
from notifier.interfaces.api.routes import register_routes
from notifier.utils.datetime import resolve_timezone
from notifier.utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the change-feed listener on startup and release everything on shutdown."""

    settings: Settings = app.state.settings
    client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    senders = app.state.senders
    if senders is None:
        senders = build_channel_senders(settings, client)

    coordinator = DispatchCoordinator(senders, app.state.hub, app.state.change_source)
    listener = ChangeFeedListener(app.state.change_source, coordinator)
    app.state.coordinator = coordinator
    app.state.listener = listener

    try:
        await listener.start()
        logger.info(
            "Universal notifier %s ready on port %d (%s source)",
            __version__,
            settings.web_port,
            app.state.change_source.name,
        )
        yield
    finally:
        logger.info("Shutting down gracefully")
        await listener.stop()
        await client.aclose()


def create_app(
    settings: Settings | None = None,
    *,
    change_source: ChangeSource | None = None,
    senders: Sequence[ChannelSender] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``change_source`` and ``senders`` default to what ``settings`` selects;
    passing them explicitly lets callers run the service against doubles.
    """

    settings = settings or get_settings()

    app = FastAPI(title="Universal Notifier", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app_timezone = resolve_timezone(settings.app_timezone.strip() or "UTC")
    app.state.hub = DashboardHub(
        capacity=settings.dashboard_buffer_size,
        clock=lambda: datetime.now(tz=app_timezone),
    )
    app.state.change_source = change_source or build_change_source(settings)
    app.state.senders = list(senders) if senders is not None else None

    # The dashboard may be served from any origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


def run() -> None:
    """Console entry point: configure logging and serve the app with uvicorn."""

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.web_port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    run()
