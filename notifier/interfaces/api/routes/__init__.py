from fastapi import FastAPI

from .config import router as config_router
from .health import router as health_router
from .notifications import router as notifications_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(notifications_router)
    app.include_router(config_router)
    app.include_router(health_router)
