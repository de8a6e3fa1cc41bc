"""Application lifespan management for startup and shutdown events."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from taxonpreview.system.structlog_configurator import configure_structlog
from taxonpreview.web.core.container import Container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and manage the shared HTTP client.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control back to the application for normal operation.
    """
    container: Container = app.container  # type: ignore[attr-defined]

    config = container.config()
    configure_structlog(config)

    source_client = container.source_client()
    await source_client.start()
    logger.info("Preview service started")

    try:
        yield
    finally:
        await source_client.stop()
        logger.info("Preview service stopped")
