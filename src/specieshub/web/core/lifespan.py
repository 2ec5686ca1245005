"""Application lifespan management for startup and shutdown events."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from specieshub.system.structlog_configurator import configure_structlog
from specieshub.web.core.container import Container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Context manager for application startup and shutdown events.

    Configures logging, makes sure the database tables exist, and releases
    the database engine and the Redis connection on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control back to the application for normal operation.
    """
    # Get the container from the app (ignore type error - runtime dynamic attribute)
    container: Container = app.container  # type: ignore[attr-defined]

    config = container.config()
    configure_structlog(config)

    core_database = container.core_database()
    await core_database.initialize()

    logger.info("Species Hub started: %s", config.site_name)

    try:
        yield
    finally:
        logger.info("Shutting down Species Hub...")
        try:
            await core_database.dispose()
            if config.session.backend == "redis":
                await container.redis_client().aclose()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
            raise
