"""Data source API application factory.

This module creates and configures the FastAPI application with all routers
and middleware. The application owns one ``StackdriverDatasource`` and closes
its HTTP client on shutdown.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from stackdriver_datasource.api.middleware import configure_middleware
from stackdriver_datasource.api.routers import datasource_router, health_router
from stackdriver_datasource.config import (
    DataSourceInstanceSettings,
    load_settings_from_env,
)
from stackdriver_datasource.datasource import StackdriverDatasource

logger = logging.getLogger(__name__)


def create_app(
    settings: DataSourceInstanceSettings | None = None,
    datasource: StackdriverDatasource | None = None,
    title: str = "Stackdriver Data Source API",
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Instance settings; read from the environment when omitted.
        datasource: A prebuilt data source (used by tests).
        title: Application title

    Returns:
        Configured FastAPI application
    """
    if datasource is None:
        datasource = StackdriverDatasource(settings or load_settings_from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            f"Stackdriver data source '{datasource.instance_settings.name}' ready"
        )
        yield
        await datasource.aclose()

    app = FastAPI(title=title, lifespan=lifespan)
    app.state.datasource = datasource

    configure_middleware(app)

    app.include_router(health_router)
    app.include_router(datasource_router)

    return app
