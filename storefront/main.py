"""FastAPI application wiring the storefront listing service."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .cache import create_cache
from .config import Settings, settings
from .db import StorageDriver, create_driver
from .filters import PriceRangePolicy
from .importer import import_if_empty
from .models import HealthResponse
from .routes import comments_router, get_cache, get_driver, news_router, products_router

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# Force a predictable logging setup even when run under uvicorn so the SQL
# debug statements are visible. ``force=True`` replaces uvicorn's default
# handlers.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

STORAGE_ERROR_MESSAGE = "Failed to fetch data, please retry."


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": STORAGE_ERROR_MESSAGE})


def create_app(app_settings: Settings | None = None, driver: StorageDriver | None = None) -> FastAPI:
    """Build the application.

    When ``driver`` is given the caller owns it; otherwise one is created from
    ``app_settings.database_url`` at startup and disposed at shutdown.
    """
    app_settings = app_settings or settings
    price_policy = PriceRangePolicy(app_settings.price_range_policy)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        storage = driver or await asyncio.to_thread(create_driver, app_settings.database_url)
        app.state.driver = storage
        app.state.cache = create_cache(app_settings)
        if app_settings.load_on_startup:
            imported = await import_if_empty(storage, Path(app_settings.seed_path))
            if imported:
                logger.info("Imported %s seed rows on startup", imported)
        try:
            yield
        finally:
            if driver is None:
                storage.dispose()

    app = FastAPI(title="Storefront Listing Service", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.price_policy = price_policy
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.include_router(products_router)
    app.include_router(news_router)
    app.include_router(comments_router)

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        storage = get_driver(request)
        await asyncio.to_thread(storage.ping)
        return HealthResponse(database="ok", cache=get_cache(request).name)

    return app


app = create_app()
