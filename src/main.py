"""
Main FastAPI application entry point.

Wires the trace middleware, the non-versioned system routes and the v1 API.
Infrastructure (store, rate limiter, sessions) is built lazily by the
container on first use, so startup never blocks on the key-value store.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.config import settings
from src.core.container import get_logger
from src.presentation.routers import system_router
from src.presentation.routers.api.middleware.trace_middleware import TraceMiddleware
from src.presentation.routers.api.v1 import v1_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    logger = get_logger()
    logger.info(
        "Application starting",
        environment=settings.environment.value,
        store_mode="redis" if settings.redis_configured else "memory",
    )
    yield
    logger.info("Application stopping")


app = FastAPI(
    title=settings.app_name,
    description="Rate limiting, response caching and sessions",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
    lifespan=lifespan,
)

# Wire trace middleware (request correlation)
app.add_middleware(TraceMiddleware)

app.include_router(system_router)
app.include_router(v1_router)
