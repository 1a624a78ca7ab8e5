"""
FastAPI application for the dictyBase API middlewares.
This module sets up the API server with routes, middleware, and error handling.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from dictyapi.core.config import Settings, get_settings
from dictyapi.core.error_handlers import (
    query_exception_handler,
    unhandled_exception_handler,
)
from dictyapi.core.exceptions import QueryParameterError
from dictyapi.middleware import (
    HTTPCacheMiddleware,
    NoCacheMiddleware,
    QueryParameterMiddleware,
)
from dictyapi.routes import health, params
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

# Configure logging
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("dictyapi.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    yield
    logger.info("Application shutdown...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its middleware stack.

    Middlewares run outermost first: CORS, cache headers, query parameters.

    Args:
        settings: Settings to use, defaults to the cached environment settings

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        docs_url="/api/docs",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(QueryParameterMiddleware)
    logger.info("Query parameter middleware registered")

    if settings.HTTP_CACHE_ENABLED:
        app.add_middleware(HTTPCacheMiddleware, days=settings.HTTP_CACHE_DAYS)
        logger.info(f"HTTP cache middleware registered ({settings.HTTP_CACHE_DAYS} days)")
    else:
        app.add_middleware(NoCacheMiddleware)
        logger.info("No-cache middleware registered")

    # Toggle credentials off when wildcard is used (Starlette forbids wildcard + credentials)
    origins = settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False if origins == ["*"] else True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(health.router, tags=["Health"])
    app.include_router(params.router, prefix=settings.API_V1_STR, tags=["Query"])

    # Register specific application exceptions first
    app.add_exception_handler(QueryParameterError, query_exception_handler)  # type: ignore[arg-type]
    # Then register generic exception handler as fallback
    app.add_exception_handler(Exception, unhandled_exception_handler)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    # Bind to 0.0.0.0 only in DEBUG mode (container/development)
    # Otherwise bind to 127.0.0.1 for local security
    host = "0.0.0.0" if settings.DEBUG else "127.0.0.1"

    uvicorn.run(
        "dictyapi.main:app",
        host=host,
        port=8000,
        reload=settings.DEBUG,
    )
