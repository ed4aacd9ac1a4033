"""Middleware configuration for FastAPI application.

Provides:
- CORS middleware setup
- Request timing middleware
- Unexpected error handling inside both
"""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from monash_api.core.config import Settings, settings
from monash_api.core.error_handlers import handle_exception
from monash_api.core.logging import get_logger

logger = get_logger(__name__)


def setup_cors_middleware(app: FastAPI, app_settings: Settings = settings) -> None:
    """Configure CORS middleware with settings from config.

    Args:
        app: FastAPI application instance
        app_settings: Settings to read the CORS options from
    """
    logger.info(
        "CORS configuration",
        environment=app_settings.ENVIRONMENT,
        origins=app_settings.CORS_ORIGINS,
        credentials=app_settings.CORS_CREDENTIALS,
        methods=app_settings.CORS_METHODS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=app_settings.CORS_CREDENTIALS,
        allow_methods=app_settings.CORS_METHODS,
        allow_headers=app_settings.CORS_HEADERS,
        expose_headers=["X-Process-Time"],
    )


def setup_timing_middleware(app: FastAPI) -> None:
    """Add request timing middleware.

    Args:
        app: FastAPI application instance
    """

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(round(process_time, 4))
        return response


def setup_error_middleware(app: FastAPI) -> None:
    """Answer unexpected exceptions inside the CORS and timing layers.

    Handlers registered for ``Exception`` run in Starlette's outermost
    middleware, so their responses would skip every user middleware.

    Args:
        app: FastAPI application instance
    """

    @app.middleware("http")
    async def handle_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await handle_exception(request, exc)


def setup_all_middleware(app: FastAPI, app_settings: Settings = settings) -> None:
    """Setup all middleware in correct order.

    Args:
        app: FastAPI application instance
        app_settings: Settings for the configurable middleware
    """
    # Innermost, so 500 envelopes still get timing and CORS headers
    setup_error_middleware(app)

    # Request timing
    setup_timing_middleware(app)

    # Added last so it wraps everything, including OPTIONS preflights
    setup_cors_middleware(app, app_settings)
