"""FastAPI Application Entry Point.

Students and courses REST API, featuring:
- Paginated listings over parameterized SQL
- camelCase public API over a snake_case store
- One response envelope and a stable error code for every outcome
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from monash_api.api.health import root_router
from monash_api.api.health import router as health_router
from monash_api.api.v1.courses import router as courses_router
from monash_api.api.v1.students import router as students_router
from monash_api.core.config import Settings, settings
from monash_api.core.db_client import DatabaseManager, db
from monash_api.core.error_handlers import setup_exception_handlers
from monash_api.core.logging import configure_logging, get_logger, setup_request_logging
from monash_api.core.middleware import setup_all_middleware
from monash_api.utils.error_taxonomy import ErrorTaxonomy, default_taxonomy
from monash_api.utils.pagination import PaginationEngine

# Configure logging first
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    app_settings: Settings = app.state.settings
    database: DatabaseManager = app.state.db

    # Startup
    logger.info(
        "Starting application",
        project_name=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        environment=app_settings.ENVIRONMENT,
        debug=app_settings.DEBUG,
    )

    startup_tasks = []

    if await database.test_connection():
        startup_tasks.append("Database connected")
        if app_settings.DB_CREATE_TABLES:
            await database.create_tables()
            startup_tasks.append("Database tables created/verified")
    else:
        logger.warning("Database connection test failed")
        if app_settings.is_production:
            raise RuntimeError("Database unavailable at startup")

    logger.info("Application startup completed", tasks=startup_tasks)

    yield

    # Shutdown
    logger.info("Shutting down application")
    await database.close()
    logger.info("Application shutdown completed")


# API Description
API_DESCRIPTION = """# Monash API

## Overview
Students and courses administration API.

## Conventions
- Request and response keys are **camelCase** (`courseCode`, `studentNumber`).
- Every response uses the same envelope: `statusCode`, `success`, `message`,
  plus `data` (and `pagination` for listings) on success, or `errorCode`,
  `errors` and `timestamp` on failure.
- Listings accept `page` (default 1) and `limit` (default 10, max 100).
- Validation reports only the first failing field, with error code
  `INVALID_<FIELD>_400`.
"""


def create_app(
    app_settings: Settings = settings,
    database: Optional[DatabaseManager] = None,
    taxonomy: Optional[ErrorTaxonomy] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        app_settings: Settings instance
        database: Database manager (defaults to the process-wide one)
        taxonomy: Error taxonomy used by the exception handler

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.VERSION,
        description=API_DESCRIPTION,
        openapi_url=f"{app_settings.API_V1_STR}/openapi.json" if app_settings.DEBUG else None,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Shared, read-only after startup
    app.state.settings = app_settings
    app.state.db = database or db
    app.state.error_taxonomy = taxonomy or default_taxonomy
    app.state.pagination = PaginationEngine(
        default_limit=app_settings.PAGINATION_DEFAULT_LIMIT,
        max_limit=app_settings.PAGINATION_MAX_LIMIT,
    )

    setup_all_middleware(app, app_settings)
    setup_exception_handlers(app)
    setup_request_logging(app)

    # Health check at root level, everything else versioned
    app.include_router(health_router)
    app.include_router(root_router, prefix=app_settings.API_V1_STR)
    app.include_router(courses_router, prefix=app_settings.API_V1_STR)
    app.include_router(students_router, prefix=app_settings.API_V1_STR)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "monash_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
