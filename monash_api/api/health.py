"""Health check and service root endpoints.

Provides endpoints for:
- API root welcome message
- Health check with database connectivity verification
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from monash_api.core.logging import get_logger
from monash_api.models.schemas import SuccessEnvelope, error_response
from monash_api.utils.response import respond

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

# Mounted under the API version prefix
root_router = APIRouter(tags=["Health"])


@root_router.get(
    "/",
    summary="API Root",
    responses={200: {"model": SuccessEnvelope, "description": "Welcome message"}},
)
async def root(request: Request) -> JSONResponse:
    """Root endpoint with API information."""
    app_settings = request.app.state.settings
    return respond(
        status.HTTP_200_OK,
        f"SUCCESS - Welcome to the {app_settings.PROJECT_NAME}",
        data={
            "version": app_settings.VERSION,
            "environment": app_settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get(
    "/health",
    summary="Health Check",
    responses={
        200: {"model": SuccessEnvelope, "description": "Service is healthy"},
        503: error_response("Database unavailable"),
    },
)
async def health_check(request: Request) -> JSONResponse:
    """
    Health check endpoint with database connectivity verification.

    Returns 200 if healthy, 503 if database is unavailable.
    Used by load balancers and orchestration tools.
    """
    app_settings = request.app.state.settings
    db_available = await request.app.state.db.test_connection(timeout=5.0)

    if not db_available:
        logger.warning("Health check failed: database unavailable")
        return respond(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Database unavailable",
            error_code="SERVICE_UNAVAILABLE_503",
        )

    return respond(
        status.HTTP_200_OK,
        "Service is healthy",
        data={
            "status": "healthy",
            "version": app_settings.VERSION,
            "environment": app_settings.ENVIRONMENT,
            "database": "connected",
        },
    )
