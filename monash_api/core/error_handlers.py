"""Terminal exception handling.

Every failure that escapes a route ends up in ``handle_exception``: it is
logged with full internal detail, classified by the application's
``ErrorTaxonomy`` and answered through ``respond``. Nothing between the route
and this handler catches and re-raises.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from monash_api.core.exceptions import MonashAPIError, PersistenceError
from monash_api.core.logging import get_api_logger
from monash_api.utils.error_taxonomy import ErrorTaxonomy, default_taxonomy
from monash_api.utils.response import respond

logger = get_api_logger()


def _taxonomy_for(request: Request) -> ErrorTaxonomy:
    return getattr(request.app.state, "error_taxonomy", None) or default_taxonomy


async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    """Log, classify and answer any failure."""
    classification = _taxonomy_for(request).classify(exc)

    log_context = {
        "error_type": type(exc).__name__,
        "error": str(exc),
        "status_code": classification.status,
        "error_code": classification.error_code,
        "method": request.method,
        "path": request.url.path,
        "path_params": dict(request.path_params),
        "query": dict(request.query_params),
    }
    if isinstance(exc, PersistenceError):
        log_context.update(
            signal=exc.signal, detail=exc.detail, statement=exc.statement
        )

    if classification.status >= 500 or isinstance(exc, PersistenceError):
        logger.error("Request failed", exc_info=exc, **log_context)
    else:
        logger.warning("Request rejected", **log_context)

    return respond(
        classification.status,
        classification.message,
        error_code=classification.error_code,
        errors=list(classification.errors),
        headers=getattr(exc, "headers", None),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Route every failure type through ``handle_exception``.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(MonashAPIError, handle_exception)
    app.add_exception_handler(PersistenceError, handle_exception)
    app.add_exception_handler(StarletteHTTPException, handle_exception)
    app.add_exception_handler(RequestValidationError, handle_exception)
    app.add_exception_handler(Exception, handle_exception)
