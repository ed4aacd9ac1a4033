from typing import Any, Dict, Optional


class MonashAPIError(Exception):
    """Base exception for Monash API application.

    Carries a message that is safe to show to API consumers together with the
    stable error code and HTTP status it should be answered with.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "INTERNAL_SERVER_ERROR_500"
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(MonashAPIError):
    """Requested entity does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: str = "RESOURCE_NOT_FOUND_404",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, 404, details)


class ValidationFailure(MonashAPIError):
    """First failing field of an inbound payload."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(
            message,
            f"INVALID_{str(field).upper()}_400",
            400,
            {"field": field},
        )


class PersistenceError(Exception):
    """Failure signal raised by the persistence layer.

    ``signal`` is one of the documented classification keys (see
    ``monash_api.utils.error_taxonomy.Signal``); ``detail`` is the backend's own
    message and must never reach a client unfiltered.
    """

    def __init__(self, signal: str, detail: str, statement: Optional[str] = None):
        self.signal = signal
        self.detail = detail
        self.statement = statement
        super().__init__(f"{signal}: {detail}")
