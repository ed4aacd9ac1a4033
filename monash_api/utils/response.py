"""Uniform response envelope.

``respond`` is the only place an outbound body is built. Route handlers and
exception handlers both return through it, so every outcome has the same
shape::

    success: {statusCode, success, message, data?, pagination?}
    failure: {statusCode, success, message, errorCode, errors, timestamp}

Outbound data keys are converted to camelCase. Failure bodies never carry
``data``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from monash_api.utils.case_transform import to_camel_case


def _as_error_list(errors: Any) -> List[Any]:
    if errors is None:
        return []
    if isinstance(errors, (list, tuple)):
        return list(errors)
    return [errors]


def _outbound(value: Any) -> Any:
    if isinstance(value, BaseModel):
        value = value.model_dump()
    return to_camel_case(jsonable_encoder(value))


def build_envelope(
    status_code: int,
    message: str = "",
    data: Any = None,
    error_code: Optional[str] = None,
    errors: Any = None,
    pagination: Any = None,
) -> Dict[str, Any]:
    """Build the envelope dictionary for ``status_code``."""
    success = status_code < 400
    body: Dict[str, Any] = {
        "statusCode": status_code,
        "success": success,
        "message": message,
    }

    if success:
        if data is not None:
            body["data"] = _outbound(data)
        if pagination is not None:
            body["pagination"] = _outbound(pagination)
        return body

    body["errorCode"] = error_code
    body["errors"] = jsonable_encoder(_as_error_list(errors))
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body


def respond(
    status_code: int,
    message: str = "",
    data: Any = None,
    error_code: Optional[str] = None,
    errors: Any = None,
    pagination: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Answer a request with the envelope; HTTP status equals ``statusCode``."""
    return JSONResponse(
        status_code=status_code,
        content=build_envelope(
            status_code,
            message,
            data=data,
            error_code=error_code,
            errors=errors,
            pagination=pagination,
        ),
        headers=headers,
    )
