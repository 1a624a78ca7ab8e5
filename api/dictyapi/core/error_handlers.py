"""
Centralized error handlers for the dictyBase API middlewares.

Every error leaves the application as a JSON-API error document: a list
with a single error object carrying status, title and detail.
"""

import logging
from typing import Any, Dict, Optional

from dictyapi.core.exceptions import QueryParameterError
from fastapi import Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.responses import Response

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"
ERROR_CREATOR = "query middleware"


class JSONAPIResponse(JSONResponse):
    media_type = JSONAPI_MEDIA_TYPE


def error_document(
    status_code: int, title: str, detail: str, meta: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {
        "status": str(status_code),
        "title": title,
        "detail": detail,
    }
    if meta:
        error["meta"] = meta
    return {"errors": [error]}


def query_error_response(exc: QueryParameterError) -> Response:
    """Render a query parameter error as a JSON-API error document.

    Args:
        exc: The rejected query parameter error

    Returns:
        JSON-API response carrying a single error object, or a plain-text
        500 response when the document itself cannot be encoded
    """
    document = error_document(
        exc.status_code, exc.title, exc.detail, meta={"creator": ERROR_CREATOR}
    )
    try:
        return JSONAPIResponse(status_code=exc.status_code, content=document)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to encode query error document: {e}", exc_info=True)
        return PlainTextResponse(
            str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


async def query_exception_handler(
    request: Request, exc: QueryParameterError
) -> Response:
    """Handle query parameter errors raised from routes and dependencies."""
    logger.warning(
        f"Query parameter error: {exc.error_code} - {exc.detail}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return query_error_response(exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors.

    The response never includes the exception message.
    """
    logger.exception(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        extra={"exception_type": type(exc).__name__},
    )
    return JSONAPIResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_document(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "An unexpected error occurred",
        ),
    )
