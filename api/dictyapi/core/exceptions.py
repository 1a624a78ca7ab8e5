"""
Custom exception hierarchy for the dictyBase API middlewares.

This module defines a standardized exception hierarchy for consistent
error handling across the application.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAppException(HTTPException):
    """Base exception for all application errors."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or self.__class__.__name__


# Query Parameter Exceptions


class QueryParameterError(BaseAppException):
    """Raised when JSON-API query parameters or their media type are rejected.

    Rendered as a JSON-API error document rather than the generic
    application error shape.
    """

    def __init__(
        self,
        title: str,
        detail: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        error_code: Optional[str] = None,
    ):
        super().__init__(detail, status_code, error_code=error_code)
        self.title = title


class MalformedParameterKeyError(QueryParameterError):
    """Raised when a fields or filter key is not of the form name[sub]."""

    def __init__(self, kind: str, value: str):
        super().__init__(
            "Invalid query parameter",
            f"Unable to match {kind} query param {value}",
            status.HTTP_400_BAD_REQUEST,
            error_code="MALFORMED_PARAMETER_KEY",
        )
        self.kind = kind


class UnacceptableMediaTypeError(QueryParameterError):
    """Raised when filter parameters arrive without the filtering Accept header."""

    def __init__(self, accept: str):
        super().__init__(
            "Accept header is not acceptable",
            f"The given Accept header value {accept} is incorrect for filter query extension",
            status.HTTP_406_NOT_ACCEPTABLE,
            error_code="UNACCEPTABLE_MEDIA_TYPE",
        )


class MediaTypeMismatchError(QueryParameterError):
    """Raised when Accept and Content-Type differ for a filtered request."""

    def __init__(self, content_type: str):
        super().__init__(
            "Media type is not supported",
            f"The given media type {content_type} in Content-Type header is not supported",
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            error_code="MEDIA_TYPE_MISMATCH",
        )
