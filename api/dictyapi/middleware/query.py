"""
Middleware for parsing JSON-API query parameters.

Supported parameters:
- include: /url?include=foo,bar,baz
- fields (sparse fieldsets): /url?fields[articles]=title,body&fields[people]=name
- filter: /url?filter[name]=foo&filter[country]=argentina

include and fields are part of JSON-API, filter is a dictybase extension
negotiated through the Accept header. Requests with filter parameters must
send the filtering media type in both Accept and Content-Type, otherwise the
chain is terminated with 406 (Not Acceptable) or 415 (Unsupported Media Type).

Parsed parameters are attached to ``request.state`` under
QUERY_PARAMS_STATE_KEY as a ParameterBundle, only when at least one
parameter was found. Downstream handlers read it through
``dictyapi.dependencies.get_query_params``.

Query keys are visited in the order Starlette yields them. When several keys
are invalid, which one ends up in the error detail is not guaranteed.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from dictyapi.core.error_handlers import query_error_response
from dictyapi.core.exceptions import (
    MalformedParameterKeyError,
    MediaTypeMismatchError,
    QueryParameterError,
    UnacceptableMediaTypeError,
)
from dictyapi.core.query_metrics import record_query_rejection, record_query_request
from dictyapi.models.query import ParameterBundle
from starlette.datastructures import Headers, QueryParams
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

QUERY_PARAMS_STATE_KEY = "jsonapi_params"
FILTER_MEDIA_TYPE = (
    'application/vnd.api+json; supported-ext="dictybase/filtering-resouce"'
)


class MediaHeader(str, Enum):
    """Request headers consulted for filter media type negotiation."""

    ACCEPT = "accept"
    CONTENT_TYPE = "content-type"


class ParamPrefix(str, Enum):
    """Query key prefixes recognized by the parser."""

    FILTER = "filter"
    FIELDS = "fields"
    INCLUDE = "include"


def _is_word(text: str) -> bool:
    return bool(text) and text.isascii() and all(c.isalnum() or c == "_" for c in text)


def parse_bracket_key(key: str) -> Optional[str]:
    """Extract the sub key from a name[sub] query key.

    Both parts must be non-empty runs of ASCII letters, digits or
    underscores.

    Args:
        key: Raw query key, e.g. "fields[articles]"

    Returns:
        The bracketed part ("articles"), or None if the key is malformed
    """
    name, bracket, rest = key.partition("[")
    if not bracket or not rest.endswith("]"):
        return None
    sub = rest[:-1]
    if not _is_word(name) or not _is_word(sub):
        return None
    return sub


def split_values(value: str) -> Tuple[str, ...]:
    """Split a comma separated parameter value, keeping empty entries."""
    return tuple(value.split(","))


def validate_filter_headers(headers: Headers) -> None:
    """Check the media type negotiation required by filter parameters.

    Raises:
        UnacceptableMediaTypeError: Accept is not the filtering media type
        MediaTypeMismatchError: Content-Type differs from Accept
    """
    accept = headers.get(MediaHeader.ACCEPT.value, "")
    content_type = headers.get(MediaHeader.CONTENT_TYPE.value, "")
    if accept != FILTER_MEDIA_TYPE:
        raise UnacceptableMediaTypeError(accept)
    if accept != content_type:
        raise MediaTypeMismatchError(content_type)


def parse_query_parameters(query_params: QueryParams, headers: Headers) -> ParameterBundle:
    """Parse include, fields and filter parameters into a ParameterBundle.

    Only the first value of a repeated key is used. Unrecognized keys are
    ignored.

    Args:
        query_params: Decoded request query string
        headers: Request headers, consulted only when filter keys are present

    Returns:
        A new ParameterBundle, empty when no recognized key was found

    Raises:
        QueryParameterError: On a malformed key or failed media type check
    """
    includes: Tuple[str, ...] = ()
    fields: Dict[str, Tuple[str, ...]] = {}
    filters: Dict[str, str] = {}

    for key in query_params.keys():
        value = query_params.getlist(key)[0]
        if key.startswith(ParamPrefix.FILTER.value):
            validate_filter_headers(headers)
            sub = parse_bracket_key(key)
            if sub is None:
                raise MalformedParameterKeyError(ParamPrefix.FILTER.value, value)
            filters[sub] = value
        elif key.startswith(ParamPrefix.FIELDS.value):
            sub = parse_bracket_key(key)
            if sub is None:
                raise MalformedParameterKeyError(ParamPrefix.FIELDS.value, value)
            fields[sub] = split_values(value)
        elif key == ParamPrefix.INCLUDE.value:
            includes = split_values(value)

    return ParameterBundle(includes=includes, fields=fields, filters=filters)


class QueryParameterMiddleware(BaseHTTPMiddleware):
    """
    Middleware that parses JSON-API query parameters into request state.

    This middleware:
    1. Parses include, fields and filter query parameters
    2. Enforces the filtering media type when filter parameters are present
    3. Attaches a ParameterBundle to request.state when anything was parsed
    4. Terminates the chain with a JSON-API error document on failure
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Parse the query string and forward the request.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in the chain

        Returns:
            Response from the application, or an error response
        """
        try:
            params = parse_query_parameters(request.query_params, request.headers)
        except QueryParameterError as exc:
            logger.warning(
                f"Rejected query for {request.method} {request.url.path}: "
                f"{exc.status_code} {exc.title}"
            )
            record_query_rejection(exc.status_code)
            return query_error_response(exc)

        if params.is_empty:
            record_query_request(attached=False)
            return await call_next(request)

        setattr(request.state, QUERY_PARAMS_STATE_KEY, params)
        record_query_request(attached=True)
        logger.debug(
            f"Query parameters attached for {request.url.path}: "
            f"includes={params.has_includes} fields={params.has_fields} "
            f"filters={params.has_filters}"
        )
        return await call_next(request)
