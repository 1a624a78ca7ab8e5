"""FastAPI dependencies for JSON-API query parameters.

Provides access to the ParameterBundle attached by QueryParameterMiddleware.
"""

from typing import Optional

from dictyapi.middleware.query import QUERY_PARAMS_STATE_KEY
from dictyapi.models.query import ParameterBundle
from fastapi import Request


def get_query_params(request: Request) -> Optional[ParameterBundle]:
    """Get the parsed query parameters of the current request.

    Args:
        request: FastAPI request object.

    Returns:
        The attached ParameterBundle, or None when the request carried no
        include, fields or filter parameter.
    """
    return getattr(request.state, QUERY_PARAMS_STATE_KEY, None)


def require_query_params(request: Request) -> ParameterBundle:
    """Like get_query_params, but returns an empty bundle instead of None."""
    params = get_query_params(request)
    if params is None:
        return ParameterBundle()
    return params
