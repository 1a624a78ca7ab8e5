"""
Echo endpoint for parsed JSON-API query parameters.

Shows how a downstream handler consumes the bundle attached by
QueryParameterMiddleware.
"""

from typing import Optional

from dictyapi.dependencies import get_query_params
from dictyapi.models.query import ParameterBundle
from fastapi import APIRouter, Depends

router = APIRouter()


@router.get("/params")
async def echo_params(params: Optional[ParameterBundle] = Depends(get_query_params)):
    """Return the parsed include, fields and filter parameters.

    ``data`` is null when the request carried none of them.
    """
    return {"data": params}
