"""
Middleware package for the dictyBase API.
"""

from dictyapi.middleware.cache_control import HTTPCacheMiddleware, NoCacheMiddleware
from dictyapi.middleware.query import QueryParameterMiddleware

__all__ = ["HTTPCacheMiddleware", "NoCacheMiddleware", "QueryParameterMiddleware"]
