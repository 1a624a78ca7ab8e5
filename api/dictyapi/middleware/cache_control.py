"""
Cache control middlewares for API responses.

HTTPCacheMiddleware lets browsers and proxies cache responses for a fixed
number of days. NoCacheMiddleware prevents any caching.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime, formatdate
from typing import Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Headers as per http://wiki.nginx.org/HttpProxyModule
NO_CACHE_HEADERS = {
    "Expires": formatdate(0, usegmt=True),
    "Cache-Control": "no-cache, no-store, no-transform, must-revalidate, private, max-age=0",
    "Pragma": "no-cache",
    "X-Accel-Expires": "0",
}


def http_date(moment: datetime) -> str:
    """Format a datetime as an RFC 7231 HTTP-date.

    Naive datetimes are taken to be in UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


@dataclass(frozen=True)
class HTTPCache:
    """Cache parameters sent with every response."""

    # seconds
    max_age: int
    # HTTP-date
    expires: str

    @classmethod
    def from_days(
        cls, days: int, reference_time: Optional[datetime] = None
    ) -> "HTTPCache":
        """Build cache parameters for a duration counted from reference_time.

        Args:
            days: Cache lifetime in days
            reference_time: Start of the lifetime, defaults to now (UTC)

        Returns:
            HTTPCache with max_age in seconds and the matching Expires date

        Raises:
            ValueError: If days is negative
        """
        if days < 0:
            raise ValueError(f"Cache duration must not be negative, got {days} days")
        if reference_time is None:
            reference_time = datetime.now(timezone.utc)
        return cls(
            max_age=days * SECONDS_PER_DAY,
            expires=http_date(reference_time + timedelta(days=days)),
        )

    @property
    def cache_control(self) -> str:
        return f"public, max-age={self.max_age}"


class HTTPCacheMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add public caching headers to responses.

    Headers added:
    - Cache-Control: public, max-age=<seconds in the configured duration>
    - Expires: reference time plus the configured duration

    Headers already set by the downstream handler are left untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        days: int = 30,
        reference_time: Optional[datetime] = None,
    ):
        """
        Initialize the cache middleware.

        Args:
            app: The ASGI application to wrap
            days: Cache lifetime in days
            reference_time: Start of the cache lifetime, defaults to startup time
        """
        super().__init__(app)
        self.cache = HTTPCache.from_days(days, reference_time)
        logger.info(
            f"HTTP cache middleware initialized: max-age={self.cache.max_age}, "
            f"expires={self.cache.expires}"
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Headers set by the handler take precedence
        response.headers.setdefault("Cache-Control", self.cache.cache_control)
        response.headers.setdefault("Expires", self.cache.expires)
        return response


class NoCacheMiddleware(BaseHTTPMiddleware):
    """
    Middleware to disable caching of responses.

    Headers added:
    - Expires: Thu, 01 Jan 1970 00:00:00 GMT
    - Cache-Control: no-cache, no-store, no-transform, must-revalidate, private, max-age=0
    - Pragma: no-cache (for HTTP/1.0 proxies and clients)
    - X-Accel-Expires: 0 (for nginx proxy caches)

    Headers already set by the downstream handler are left untouched.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in NO_CACHE_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
