"""
Prometheus metrics for JSON-API query parameter handling.
"""

import logging

from prometheus_client import Counter

logger = logging.getLogger(__name__)

query_requests_total = Counter(
    "jsonapi_query_requests_total",
    "Requests that passed the query middleware",
    ["outcome"],
)

query_rejections_total = Counter(
    "jsonapi_query_rejections_total",
    "Requests rejected by the query middleware",
    ["status"],
)


def record_query_request(attached: bool) -> None:
    """Record a request forwarded downstream.

    Args:
        attached: True if a parameter bundle was attached to the request
    """
    query_requests_total.labels(outcome="attached" if attached else "passthrough").inc()


def record_query_rejection(status: int) -> None:
    """Record a request rejected with an error response.

    Args:
        status: HTTP status code of the error response
    """
    query_rejections_total.labels(status=str(status)).inc()
    logger.debug(f"Query rejection recorded: {status}")
