"""Tests for the HTTP cache and no-cache middlewares."""

from datetime import datetime, timedelta, timezone

import pytest
from dictyapi.middleware.cache_control import (
    HTTPCache,
    HTTPCacheMiddleware,
    NoCacheMiddleware,
    http_date,
)
from fastapi import FastAPI, Response
from fastapi.testclient import TestClient

THIRTY_DAYS_IN_SECONDS = 30 * 24 * 60 * 60


def _client_with(middleware, **options) -> TestClient:
    app = FastAPI()
    app.add_middleware(middleware, **options)

    @app.get("/genes")
    async def list_genes():
        return {"data": []}

    @app.post("/genes")
    async def create_gene():
        return {"data": {"id": "DDB_G0267178"}}

    @app.get("/genes/pinned")
    async def pinned_gene(response: Response):
        response.headers["Cache-Control"] = "max-age=5"
        return {"data": {"id": "DDB_G0267178"}}

    return TestClient(app)


class TestHTTPDate:
    def test_formats_utc(self, reference_time):
        assert http_date(reference_time) == "Mon, 01 Jan 2024 12:00:00 GMT"

    def test_naive_datetime_is_utc(self):
        assert http_date(datetime(2024, 1, 1, 12, 0, 0)) == "Mon, 01 Jan 2024 12:00:00 GMT"

    def test_converts_offsets_to_gmt(self):
        moment = datetime(2024, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert http_date(moment) == "Mon, 01 Jan 2024 12:00:00 GMT"


class TestHTTPCache:
    def test_thirty_days(self, reference_time):
        cache = HTTPCache.from_days(30, reference_time)
        assert cache.max_age == THIRTY_DAYS_IN_SECONDS
        assert cache.expires == "Wed, 31 Jan 2024 12:00:00 GMT"
        assert cache.cache_control == f"public, max-age={THIRTY_DAYS_IN_SECONDS}"

    def test_zero_days_expires_at_reference_time(self, reference_time):
        cache = HTTPCache.from_days(0, reference_time)
        assert cache.max_age == 0
        assert cache.expires == "Mon, 01 Jan 2024 12:00:00 GMT"

    def test_defaults_to_now(self):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        cache = HTTPCache.from_days(1)
        expires = datetime.strptime(cache.expires, "%a, %d %b %Y %H:%M:%S GMT").replace(
            tzinfo=timezone.utc
        )
        assert before + timedelta(days=1) <= expires <= before + timedelta(days=1, minutes=1)

    def test_negative_days_rejected(self, reference_time):
        with pytest.raises(ValueError):
            HTTPCache.from_days(-1, reference_time)


class TestHTTPCacheMiddleware:
    def test_sets_cache_headers(self, reference_time):
        client = _client_with(HTTPCacheMiddleware, days=30, reference_time=reference_time)
        response = client.get("/genes")
        assert response.status_code == 200
        assert response.headers["cache-control"] == f"public, max-age={THIRTY_DAYS_IN_SECONDS}"
        assert response.headers["expires"] == "Wed, 31 Jan 2024 12:00:00 GMT"
        assert response.json() == {"data": []}

    def test_headers_are_identical_across_requests(self, reference_time):
        client = _client_with(HTTPCacheMiddleware, days=7, reference_time=reference_time)
        first = client.get("/genes")
        second = client.post("/genes")
        assert first.headers["expires"] == second.headers["expires"]
        assert first.headers["cache-control"] == "public, max-age=604800"

    def test_handler_cache_control_is_kept(self, reference_time):
        client = _client_with(HTTPCacheMiddleware, days=1, reference_time=reference_time)
        response = client.get("/genes/pinned")
        assert response.status_code == 200
        assert response.headers["cache-control"] == "max-age=5"
        assert response.headers["expires"] == "Tue, 02 Jan 2024 12:00:00 GMT"


class TestNoCacheMiddleware:
    @pytest.mark.parametrize(
        "method,url",
        [("get", "/genes"), ("get", "/genes?include=a"), ("post", "/genes")],
    )
    def test_sets_all_no_cache_headers(self, method, url):
        client = _client_with(NoCacheMiddleware)
        response = getattr(client, method)(url)
        assert response.status_code == 200
        assert response.headers["expires"] == "Thu, 01 Jan 1970 00:00:00 GMT"
        assert response.headers["cache-control"] == (
            "no-cache, no-store, no-transform, must-revalidate, private, max-age=0"
        )
        assert response.headers["pragma"] == "no-cache"
        assert response.headers["x-accel-expires"] == "0"

    def test_not_found_responses_are_not_cached(self):
        client = _client_with(NoCacheMiddleware)
        response = client.get("/missing")
        assert response.status_code == 404
        assert response.headers["pragma"] == "no-cache"

    def test_handler_cache_control_is_kept(self):
        client = _client_with(NoCacheMiddleware)
        response = client.get("/genes/pinned")
        assert response.status_code == 200
        assert response.headers["cache-control"] == "max-age=5"
        assert response.headers["expires"] == "Thu, 01 Jan 1970 00:00:00 GMT"
        assert response.headers["pragma"] == "no-cache"
        assert response.headers["x-accel-expires"] == "0"
