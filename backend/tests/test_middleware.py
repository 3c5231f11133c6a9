"""
FamilyEvents Backend — Middleware Tests
=======================================

What:  RateLimitMiddleware on a bare FastAPI app, so the limit can be set
       low without touching the application instance.
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.middleware.rate_limit import RateLimitMiddleware


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_requests_over_limit_get_429(self):
        transport = ASGITransport(app=build_app())
        with patch.object(settings, "rate_limit_requests", 3):
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                statuses = [(await client.get("/ping")).status_code for _ in range(4)]
                blocked = await client.get("/ping")

        assert statuses == [200, 200, 200, 429]
        assert blocked.status_code == 429
        assert int(blocked.headers["Retry-After"]) >= 1
        body = blocked.json()
        assert body["error"] == "rate_limit_exceeded"
        assert body["details"]["retry_after"] == int(blocked.headers["Retry-After"])

    @pytest.mark.asyncio
    async def test_health_is_not_limited(self):
        transport = ASGITransport(app=build_app())
        with patch.object(settings, "rate_limit_requests", 1):
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                statuses = [(await client.get("/health")).status_code for _ in range(3)]
        assert statuses == [200, 200, 200]
