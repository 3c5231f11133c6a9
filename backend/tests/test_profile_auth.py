"""
FamilyEvents Backend — Profile, Session and Health Tests
========================================================

What we test:
    ✅ Bearer tokens: missing, tampered, expired, unknown user → 401
    ✅ Demo sign-in issues a working token and reuses the demo account
    ✅ Profile read and update, email uniqueness (409)
    ✅ /health and the X-Request-ID header
"""

import time
import uuid
from unittest.mock import patch

import jwt
import pytest

from app import database
from app.config import settings
from app.exceptions import AuthenticationError
from app.services.auth_service import AuthService, auth_service


class TestTokens:

    def test_round_trip_claims(self):
        user_id = uuid.uuid4()
        claims = auth_service.decode_token(auth_service.create_access_token(user_id, "a@example.com"))
        assert claims["sub"] == str(user_id)
        assert claims["email"] == "a@example.com"
        assert claims["exp"] - claims["iat"] == settings.jwt_ttl_minutes * 60

    def test_expired_token(self):
        past = int(time.time()) - 3600
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "iat": past - 60, "exp": past},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError, match="Session expired"):
            auth_service.decode_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "some-other-secret", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            auth_service.decode_token(token)

    @pytest.mark.asyncio
    async def test_non_uuid_subject(self, mock_db_session):
        token = jwt.encode(
            {"sub": "not-a-uuid", "exp": int(time.time()) + 60},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError):
            await AuthService().resolve_identity(mock_db_session, token)
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, test_client):
        token = auth_service.create_access_token(uuid.uuid4(), "ghost@example.com")
        response = await test_client.get(
            "/api/profile", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401


class TestDemoLogin:

    @pytest.mark.asyncio
    async def test_demo_login_get_or_create(self, test_client):
        first = await test_client.post("/api/auth/demo")
        assert first.status_code == 200
        body = first.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == settings.demo_user_email
        assert body["expires_in"] == settings.jwt_ttl_minutes * 60

        second = await test_client.post("/api/auth/demo")
        assert second.json()["user"]["id"] == body["user"]["id"]

        response = await test_client.get(
            "/api/profile", headers={"Authorization": f"Bearer {body['access_token']}"}
        )
        assert response.status_code == 200
        assert response.json()["id"] == body["user"]["id"]

    @pytest.mark.asyncio
    async def test_demo_login_disabled(self, test_client):
        with patch.object(settings, "demo_login_enabled", False):
            response = await test_client.post("/api/auth/demo")
        assert response.status_code == 404


class TestProfile:

    @pytest.mark.asyncio
    async def test_get_profile(self, test_client, create_user):
        alice = await create_user("alice@example.com", name="Alice")
        response = await test_client.get("/api/profile", headers=alice.headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Alice"
        assert response.json()["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_requires_session(self, test_client):
        response = await test_client.get("/api/profile")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_name_and_email(self, test_client, create_user):
        alice = await create_user("alice@example.com")
        response = await test_client.put(
            "/api/profile",
            json={"name": " Alice Smith ", "email": "Alice.Smith@Example.com"},
            headers=alice.headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Alice Smith"
        assert response.json()["email"] == "alice.smith@example.com"

    @pytest.mark.asyncio
    async def test_email_taken(self, test_client, create_user):
        alice = await create_user("alice@example.com")
        await create_user("bob@example.com")
        response = await test_client.put(
            "/api/profile", json={"email": "BOB@example.com"}, headers=alice.headers
        )
        assert response.status_code == 409
        assert response.json()["message"] == "Email is already in use"

    @pytest.mark.asyncio
    async def test_null_name_rejected(self, test_client, create_user):
        alice = await create_user("alice@example.com")
        response = await test_client.put("/api/profile", json={"name": None}, headers=alice.headers)
        assert response.status_code == 400


class TestHealthAndRequestId:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        try:
            response = await test_client.get("/health")
        finally:
            await database.engine.dispose()
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_request_id_echoed_in_header_and_error_body(self, test_client):
        response = await test_client.get(
            "/api/profile", headers={"X-Request-ID": "trace-123"}
        )
        assert response.status_code == 401
        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"

    @pytest.mark.asyncio
    async def test_overlong_request_id_replaced(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "x" * 200})
        await database.engine.dispose()
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_rate_limited_response_carries_request_id(self, test_client):
        headers = {"X-Request-ID": "trace-429"}
        with patch.object(settings, "rate_limit_requests", 1):
            await test_client.get("/api/profile", headers=headers)
            response = await test_client.get("/api/profile", headers=headers)

        assert response.status_code == 429
        assert response.headers["X-Request-ID"] == "trace-429"
        assert response.json()["request_id"] == "trace-429"
