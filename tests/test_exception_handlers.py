"""Tests for global exception handlers.

Validates that every engine error maps to the right HTTP status with a
consistent JSON body and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from recordstore.core.errors import (
    AppError,
    NotFoundAppError,
    RateLimitAppError,
    StorageAppError,
    ValidationAppError,
)
from recordstore.core.exception_handlers import setup_exception_handlers, status_code_for


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(
                code="validation_failed",
                message="Validation Error: name: too short",
                details={"errors": [{"field": "name", "message": "too short"}]},
            )

        response = client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "validation_failed"
        assert data["error"]["details"]["errors"][0]["field"] == "name"
        assert "request_id" in data["error"]

    def test_not_found_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-not-found")
        async def endpoint():
            raise NotFoundAppError(code="record_not_found", message="Record with ID 3 not found")

        response = client.get("/test-not-found")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Record with ID 3 not found"

    def test_rate_limit_returns_429_with_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-rate-limit")
        async def endpoint():
            raise RateLimitAppError(
                code="rate_limit_exceeded",
                message="Too many requests, slow down",
                details={"limit": 10, "remaining": 0, "reset_at": 1001, "retry_after": 1},
            )

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "1"
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "1001"

    def test_storage_error_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-storage")
        async def endpoint():
            raise StorageAppError(code="storage_read_failed", message="Error reading database file")

        response = client.get("/test-storage")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "storage_read_failed"

    def test_error_response_format_is_consistent(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-format")
        async def endpoint():
            raise ValidationAppError(code="test", message="test")

        data = client.get("/test-format").json()

        assert set(data["error"]) == {"code", "message", "request_id"}

    @pytest.mark.parametrize(
        ("error_cls", "expected"),
        [
            (ValidationAppError, 400),
            (NotFoundAppError, 400),
            (RateLimitAppError, 429),
            (StorageAppError, 500),
            (AppError, 400),
        ],
    )
    def test_status_code_mapping(self, error_cls, expected):
        assert status_code_for(error_cls(code="c", message="m")) == expected


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_general_exception_handler_logic(self):
        from recordstore.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/api/records"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: disk controller on fire")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "disk controller" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()

    def test_handlers_registered(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers


def test_error_str_is_message():
    exc = NotFoundAppError(code="record_not_found", message="Record with ID 1 not found")

    assert str(exc) == "Record with ID 1 not found"
