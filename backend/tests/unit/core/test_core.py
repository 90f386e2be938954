"""
Unit Tests for core configuration, error envelopes and middleware
"""
import json
import logging

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from credensuite.core import database
from credensuite.core.config import parse_browser_args, parse_cors_origins
from credensuite.core.exceptions import (
    BadgeRenderTimeoutError,
    MemberNotFoundError,
    StorageUnavailableError,
    ValidationError,
    error_response,
)
from credensuite.core.logging_config import (
    JSONFormatter,
    bind_request_context,
    clear_request_context,
    current_context,
    get_logger,
)
from credensuite.core.middleware import RequestSizeLimitMiddleware, should_skip_logging


class TestConfigParsers:

    def test_cors_comma_separated(self):
        assert parse_cors_origins("http://a.test, http://b.test,") == ["http://a.test", "http://b.test"]

    def test_cors_json_list(self):
        assert parse_cors_origins('["http://a.test"]') == ["http://a.test"]

    def test_browser_args(self):
        assert parse_browser_args("--no-sandbox  --disable-gpu") == ["--no-sandbox", "--disable-gpu"]
        assert parse_browser_args("") == []


class TestDatabaseUrl:

    def test_postgres_url_uses_asyncpg(self, monkeypatch):
        monkeypatch.setattr(database.settings, "DATABASE_URL", "postgresql://u:p@db/credensuite")

        assert database.get_database_url() == "postgresql+asyncpg://u:p@db/credensuite"

    def test_sqlite_url_unchanged(self, monkeypatch):
        monkeypatch.setattr(database.settings, "DATABASE_URL", "sqlite+aiosqlite:///./x.db")

        assert database.get_database_url() == "sqlite+aiosqlite:///./x.db"


class TestErrorResponse:

    def test_not_found_envelope(self):
        body = error_response(MemberNotFoundError("abc"))

        assert body["success"] is False
        assert body["error"]["code"] == "MEMBER_NOT_FOUND"
        assert body["error"]["details"]["resource_id"] == "abc"

    def test_validation_error_lists_fields(self):
        error = ValidationError(errors=[
            {"field": "fullName", "message": "Field required"},
            {"field": "joiningDate", "message": "Field required"},
        ])

        assert error.status_code == 400
        assert error_response(error)["error"]["details"]["fields"] == ["fullName", "joiningDate"]

    def test_internal_errors_are_generic(self):
        body = error_response(BadgeRenderTimeoutError(15, "ORG-2024-001"))

        assert body["error"] == {
            "code": "BADGE_RENDER_TIMEOUT",
            "message": "Failed to generate ID card",
            "details": {},
        }

    def test_internal_errors_exposed_on_request(self):
        body = error_response(StorageUnavailableError("disk full", operation="create_member"), expose_internal=True)

        assert body["error"]["message"] == "disk full"
        assert body["error"]["details"] == {"operation": "create_member"}


class TestMiddleware:

    def test_skip_logging_paths(self):
        assert should_skip_logging("/health")
        assert should_skip_logging("/uploads/photo.png")
        assert not should_skip_logging("/api/v1/members")

    @pytest.mark.asyncio
    async def test_request_size_limit(self):
        app = FastAPI()
        app.add_middleware(RequestSizeLimitMiddleware, max_size=16)

        @app.post("/echo")
        async def echo():
            return {"ok": True}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            small = await ac.post("/echo", content=b"x" * 8)
            large = await ac.post("/echo", content=b"x" * 64)

        assert small.status_code == 200
        assert large.status_code == 413
        assert large.json()["error"]["code"] == "REQUEST_TOO_LARGE"


class TestLogging:

    def test_json_formatter_includes_context_and_extras(self):
        bind_request_context(request_id="req-1", actor=" Admin@Example.org ")
        try:
            record = logging.makeLogRecord({
                "name": "credensuite.test",
                "levelname": "INFO",
                "msg": "member %s saved",
                "args": ("ORG-2024-001",),
                "event_type": "member_saved",
            })
            entry = json.loads(JSONFormatter().format(record))
        finally:
            clear_request_context()

        assert entry["msg"] == "member ORG-2024-001 saved"
        assert entry["request_id"] == "req-1"
        assert entry["actor"] == "admin@example.org"
        assert entry["event_type"] == "member_saved"

    def test_context_cleared(self):
        bind_request_context(request_id="req-2")
        clear_request_context()

        assert current_context() == {}

    def test_module_loggers_join_the_tree(self):
        assert get_logger("credensuite.services.x").name == "credensuite.services.x"
        assert get_logger("plugins").name == "credensuite.plugins"
