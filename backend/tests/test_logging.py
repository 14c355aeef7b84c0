"""
Unit tests for logging helpers and the request logging middleware.
"""

import json
import logging
from fastapi import FastAPI
from fastapi.testclient import TestClient

from healthlink.core.logging_config import JSONFormatter, filter_sensitive_data, truncate_large_data
from healthlink.middleware import RequestLoggingMiddleware


class TestLoggingHelpers:

    def test_filter_sensitive_data(self):
        data = {"email": "a@b.co", "password": "secret", "nested": [{"api_key": "k", "steps": 1}]}
        assert filter_sensitive_data(data) == {
            "email": "a@b.co",
            "password": "***FILTERED***",
            "nested": [{"api_key": "***FILTERED***", "steps": 1}],
        }

    def test_truncate(self):
        assert truncate_large_data("short") == "short"
        assert truncate_large_data("x" * 20, max_length=10).startswith("x" * 10 + "... (truncated")

    def test_json_formatter_includes_extra_fields(self):
        record = logging.LogRecord("healthlink.test", logging.INFO, __file__, 1, "hello", None, None)
        record.extra_fields = {"user_id": "u1", "token": "abc"}
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "hello"
        assert data["user_id"] == "u1"
        assert data["token"] == "***FILTERED***"


class TestRequestLoggingMiddleware:

    def _app(self):
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        @app.get("/health")
        async def health():
            return {"status": "healthy"}

        return app

    def test_logs_request(self, caplog):
        client = TestClient(self._app())
        with caplog.at_level(logging.INFO, logger="healthlink.middleware.logging_middleware"):
            assert client.get("/ping").status_code == 200
        assert any("GET /ping - 200" in r.getMessage() for r in caplog.records)

    def test_excluded_path(self, caplog):
        client = TestClient(self._app())
        with caplog.at_level(logging.INFO, logger="healthlink.middleware.logging_middleware"):
            client.get("/health")
        assert not any("/health" in r.getMessage() for r in caplog.records)
