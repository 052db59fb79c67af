"""Tests for client identity extraction and the rate limit dependency."""

from unittest.mock import patch

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from fileshare.core import rate_limit
from fileshare.core.exception_handlers import setup_exception_handlers
from fileshare.core.rate_limit import get_client_ip, rate_limited, reset_rate_limiter


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestClientIp:
    def test_uses_first_forwarded_for_entry(self) -> None:
        request = _request({"X-Forwarded-For": " 203.0.113.7 , 10.0.0.1, 10.0.0.2"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_falls_back_to_real_ip(self) -> None:
        request = _request({"X-Real-IP": "198.51.100.4"})
        assert get_client_ip(request) == "198.51.100.4"

    def test_forwarded_for_wins_over_real_ip(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "198.51.100.4"})
        assert get_client_ip(request) == "203.0.113.7"

    def test_unknown_without_headers(self) -> None:
        assert get_client_ip(_request({})) == "unknown"

    def test_unknown_when_first_forwarded_entry_is_blank(self) -> None:
        assert get_client_ip(_request({"X-Forwarded-For": " , 10.0.0.1"})) == "unknown"


@pytest.fixture
def limited_client() -> TestClient:
    reset_rate_limiter()
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get(
        "/limited",
        dependencies=[
            Depends(rate_limited("test-route", "shared_rate_limit_requests", "shared_rate_limit_window_ms"))
        ],
    )
    async def limited(request: Request) -> dict:
        return {"ok": True}

    yield TestClient(app)
    reset_rate_limiter()


class TestRateLimitedDependency:
    @patch("fileshare.core.rate_limit.settings")
    def test_returns_429_with_headers_after_limit(self, mock_settings, limited_client: TestClient) -> None:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_include_headers = True
        mock_settings.app.shared_rate_limit_requests = 2
        mock_settings.app.shared_rate_limit_window_ms = 60_000
        headers = {"X-Forwarded-For": "203.0.113.7"}

        assert limited_client.get("/limited", headers=headers).status_code == 200
        assert limited_client.get("/limited", headers=headers).status_code == 200
        resp = limited_client.get("/limited", headers=headers)

        assert resp.status_code == 429
        assert resp.json()["error"] == "Too Many Requests"
        assert resp.json()["code"] == "rate_limited"
        assert 0 < int(resp.headers["Retry-After"]) <= 60
        assert resp.headers["X-RateLimit-Limit"] == "2"
        assert resp.headers["X-RateLimit-Remaining"] == "0"

    @patch("fileshare.core.rate_limit.settings")
    def test_other_clients_keep_their_budget(self, mock_settings, limited_client: TestClient) -> None:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_include_headers = True
        mock_settings.app.shared_rate_limit_requests = 1
        mock_settings.app.shared_rate_limit_window_ms = 60_000

        assert limited_client.get("/limited", headers={"X-Forwarded-For": "203.0.113.7"}).status_code == 200
        assert limited_client.get("/limited", headers={"X-Forwarded-For": "203.0.113.7"}).status_code == 429
        assert limited_client.get("/limited", headers={"X-Forwarded-For": "203.0.113.8"}).status_code == 200

    @patch("fileshare.core.rate_limit.settings")
    def test_headers_can_be_disabled(self, mock_settings, limited_client: TestClient) -> None:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_include_headers = False
        mock_settings.app.shared_rate_limit_requests = 1
        mock_settings.app.shared_rate_limit_window_ms = 60_000

        limited_client.get("/limited")
        resp = limited_client.get("/limited")

        assert resp.status_code == 429
        assert "Retry-After" not in resp.headers

    @patch("fileshare.core.rate_limit.settings")
    def test_disabled_limiter_admits_everything(self, mock_settings, limited_client: TestClient) -> None:
        mock_settings.app.rate_limit_enabled = False
        mock_settings.app.shared_rate_limit_requests = 1
        mock_settings.app.shared_rate_limit_window_ms = 60_000

        for _ in range(5):
            assert limited_client.get("/limited").status_code == 200


def test_get_rate_limiter_is_process_wide() -> None:
    assert rate_limit.get_rate_limiter() is rate_limit.get_rate_limiter()
