"""Integration tests for the survey endpoint (OPTIONS/POST/other on /api/form).

The real TurnstileProvider runs against an httpx MockTransport, so the only
fakes are the two external services themselves.
"""

from __future__ import annotations

import json
import uuid
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from errors import register_error_handlers
from infrastructure.captcha.turnstile import TurnstileProvider
from infrastructure.http_client import HttpClient
from infrastructure.kv.memory_store import InMemoryKVStore
from routes.survey_routes import create_survey_router
from services.submission_store import SubmissionStore
from services.submission_validator import INVALID_PAYLOAD_MESSAGE
from services.survey_service import SurveyService

PATH = "/api/form"
NOW = 1_700_000_000_000

CORS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "POST, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


class _Siteverify:
    def __init__(self, body=None, exc=None):
        self.calls = 0
        self._body = body if body is not None else {"success": True}
        self._exc = exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self._exc is not None:
            raise self._exc
        return httpx.Response(200, json=self._body)


class _RecordingKV(InMemoryKVStore):
    def __init__(self) -> None:
        super().__init__()
        self.puts = 0

    async def put(self, key: str, value: str) -> None:
        self.puts += 1
        await super().put(key, value)


def _build_test_app(siteverify: _Siteverify, kv) -> FastAPI:
    """Minimal app with the survey router and fakes injected via lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http = HttpClient(transport=httpx.MockTransport(siteverify))
        captcha = TurnstileProvider(secret="s3cret", http_client=http)
        app.state.kv_store = kv
        app.state.survey_service = SurveyService(
            captcha, SubmissionStore(kv), clock=lambda: NOW
        )
        yield
        await http.aclose()

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(create_survey_router(PATH))
    return app


@pytest.fixture
def siteverify():
    return _Siteverify()


@pytest.fixture
def kv():
    return _RecordingKV()


@pytest.fixture
def client(siteverify, kv):
    with TestClient(_build_test_app(siteverify, kv)) as c:
        yield c


def _valid(**overrides) -> dict:
    data = {"cf-turnstile-response": "validtoken", "host": "example.com", "rate": "5"}
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def _assert_cors(resp) -> None:
    for name, value in CORS.items():
        assert resp.headers[name] == value


def _stored(kv, key) -> dict:
    return json.loads(kv._data[key])


# ── POST success ──────────────────────────────────────────────────────────────


class TestSubmitSuccess:
    def test_example_submission(self, client, kv, siteverify):
        resp = client.post(PATH, data=_valid())
        assert resp.status_code == 200
        body = resp.json()
        assert set(body) == {"message", "key"}
        assert str(uuid.UUID(body["key"])) == body["key"]
        assert _stored(kv, body["key"]) == {
            "host": "example.com",
            "rate": 5,
            "timestamp": NOW,
        }
        assert kv.puts == 1
        assert siteverify.calls == 1
        assert resp.headers["content-type"] == "application/json"
        _assert_cors(resp)

    def test_optional_fields_stored(self, client, kv):
        resp = client.post(
            PATH,
            data=_valid(username="ann", email="ann@example.org", comment="nice"),
        )
        assert _stored(kv, resp.json()["key"]) == {
            "host": "example.com",
            "username": "ann",
            "email": "ann@example.org",
            "rate": 5,
            "comment": "nice",
            "timestamp": NOW,
        }

    def test_client_timestamp_is_ignored(self, client, kv):
        resp = client.post(PATH, data=_valid(timestamp="42"))
        assert _stored(kv, resp.json()["key"])["timestamp"] == NOW

    def test_repeated_field_uses_first_value(self, client, kv):
        resp = client.post(
            PATH,
            content=b"cf-turnstile-response=validtoken&host=first&host=second&rate=4",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        assert resp.status_code == 200
        assert _stored(kv, resp.json()["key"])["host"] == "first"

    def test_two_submissions_get_distinct_keys(self, client, kv):
        k1 = client.post(PATH, data=_valid(host="a.example")).json()["key"]
        k2 = client.post(PATH, data=_valid(host="b.example")).json()["key"]
        assert k1 != k2
        assert _stored(kv, k1)["host"] == "a.example"
        assert _stored(kv, k2)["host"] == "b.example"


# ── POST rejections ───────────────────────────────────────────────────────────


class TestSubmitRejected:
    @pytest.mark.parametrize("rate", ["0", "6", "-1", "abc", "", "3.5", None])
    def test_bad_rate(self, client, kv, rate):
        resp = client.post(PATH, data=_valid(rate=rate))
        assert resp.status_code == 400
        assert "error" in resp.json()
        assert kv.puts == 0
        _assert_cors(resp)

    def test_oversized_rate_is_invalid_payload(self, client, kv):
        resp = client.post(PATH, data=_valid(rate="9" * 5000))
        assert resp.status_code == 400
        assert resp.json() == {"error": INVALID_PAYLOAD_MESSAGE}
        assert kv.puts == 0

    @pytest.mark.parametrize("host", ["", None], ids=["empty", "missing"])
    def test_bad_host(self, client, kv, host):
        resp = client.post(PATH, data=_valid(host=host))
        assert resp.status_code == 400
        assert kv.puts == 0

    @pytest.mark.parametrize("token", ["", None], ids=["empty", "missing"])
    def test_missing_token_never_calls_siteverify(self, client, kv, siteverify, token):
        resp = client.post(PATH, data=_valid(**{"cf-turnstile-response": token}))
        assert resp.status_code == 400
        assert siteverify.calls == 0
        assert kv.puts == 0
        _assert_cors(resp)

    def test_rejected_token(self, kv):
        siteverify = _Siteverify(
            body={"success": False, "error-codes": ["invalid-input-response"]}
        )
        with TestClient(_build_test_app(siteverify, kv)) as client:
            resp = client.post(PATH, data=_valid())
        assert resp.status_code == 403
        assert set(resp.json()) == {"error"}
        assert kv.puts == 0
        _assert_cors(resp)

    def test_verification_service_unreachable(self, kv):
        siteverify = _Siteverify(exc=httpx.ConnectError("refused"))
        with TestClient(_build_test_app(siteverify, kv)) as client:
            resp = client.post(PATH, data=_valid())
        assert resp.status_code == 400
        assert "refused" not in resp.text
        assert kv.puts == 0
        _assert_cors(resp)

    def test_storage_failure_is_server_error(self, siteverify):
        kv = AsyncMock()
        kv.put.side_effect = RedisConnectionError("redis down")
        with TestClient(_build_test_app(siteverify, kv)) as client:
            resp = client.post(PATH, data=_valid())
        assert resp.status_code == 500
        assert "redis" not in resp.json()["error"].lower()
        _assert_cors(resp)

    def test_unexpected_failure_is_generic_client_error(self, siteverify, kv, mocker):
        mocker.patch(
            "services.survey_service.validate_submission",
            side_effect=RuntimeError("kaboom"),
        )
        with TestClient(_build_test_app(siteverify, kv)) as client:
            resp = client.post(PATH, data=_valid())
        assert resp.status_code == 400
        assert "kaboom" not in resp.text
        _assert_cors(resp)

    def test_non_form_body(self, client, kv, siteverify):
        resp = client.post(PATH, content=b"\x00garbage", headers={"content-type": "text/plain"})
        assert resp.status_code == 400
        assert siteverify.calls == 0
        assert kv.puts == 0


# ── OPTIONS / other methods ───────────────────────────────────────────────────


class TestMethods:
    def test_preflight(self, client, kv, siteverify):
        resp = client.options(PATH)
        assert resp.status_code == 204
        assert resp.content == b""
        assert siteverify.calls == 0
        assert kv.puts == 0
        _assert_cors(resp)

    def test_browser_preflight_headers(self, client):
        resp = client.options(
            PATH,
            headers={
                "Origin": "https://blog.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )
        assert resp.status_code == 204
        _assert_cors(resp)

    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE"])
    def test_other_methods_not_allowed(self, client, kv, siteverify, method):
        resp = client.request(method, PATH)
        assert resp.status_code == 405
        assert set(resp.json()) == {"error"}
        assert siteverify.calls == 0
        assert kv.puts == 0
        _assert_cors(resp)

    def test_head_not_allowed(self, client):
        resp = client.head(PATH)
        assert resp.status_code == 405
        _assert_cors(resp)

    def test_unrouted_verb_not_allowed(self, client):
        resp = client.request("TRACE", PATH)
        assert resp.status_code == 405
        assert "error" in resp.json()
        _assert_cors(resp)
