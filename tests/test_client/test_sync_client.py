"""Tests for the synchronous HTTP client."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from conftest import make_profile
from speccode.client.sync_client import SyncClient, error_messages, raise_for_status
from speccode.exceptions import (
    AuthError,
    ConflictError,
    ConnectionError_,
    NotFoundError,
    ServerError,
)
from speccode.output import OutputManager, reset_output, set_output


@pytest.fixture(autouse=True)
def _clean_output():
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(
        status_code, request=httpx.Request("GET", "https://api.example.com/x"), **kwargs
    )


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_and_exit_closes(self) -> None:
        client = SyncClient(make_profile())
        assert client._client is None
        with client:
            assert client._client is not None
        assert client._client is None

    def test_base_url_from_profile(self) -> None:
        with SyncClient(make_profile(api_uri="https://specs.example.com/")) as client:
            assert client._client.base_url.host == "specs.example.com"


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    def test_get_with_params_drops_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/organizations"
            assert request.url.params["limit"] == "10"
            assert "offset" not in request.url.params
            assert request.headers["accept"] == "application/json"
            return httpx.Response(200, json=[])

        with SyncClient(make_profile(), transport=httpx.MockTransport(handler)) as client:
            response = client.get("/organizations", params={"limit": 10, "offset": None})
        assert response.json() == []

    def test_put_with_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PUT"
            assert json.loads(request.content) == {"a": 1}
            return httpx.Response(200, json={"ok": True})

        with SyncClient(make_profile(), transport=httpx.MockTransport(handler)) as client:
            assert client.put("/x", json_body={"a": 1}).json() == {"ok": True}

    def test_no_auth_header_without_token(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "authorization" not in request.headers
            return httpx.Response(200, json={})

        with SyncClient(make_profile(), transport=httpx.MockTransport(handler)) as client:
            client.get("/x")

    def test_basic_token_header(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEST_TOKEN", "secret")
        expected = "Basic " + base64.b64encode(b"secret:").decode()

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["authorization"] == expected
            return httpx.Response(200, json={})

        profile = make_profile(token_source="env:TEST_TOKEN")
        with SyncClient(profile, transport=httpx.MockTransport(handler)) as client:
            client.get("/x")

    def test_bearer_token_header(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEST_TOKEN", "secret")

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["authorization"] == "Bearer secret"
            return httpx.Response(200, json={})

        profile = make_profile(token_source="env:TEST_TOKEN", auth_scheme="bearer")
        with SyncClient(profile, transport=httpx.MockTransport(handler)) as client:
            client.get("/x")


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize(
        "status,exc_type",
        [
            (401, AuthError),
            (403, AuthError),
            (404, NotFoundError),
            (409, ConflictError),
            (422, ConflictError),
            (400, ServerError),
            (500, ServerError),
        ],
    )
    def test_status_raises(self, status: int, exc_type: type) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(status, json={"message": "nope"}))
        with SyncClient(make_profile(), transport=transport) as client:
            with pytest.raises(exc_type):
                client.get("/x")

    def test_check_false_returns_response(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(404))
        with SyncClient(make_profile(), transport=transport) as client:
            assert client.get("/x", check=False).status_code == 404

    def test_conflict_carries_messages(self) -> None:
        body = [{"code": "invalid", "message": "Name is required"}, {"code": "x", "message": "Bad type"}]
        with pytest.raises(ConflictError) as excinfo:
            raise_for_status(_response(409, json=body))
        assert excinfo.value.messages == ["Name is required", "Bad type"]

    def test_server_error_keeps_status_and_body(self) -> None:
        with pytest.raises(ServerError) as excinfo:
            raise_for_status(_response(502, text="bad gateway"))
        assert excinfo.value.status_code == 502
        assert excinfo.value.body == "bad gateway"
        assert "HTTP 502: bad gateway" in str(excinfo.value)


class TestErrorMessages:
    def test_list_of_error_objects(self) -> None:
        resp = _response(409, json=[{"code": "a", "message": "first"}, {"code": "b"}])
        assert error_messages(resp) == ["first", '{"code": "b"}']

    def test_single_object(self) -> None:
        assert error_messages(_response(400, json={"detail": "bad"})) == ["bad"]

    def test_plain_text(self) -> None:
        assert error_messages(_response(500, text="Internal")) == ["Internal"]

    def test_empty_body(self) -> None:
        assert error_messages(_response(500)) == []


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestRetry:
    def test_no_retry_by_default(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503)

        with SyncClient(make_profile(), transport=httpx.MockTransport(handler)) as client:
            assert client.get("/x", check=False).status_code == 503
        assert calls == 1

    def test_retries_server_errors(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("speccode.client.sync_client.time.sleep", lambda s: None)
        statuses = iter([500, 502, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses), json={})

        profile = make_profile(max_retries=2)
        with SyncClient(profile, transport=httpx.MockTransport(handler)) as client:
            assert client.get("/x").status_code == 200

    def test_network_error_raises_connection_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("speccode.client.sync_client.time.sleep", lambda s: None)
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ConnectError("refused", request=request)

        profile = make_profile(max_retries=1)
        with SyncClient(profile, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ConnectionError_, match="2 attempt"):
                client.get("/x")
        assert calls == 2


# ---------------------------------------------------------------------------
# Dry-run
# ---------------------------------------------------------------------------


class TestDryRun:
    def test_put_is_not_sent(self) -> None:
        sent = False

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal sent
            sent = True
            return httpx.Response(200, json={})

        with SyncClient(make_profile(), dry_run=True, transport=httpx.MockTransport(handler)) as client:
            response = client.put("/acme/widgets/1.0.0", json_body={"a": 1})

        assert not sent
        assert response.json()["dry_run"] is True

    def test_get_is_still_sent(self) -> None:
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=["real"]))
        with SyncClient(make_profile(), dry_run=True, transport=transport) as client:
            assert client.get("/organizations").json() == ["real"]
