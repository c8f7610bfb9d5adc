"""Shared test fixtures for speccode.

Provides isolated config environments, output state management, a fake
code provider for sync tests, a mock HTTP service for client and command
tests, and a CLI runner. pytest discovers these automatically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from speccode.models import (
    FetchError,
    FileSet,
    GeneratedFile,
    GeneratorTarget,
    Profile,
    Project,
    RequestConfig,
)
from speccode.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager's Rich consoles hold the streams that were current when it
    was created; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG dirs at tmp_path, clear SPECCODE_* vars, and chdir there."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("speccode.config._is_xdg_platform", lambda: True)

    for var in ["SPECCODE_PROFILE", "SPECCODE_API_URI", "SPECCODE_TOKEN"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def plain_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Model helpers
# ---------------------------------------------------------------------------


def make_profile(
    api_uri: str = "https://api.example.com",
    token_source: Optional[str] = None,
    auth_scheme: str = "basic",
    max_retries: int = 0,
) -> Profile:
    return Profile(
        name="test",
        api_uri=api_uri,
        token_source=token_source,
        auth_scheme=auth_scheme,
        request=RequestConfig(timeout=5, max_retries=max_retries),
    )


def make_project(
    targets: list[tuple[str, str]],
    org: str = "acme",
    app: str = "widgets",
    version: str = "1.0.0",
) -> Project:
    return Project(
        organization=org,
        application=app,
        version=version,
        generators=tuple(GeneratorTarget(generator=g, target=t) for g, t in targets),
    )


def file_set(generator: str, files: dict[str, str]) -> FileSet:
    return FileSet(
        generator=generator,
        files=[GeneratedFile(generator=generator, name=n, contents=c) for n, c in files.items()],
    )


@pytest.fixture
def sample_profile() -> Profile:
    return make_profile()


# ---------------------------------------------------------------------------
# Fake code provider
# ---------------------------------------------------------------------------


class FakeProvider:
    """Answers ``fetch`` from a dict keyed by (org, app, version, generator).

    Unknown keys answer with *default*. Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        responses: dict[tuple[str, str, str, str], Union[FileSet, FetchError]],
        default: Optional[Union[FileSet, FetchError]] = None,
    ) -> None:
        self.responses = responses
        self.default = default
        self.calls: list[tuple[str, str, str, str]] = []

    def fetch(self, org: str, app: str, version: str, generator: str):
        key = (org, app, version, generator)
        self.calls.append(key)
        if key in self.responses:
            return self.responses[key]
        if self.default is None:
            raise AssertionError(f"Unexpected fetch: {key}")
        return self.default


# ---------------------------------------------------------------------------
# Mock HTTP service
# ---------------------------------------------------------------------------


Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class MockService:
    """A routing table for :class:`httpx.MockTransport`.

    Routes are keyed by ``(METHOD, path)``; unmatched requests get a 404.
    Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, route: Route) -> None:
        self.routes[(method.upper(), path)] = route

    def json(self, method: str, path: str, data: Any, status_code: int = 200) -> None:
        self.add(method, path, httpx.Response(status_code, json=data))

    def code(self, path: str, files: dict[str, str]) -> None:
        """Serve a code response listing *files* at *path*."""
        self.json(
            "GET",
            path,
            {"files": [{"name": n, "contents": c} for n, c in files.items()]},
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json=[{"code": "not_found", "message": "Not found"}])
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def body_of(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def service() -> MockService:
    return MockService()


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_app():
    """The real root app with every built-in command registered."""
    from speccode.app import app, register_commands

    register_commands()
    return app
