"""Shared pytest fixtures for GitLab MCP tests.

Fixture Organization:
    - Environment isolation: GITLAB_* variables cleared, config cache reset
    - Config fixtures: GitLabConfig snapshots built from explicit values
    - Transport fixtures: httpx.MockTransport routing requests to a handler
"""

import json
import os
from collections.abc import Callable

import httpx
import pytest

from gitlab_mcp.config import GitLabConfig, reset_config
from gitlab_mcp.gitlab.client import GitLabClient

GITLAB_URL = "https://gitlab.example.com"
TOKEN = "glpat-test-token-123"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep host GITLAB_* settings and the cached config out of every test."""
    for key in list(os.environ):
        if key.upper().startswith("GITLAB_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(os.path.dirname(__file__))
    reset_config()
    yield
    reset_config()


def make_config(**overrides) -> GitLabConfig:
    """Build a config without reading any .env file."""
    values = {"url": GITLAB_URL, "token": TOKEN}
    values.update(overrides)
    return GitLabConfig(_env_file=None, **values)


@pytest.fixture
def config() -> GitLabConfig:
    return make_config()


def json_response(
    data,
    status_code: int = 200,
    headers: dict | None = None,
) -> httpx.Response:
    """httpx.Response with a JSON body, for MockTransport handlers."""
    return httpx.Response(
        status_code,
        content=json.dumps(data).encode(),
        headers={"Content-Type": "application/json", **(headers or {})},
    )


class RecordingTransport:
    """MockTransport wrapper that keeps every request it served.

    ``routes`` maps (method, path) to a response or to a callable taking the
    request; unknown routes answer 404 like GitLab does.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response | Callable] = {}

    def add(self, method: str, path: str, response) -> None:
        self.routes[(method, path)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.raw_path.decode().split("?")[0]))
        if route is None:
            return json_response({"message": "404 Not Found"}, status_code=404)
        if callable(route):
            return route(request)
        return route

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def recorder() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def make_client(recorder):
    """Factory for a GitLabClient wired to the recording transport."""

    def _make(**config_overrides) -> GitLabClient:
        return GitLabClient(make_config(**config_overrides), transport=recorder.transport)

    return _make


@pytest.fixture
def gitlab_client(make_client) -> GitLabClient:
    return make_client()
