"""Shared test fixtures for hubauth.

Provides settings builders, a recording GitHub stand-in served through
:class:`httpx.MockTransport`, host context doubles, config isolation and
output state management. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
import pytest

from hubauth.models import NormalizedIdentity, ProviderConfig
from hubauth.output import reset_output
from hubauth.settings import ENV_PREFIX, GitHubSettings


STUB_BASE_URL = "http://github.test/"

TOKEN_BODY = "access_token=abc123&scope=user&token_type=bearer"

OCTOCAT_PROFILE = {
    "login": "octocat",
    "id": 1,
    "avatar_url": "https://github.com/images/error/octocat_happy.gif",
    "name": "monalisa octocat",
    "email": "octocat@github.com",
}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_package_logger() -> None:
    """Undo the handler the CLI callback attaches to the ``hubauth`` logger."""
    yield
    package_logger = logging.getLogger("hubauth")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _make_settings(**overrides: Any) -> GitHubSettings:
    values: dict[str, Any] = {
        "enabled": True,
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
        "api_base_url": STUB_BASE_URL,
        "web_base_url": STUB_BASE_URL,
    }
    values.update(overrides)
    return GitHubSettings(ProviderConfig(**values))


@pytest.fixture
def make_settings():
    """Factory for enabled settings pointing both base URLs at the stub server."""
    return _make_settings


@pytest.fixture
def settings() -> GitHubSettings:
    return _make_settings()


# ---------------------------------------------------------------------------
# GitHub stand-in
# ---------------------------------------------------------------------------


@dataclass
class GitHubStub:
    """Answers the token and profile endpoints and records every request.

    Set ``token_response`` / ``profile_response`` to change the canned
    answers, or to an exception instance to simulate a transport failure.
    """

    token_response: Any = field(
        default_factory=lambda: httpx.Response(200, text=TOKEN_BODY)
    )
    profile_response: Any = field(
        default_factory=lambda: httpx.Response(200, json=OCTOCAT_PROFILE)
    )
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.startswith("/login/oauth/access_token"):
            answer = self.token_response
        elif request.url.path == "/user":
            answer = self.profile_response
        else:
            return httpx.Response(404)
        if isinstance(answer, Exception):
            raise answer
        return answer

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def github_stub() -> GitHubStub:
    return GitHubStub()


# ---------------------------------------------------------------------------
# Host context doubles
# ---------------------------------------------------------------------------


class RecordingCallbackContext:
    """Callback context that records every call the provider makes."""

    def __init__(
        self,
        query_params: Optional[dict[str, str]] = None,
        csrf_error: Optional[Exception] = None,
    ) -> None:
        if query_params is None:
            query_params = {"code": "the-code", "state": "xyz"}
        self.query_params = query_params
        self._csrf_error = csrf_error
        self.calls: list[str] = []
        self.identities: list[NormalizedIdentity] = []

    def verify_csrf_state(self) -> None:
        self.calls.append("verify_csrf_state")
        if self._csrf_error is not None:
            raise self._csrf_error

    def get_request(self) -> RecordingCallbackContext:
        self.calls.append("get_request")
        return self

    def authenticate(self, identity: NormalizedIdentity) -> None:
        self.calls.append("authenticate")
        self.identities.append(identity)

    def redirect_to_requested_page(self) -> None:
        self.calls.append("redirect_to_requested_page")


class RecordingInitContext:
    """Init context with a fixed state that records the redirect."""

    def __init__(self, state: str = "xyz", callback_url: str = "http://localhost/cb") -> None:
        self.state = state
        self.callback_url = callback_url
        self.redirects: list[str] = []

    def generate_csrf_state(self) -> str:
        return self.state

    def get_callback_url(self) -> str:
        return self.callback_url

    def redirect_to(self, url: str) -> None:
        self.redirects.append(url)


@pytest.fixture
def make_callback_context():
    """Factory for callback contexts with custom query params or CSRF failure."""
    return RecordingCallbackContext


@pytest.fixture
def callback_context() -> RecordingCallbackContext:
    return RecordingCallbackContext()


@pytest.fixture
def init_context() -> RecordingInitContext:
    return RecordingInitContext()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    and forces the XDG layout so that tests never touch real user config.
    Clears all HUBAUTH_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("hubauth.settings._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for suffix in (
        "ENABLED",
        "CLIENT_ID",
        "CLIENT_SECRET",
        "API_URL",
        "WEB_URL",
        "ALLOW_USERS_TO_SIGN_UP",
        "TIMEOUT",
        "TOKEN_URL",
    ):
        monkeypatch.delenv(ENV_PREFIX + suffix, raising=False)

    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
