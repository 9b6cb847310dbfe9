"""Tests for hubauth.client.api -- endpoint URLs and request shapes."""

from __future__ import annotations

from typing import Any, Callable
from urllib.parse import parse_qs, urlparse

import pytest
from pydantic import SecretStr

from hubauth.client.api import GitHubApi
from hubauth.exceptions import ConfigurationError
from hubauth.models import ProviderConfig
from hubauth.settings import GitHubSettings


class TestTokenEndpoint:
    def test_public_github_uses_web_host(self) -> None:
        settings = GitHubSettings(
            ProviderConfig(enabled=True, client_id="id", client_secret="secret")
        )
        assert GitHubApi(settings).token_endpoint == "https://github.com/login/oauth/access_token"

    def test_custom_api_base(self, make_settings: Callable[..., GitHubSettings]) -> None:
        settings = make_settings(api_base_url="https://ghe.example.com/api/v3")
        assert (
            GitHubApi(settings).token_endpoint
            == "https://ghe.example.com/api/v3/login/oauth/access_token"
        )

    def test_enterprise_token_url_on_web_host(self) -> None:
        settings = GitHubSettings(
            ProviderConfig(
                enabled=True,
                client_id="id",
                client_secret="secret",
                api_base_url="https://github.example.com/api/v3",
                web_base_url="https://github.example.com",
                token_url="https://github.example.com/login/oauth/access_token",
            )
        )
        api = GitHubApi(settings)

        assert api.token_endpoint == "https://github.example.com/login/oauth/access_token"
        assert api.profile_endpoint == "https://github.example.com/api/v3/user"

    def test_explicit_override(self, make_settings: Callable[..., GitHubSettings]) -> None:
        settings = make_settings(token_url="https://sso.example.com/token")
        assert GitHubApi(settings).token_endpoint == "https://sso.example.com/token"


class TestProfileEndpoint:
    def test_under_api_base(self, make_settings: Callable[..., GitHubSettings]) -> None:
        settings = make_settings(api_base_url="https://ghe.example.com/api/v3/")
        assert GitHubApi(settings).profile_endpoint == "https://ghe.example.com/api/v3/user"


class TestAuthorizationUrl:
    def test_query_parameters(self, make_settings: Callable[..., GitHubSettings]) -> None:
        settings = make_settings(scopes=("read:user", "user:email"))
        url = GitHubApi(settings).authorization_url("xyz", "https://app.example.com/cb")

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
            "http://github.test/login/oauth/authorize"
        )
        query = parse_qs(parsed.query)
        assert query == {
            "client_id": ["test-client-id"],
            "redirect_uri": ["https://app.example.com/cb"],
            "scope": ["read:user user:email"],
            "state": ["xyz"],
        }

    def test_missing_client_id(self) -> None:
        config = ProviderConfig.model_construct(
            enabled=True, client_id=SecretStr(""), client_secret=SecretStr("secret")
        )
        with pytest.raises(ConfigurationError, match="client_id"):
            GitHubApi(GitHubSettings(config)).authorization_url("xyz", "http://cb")


class TestTokenRequest:
    def test_shape(self, settings: GitHubSettings) -> None:
        request = GitHubApi(settings).build_token_request("the-code")

        assert request.method == "POST"
        assert request.url.path == "/login/oauth/access_token"
        assert dict(request.url.params) == {
            "client_id": "test-client-id",
            "client_secret": "test-client-secret",
            "code": "the-code",
        }
        assert "json" not in request.headers["accept"]

    def test_carries_timeout(self, make_settings: Callable[..., GitHubSettings]) -> None:
        request = GitHubApi(make_settings(timeout=7)).build_token_request("c")
        timeout: dict[str, Any] = request.extensions["timeout"]
        assert timeout["read"] == 7.0


class TestProfileRequest:
    def test_shape(self, settings: GitHubSettings) -> None:
        request = GitHubApi(settings).build_profile_request("abc123")

        assert request.method == "GET"
        assert str(request.url) == "http://github.test/user"
        assert request.headers["authorization"] == "Bearer abc123"
        assert request.headers["accept"] == "application/json"
