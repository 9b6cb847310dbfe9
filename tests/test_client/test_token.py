"""Tests for hubauth.client.token -- body parsers and the code exchange."""

from __future__ import annotations

import httpx
import pytest

from hubauth.client.token import TokenExchanger, parse_form_encoded_token, parse_json_token
from hubauth.exceptions import MissingCodeError, TokenExchangeError
from hubauth.exit_codes import EXIT_CONNECTION_ERROR
from hubauth.settings import GitHubSettings


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


class TestParseFormEncodedToken:
    def test_github_body(self) -> None:
        token = parse_form_encoded_token("access_token=abc123&scope=user&token_type=bearer")
        assert token.value == "abc123"
        assert token.scope == "user"
        assert token.token_type == "bearer"

    def test_field_order_irrelevant(self) -> None:
        token = parse_form_encoded_token("token_type=bearer&access_token=abc123")
        assert token.value == "abc123"
        assert token.scope is None

    def test_values_url_decoded(self) -> None:
        token = parse_form_encoded_token("access_token=abc123&scope=repo%2Cgist")
        assert token.scope == "repo,gist"

    def test_missing_access_token(self) -> None:
        with pytest.raises(TokenExchangeError, match="access_token"):
            parse_form_encoded_token("scope=user&token_type=bearer")

    def test_empty_access_token(self) -> None:
        with pytest.raises(TokenExchangeError, match="access_token"):
            parse_form_encoded_token("access_token=&scope=user")

    def test_error_field(self) -> None:
        body = (
            "error=bad_verification_code"
            "&error_description=The+code+passed+is+incorrect+or+expired."
        )
        with pytest.raises(TokenExchangeError) as exc_info:
            parse_form_encoded_token(body)
        assert "bad_verification_code" in str(exc_info.value)
        assert "incorrect or expired" in str(exc_info.value)


class TestParseJsonToken:
    def test_json_body(self) -> None:
        token = parse_json_token('{"access_token": "abc123", "token_type": "bearer", "scope": "user"}')
        assert token.value == "abc123"

    def test_not_json(self) -> None:
        with pytest.raises(TokenExchangeError, match="not valid JSON"):
            parse_json_token("access_token=abc123")

    def test_not_an_object(self) -> None:
        with pytest.raises(TokenExchangeError, match="not a JSON object"):
            parse_json_token('["abc123"]')


# ---------------------------------------------------------------------------
# Exchange
# ---------------------------------------------------------------------------


def _exchanger(handler, **kwargs) -> TokenExchanger:
    return TokenExchanger(httpx.Client(transport=httpx.MockTransport(handler)), **kwargs)


class TestTokenExchanger:
    def test_successful_exchange(self, settings: GitHubSettings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="access_token=abc123&scope=user&token_type=bearer")

        token = _exchanger(handler).exchange_code_for_token("the-code", settings)

        assert token.value == "abc123"
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/login/oauth/access_token"
        assert seen[0].url.params["code"] == "the-code"
        assert seen[0].url.params["client_secret"] == "test-client-secret"

    def test_empty_code_sends_nothing(self, settings: GitHubSettings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        with pytest.raises(MissingCodeError):
            _exchanger(handler).exchange_code_for_token("", settings)
        assert seen == []

    def test_server_error(self, settings: GitHubSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(TokenExchangeError, match="status 500"):
            _exchanger(handler).exchange_code_for_token("the-code", settings)

    def test_transport_failure(self, settings: GitHubSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TokenExchangeError) as exc_info:
            _exchanger(handler).exchange_code_for_token("the-code", settings)
        assert exc_info.value.exit_code == EXIT_CONNECTION_ERROR
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    def test_rejected_code(self, settings: GitHubSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="error=bad_verification_code")

        with pytest.raises(TokenExchangeError, match="bad_verification_code"):
            _exchanger(handler).exchange_code_for_token("stale", settings)

    def test_custom_parser(self, settings: GitHubSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"access_token": "json-token"})

        token = _exchanger(handler, parser=parse_json_token).exchange_code_for_token(
            "the-code", settings
        )
        assert token.value == "json-token"

    def test_secret_not_in_error(self, settings: GitHubSettings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="bad credentials")

        with pytest.raises(TokenExchangeError) as exc_info:
            _exchanger(handler).exchange_code_for_token("the-code", settings)
        assert "test-client-secret" not in str(exc_info.value)
