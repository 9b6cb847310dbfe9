"""Authorization code to access token exchange.

GitHub does not answer the token request with JSON by default but with
``application/x-www-form-urlencoded`` text, for example::

    access_token=e72e16c7e42f292c6912e7710c838347ae178b4a&scope=user%2Cgist&token_type=bearer

:func:`parse_form_encoded_token` turns that body into an
:class:`~hubauth.models.AccessToken`. :class:`TokenExchanger` accepts any
callable with the same signature, so a deployment that answers with JSON
only needs :func:`parse_json_token` instead.

A bad or expired code is answered with HTTP 200 and an ``error`` field,
which is reported as a :class:`~hubauth.exceptions.TokenExchangeError`.
"""

from __future__ import annotations

import json
import logging
from typing import Callable
from urllib.parse import unquote_plus

import httpx
from pydantic import ValidationError

from hubauth.client.api import GitHubApi
from hubauth.exceptions import MissingCodeError, TokenExchangeError
from hubauth.models import AccessToken
from hubauth.settings import GitHubSettings

logger = logging.getLogger(__name__)

TokenParser = Callable[[str], AccessToken]
"""Turns a token endpoint response body into an :class:`AccessToken`."""


def parse_form_encoded_token(body: str) -> AccessToken:
    """Parse GitHub's ``key=value&key=value`` token response.

    Pairs are split on ``&`` and then on the first ``=``; values are
    URL-decoded. Field order is irrelevant and unknown fields are ignored.

    Raises:
        TokenExchangeError: If GitHub reported an ``error`` or
            ``access_token`` is missing or empty.
    """
    fields: dict[str, str] = {}
    for pair in body.strip().split("&"):
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        if not sep:
            continue
        fields[unquote_plus(key)] = unquote_plus(value)
    return _token_from_fields(fields)


def parse_json_token(body: str) -> AccessToken:
    """Parse a JSON token response (``Accept: application/json`` style).

    Raises:
        TokenExchangeError: If the body is not a JSON object, carries an
            ``error``, or lacks ``access_token``.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise TokenExchangeError("Token response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise TokenExchangeError("Token response is not a JSON object")
    fields = {str(k): str(v) for k, v in data.items() if v is not None}
    return _token_from_fields(fields)


def _token_from_fields(fields: dict[str, str]) -> AccessToken:
    if "error" in fields:
        message = f"GitHub rejected the authorization code: {fields['error']}"
        description = fields.get("error_description")
        if description:
            message += f" ({description})"
        raise TokenExchangeError(message)

    value = fields.get("access_token", "")
    if not value:
        raise TokenExchangeError("Token response missing 'access_token' field")

    return AccessToken(
        value=value,
        scope=fields.get("scope"),
        token_type=fields.get("token_type"),
    )


class TokenExchanger:
    """Performs the single code-for-token request of a callback.

    There are no retries: a failed exchange fails the authentication
    attempt, and the user restarts from the authorize URL.

    Args:
        http_client: Client used to send the request. Owned by the caller.
        parser: Body parser, :func:`parse_form_encoded_token` by default.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        parser: TokenParser = parse_form_encoded_token,
    ) -> None:
        self._http = http_client
        self._parser = parser

    def exchange_code_for_token(self, code: str, settings: GitHubSettings) -> AccessToken:
        """Exchange *code* for an access token.

        Args:
            code: The authorization code from the callback.
            settings: Settings in effect for this flow. Endpoint URLs and
                credentials come from here.

        Returns:
            The parsed :class:`~hubauth.models.AccessToken`.

        Raises:
            MissingCodeError: If *code* is empty.
            ConfigurationError: If the client id or secret is missing.
            TokenExchangeError: On transport errors, timeouts, non-2xx
                statuses, or an unusable body.
        """
        if not code:
            raise MissingCodeError("Authorization code is empty")
        api = GitHubApi(settings)
        request = api.build_token_request(code)
        endpoint = api.token_endpoint
        logger.debug("Exchanging authorization code at %s", endpoint)
        try:
            response = self._http.send(request)
        except httpx.HTTPError as exc:
            logger.warning("Token exchange with %s failed: %s", endpoint, type(exc).__name__)
            raise TokenExchangeError.from_transport(endpoint, exc) from exc

        if not response.is_success:
            logger.warning(
                "Token exchange with %s failed: status=%d", endpoint, response.status_code
            )
            raise TokenExchangeError(
                f"Token exchange failed with status {response.status_code}"
            )

        try:
            token = self._parser(response.text)
        except ValidationError as exc:
            raise TokenExchangeError("Token response could not be parsed") from exc
        logger.debug(
            "Access token obtained (type=%s, scope=%s)", token.token_type, token.scope
        )
        return token
