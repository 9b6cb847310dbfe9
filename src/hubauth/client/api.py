"""GitHub endpoint shapes.

:class:`GitHubApi` knows where GitHub's OAuth and REST endpoints live and
what each request looks like on the wire. It does not send anything;
:mod:`hubauth.client.token` and :mod:`hubauth.client.profile` hand the
:class:`httpx.Request` objects it builds to an :class:`httpx.Client`.

Both base URLs come from :class:`~hubauth.settings.GitHubSettings`, so the
same code serves github.com, GitHub Enterprise Server, or a local stand-in
used by tests.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx

from hubauth.models import DEFAULT_API_URL
from hubauth.settings import GitHubSettings

AUTHORIZE_PATH = "login/oauth/authorize"
TOKEN_PATH = "login/oauth/access_token"
PROFILE_PATH = "user"


class GitHubApi:
    """Endpoint URLs and request builders for one GitHub deployment.

    Args:
        settings: Settings supplying the base URLs and client credentials.

    Example::

        api = GitHubApi(settings)
        request = api.build_token_request("the-code")
        # POST https://github.com/login/oauth/access_token?client_id=...
    """

    def __init__(self, settings: GitHubSettings) -> None:
        self._settings = settings

    @property
    def token_endpoint(self) -> str:
        """URL of the code-for-token exchange.

        github.com serves OAuth on the web host rather than on
        ``api.github.com``; any other API base URL serves it under the API
        base. GitHub Enterprise also serves OAuth on the web host, so its
        settings carry an explicit ``token_url``.
        """
        override = self._settings.token_url()
        if override:
            return override
        api_url = self._settings.api_base_url()
        if api_url == DEFAULT_API_URL:
            return self._settings.web_base_url() + TOKEN_PATH
        return api_url + TOKEN_PATH

    @property
    def profile_endpoint(self) -> str:
        return self._settings.api_base_url() + PROFILE_PATH

    def authorization_url(self, state: str, callback_url: str) -> str:
        """Build the URL the user's browser is sent to for consent.

        Args:
            state: CSRF state generated by the host for this flow.
            callback_url: Where GitHub redirects back with ``code`` and
                ``state``.
        """
        params = {
            "client_id": self._settings.client_id(),
            "redirect_uri": callback_url,
            "scope": " ".join(self._settings.scopes()),
            "state": state,
        }
        return f"{self._settings.web_base_url()}{AUTHORIZE_PATH}?{urlencode(params)}"

    def build_token_request(self, code: str) -> httpx.Request:
        """Build the ``POST`` that trades *code* for an access token.

        Credentials and code travel as query parameters. No ``Accept`` JSON
        header is sent, so GitHub answers in its default
        ``application/x-www-form-urlencoded`` text format.
        """
        return httpx.Request(
            "POST",
            self.token_endpoint,
            params={
                "client_id": self._settings.client_id(),
                "client_secret": self._settings.client_secret(),
                "code": code,
            },
            headers={"Accept": "text/plain"},
            extensions=self._timeout_extension(),
        )

    def build_profile_request(self, access_token: str) -> httpx.Request:
        """Build the authenticated ``GET /user`` request."""
        return httpx.Request(
            "GET",
            self.profile_endpoint,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            extensions=self._timeout_extension(),
        )

    def _timeout_extension(self) -> dict[str, object]:
        # Requests built outside a client carry no timeout unless set here.
        return {"timeout": httpx.Timeout(self._settings.timeout()).as_dict()}
