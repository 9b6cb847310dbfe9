"""GitHub identity provider: the entry points of the OAuth2 flow.

:class:`GitHubIdentityProvider` implements the two legs a host drives:

1. :meth:`~GitHubIdentityProvider.init` -- redirect the browser to
   GitHub's authorize page with a fresh CSRF state.
2. :meth:`~GitHubIdentityProvider.callback` -- when GitHub redirects back:

   a. verify the CSRF state (host),
   b. read ``code`` from the callback request,
   c. exchange it for an access token,
   d. fetch the user profile,
   e. map the profile to a :class:`~hubauth.models.NormalizedIdentity`,
   f. log the user in (host),
   g. redirect to the originally requested page (host).

Any failure stops the sequence: no later request is sent and no identity
is asserted. Errors raised by the host context propagate unchanged;
everything else is a :class:`~hubauth.exceptions.HubauthError`.

Each callback opens its own :class:`httpx.Client` and keeps all state in
local variables, so one provider instance serves concurrent callbacks.

Example::

    provider = GitHubIdentityProvider(load_settings())

    @app.get("/oauth/callback/github")
    def github_callback(request: Request):
        context = StarletteCallbackContext(request)  # host-specific
        try:
            provider.callback(context)
        except AuthenticationError:
            return RedirectResponse("/login?error=github")
        return context.response
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

import httpx

from hubauth.auth.base import CallbackContext, IdentityProvider, InitContext
from hubauth.auth.identity import map_to_identity
from hubauth.client.api import GitHubApi
from hubauth.client.profile import ProfileFetcher
from hubauth.client.token import TokenExchanger, TokenParser, parse_form_encoded_token
from hubauth.exceptions import ConfigurationError, MissingCodeError
from hubauth.models import Display, NormalizedIdentity
from hubauth.settings import GitHubSettings

logger = logging.getLogger(__name__)


class FlowState(str, enum.Enum):
    """Progress of one callback invocation, used in log records."""

    START = "start"
    CSRF_VERIFIED = "csrf_verified"
    TOKEN_OBTAINED = "token_obtained"
    PROFILE_FETCHED = "profile_fetched"
    IDENTITY_ASSERTED = "identity_asserted"
    REDIRECTED = "redirected"
    FAILED = "failed"


class GitHubIdentityProvider(IdentityProvider):
    """Log users in with their GitHub account.

    Args:
        settings: Read-only GitHub settings, shared by all callbacks.
        transport: Optional :class:`httpx.BaseTransport` for the per-callback
            clients. Tests pass an :class:`httpx.MockTransport`.
        token_parser: Token response parser; GitHub's form-encoded format
            by default.
    """

    DISPLAY = Display(icon_path="/static/authgithub/github.svg", background_color="#444444")

    def __init__(
        self,
        settings: GitHubSettings,
        transport: Optional[httpx.BaseTransport] = None,
        token_parser: TokenParser = parse_form_encoded_token,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._token_parser = token_parser

    @property
    def key(self) -> str:
        return "github"

    @property
    def name(self) -> str:
        return "GitHub"

    @property
    def display(self) -> Display:
        return self.DISPLAY

    def is_enabled(self) -> bool:
        return self._settings.is_enabled()

    def allows_users_to_sign_up(self) -> bool:
        return self._settings.allow_users_to_sign_up()

    def init(self, context: InitContext) -> None:
        """Redirect the browser to GitHub's authorize page.

        Raises:
            ConfigurationError: If GitHub authentication is disabled or the
                client id is missing.
        """
        self._require_enabled()
        state = context.generate_csrf_state()
        url = GitHubApi(self._settings).authorization_url(state, context.get_callback_url())
        logger.debug("Redirecting to GitHub authorize page")
        context.redirect_to(url)

    def callback(self, context: CallbackContext) -> NormalizedIdentity:
        """Complete the flow for GitHub's redirect back to the host.

        Args:
            context: Host capabilities for this request.

        Returns:
            The identity passed to ``context.authenticate``.

        Raises:
            ConfigurationError: If GitHub authentication is disabled or the
                client credentials are missing.
            MissingCodeError: If the request has no ``code`` parameter.
            TokenExchangeError: If the token exchange fails.
            ProfileFetchError: If the profile fetch fails.
            MappingError: If the profile has no login.
        """
        self._require_enabled()
        state = FlowState.START
        try:
            context.verify_csrf_state()
            state = FlowState.CSRF_VERIFIED
            logger.debug("GitHub callback: %s", state.value)

            code = self._read_code(context)
            with self._http_client() as http:
                token = TokenExchanger(http, self._token_parser).exchange_code_for_token(
                    code, self._settings
                )
                state = FlowState.TOKEN_OBTAINED
                logger.debug("GitHub callback: %s", state.value)

                raw = ProfileFetcher(http).fetch_profile(token, self._settings)
                state = FlowState.PROFILE_FETCHED
                logger.debug("GitHub callback: %s", state.value)

            identity = map_to_identity(raw)
            context.authenticate(identity)
            state = FlowState.IDENTITY_ASSERTED
            logger.info("Authenticated GitHub user %s", identity.login)

            context.redirect_to_requested_page()
            state = FlowState.REDIRECTED
            logger.debug("GitHub callback: %s", state.value)
        except Exception as exc:
            logger.warning(
                "GitHub callback %s after %s: %s",
                FlowState.FAILED.value,
                state.value,
                type(exc).__name__,
            )
            raise
        return identity

    def _require_enabled(self) -> None:
        if not self._settings.is_enabled():
            raise ConfigurationError("GitHub authentication is disabled")

    def _read_code(self, context: CallbackContext) -> str:
        code = context.get_request().query_params.get("code")
        if not code:
            raise MissingCodeError("Callback request has no 'code' parameter")
        return code

    def _http_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._settings.timeout(),
            transport=self._transport,
        )
