"""Host-facing contracts of the authentication flow.

This module defines what hubauth expects from the host web application and
what the host can expect from a provider:

- :class:`CallbackRequest` -- the inbound callback request. Starlette and
  FastAPI ``Request`` objects satisfy it as-is.
- :class:`CallbackContext` -- capabilities the host lends to
  :meth:`IdentityProvider.callback` (CSRF check, login, redirect).
- :class:`InitContext` -- capabilities lent to :meth:`IdentityProvider.init`
  (CSRF state generation, callback URL, redirect).
- :class:`IdentityProvider` -- the abstract base class a provider extends.

Contexts are structural (:class:`typing.Protocol`); test doubles implement
the methods directly and record the calls.

See Also:
    :class:`hubauth.auth.provider.GitHubIdentityProvider` for the GitHub
    implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Protocol, runtime_checkable

from hubauth.models import Display, NormalizedIdentity


@runtime_checkable
class CallbackRequest(Protocol):
    """The inbound ``GET /oauth/callback/github?code=...&state=...`` request."""

    @property
    def query_params(self) -> Mapping[str, str]: ...


@runtime_checkable
class CallbackContext(Protocol):
    """Capabilities the host provides for one callback invocation.

    Any exception raised by these methods aborts the flow and propagates
    unchanged to the caller of
    :meth:`~IdentityProvider.callback`.
    """

    def verify_csrf_state(self) -> None:
        """Check the callback's ``state`` against the one issued by :meth:`InitContext.generate_csrf_state`."""
        ...

    def get_request(self) -> CallbackRequest: ...

    def authenticate(self, identity: NormalizedIdentity) -> None:
        """Log the user in as *identity* (create or update the local account)."""
        ...

    def redirect_to_requested_page(self) -> None:
        """Send the browser back to the page it asked for before login."""
        ...


@runtime_checkable
class InitContext(Protocol):
    """Capabilities the host provides when a user clicks "Log in with GitHub"."""

    def generate_csrf_state(self) -> str:
        """Create, remember, and return a fresh CSRF state value."""
        ...

    def get_callback_url(self) -> str: ...

    def redirect_to(self, url: str) -> None: ...


class IdentityProvider(ABC):
    """Abstract base class for OAuth2 identity providers.

    Hosts register a provider under its :attr:`key`, show a login button
    using :attr:`name` and :attr:`display`, start the flow with
    :meth:`init`, and finish it with :meth:`callback`.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """Stable identifier, used in routes such as ``/oauth/callback/{key}``."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""
        ...

    @property
    @abstractmethod
    def display(self) -> Display: ...

    @abstractmethod
    def is_enabled(self) -> bool: ...

    @abstractmethod
    def allows_users_to_sign_up(self) -> bool:
        """Whether a first login may create a local account."""
        ...

    @abstractmethod
    def init(self, context: InitContext) -> None:
        """Start the flow by redirecting the browser to the provider."""
        ...

    @abstractmethod
    def callback(self, context: CallbackContext) -> NormalizedIdentity:
        """Finish the flow for the provider's redirect back to the host.

        Returns:
            The identity that was passed to ``context.authenticate``.
        """
        ...
