"""Exception hierarchy for hubauth.

All exceptions inherit from :class:`HubauthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`hubauth.exit_codes`.
Library callers catch :class:`AuthenticationError` around
:meth:`~hubauth.auth.provider.GitHubIdentityProvider.callback` to leave the
user unauthenticated; the CLI entry point :func:`hubauth.app.main` catches
``HubauthError`` and exits with the appropriate code.

Messages are safe to show to end users: they never include the client
secret or an access token.

Subclass hierarchy::

    HubauthError                (exit 1)
    +-- ConfigurationError      (exit 1)
    +-- AuthenticationError     (exit 3)
        +-- MissingCodeError
        +-- TokenExchangeError  (exit 6 on transport failure)
        +-- ProfileFetchError   (exit 6 on transport failure)
        +-- MappingError
"""

from hubauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
)


class HubauthError(Exception):
    """Base exception for all hubauth errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`hubauth.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(HubauthError):
    """Raised for missing or invalid settings (e.g. enabled without a client secret)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthenticationError(HubauthError):
    """Base class for failures of a single authentication attempt.

    The attempt is abandoned and the user stays unauthenticated. None of
    these errors is retried by hubauth; the user restarts the flow from the
    authorize URL.
    """

    exit_code = EXIT_AUTH_FAILURE


class MissingCodeError(AuthenticationError):
    """Raised when the callback request carries no ``code`` query parameter."""


class TokenExchangeError(AuthenticationError):
    """Raised when the authorization code cannot be exchanged for an access token."""

    @classmethod
    def from_transport(cls, endpoint: str, exc: Exception) -> "TokenExchangeError":
        return cls(
            f"Token exchange with {endpoint} failed: {type(exc).__name__}",
            exit_code=EXIT_CONNECTION_ERROR,
        )


class ProfileFetchError(AuthenticationError):
    """Raised when the GitHub user profile cannot be fetched or parsed."""

    @classmethod
    def from_transport(cls, endpoint: str, exc: Exception) -> "ProfileFetchError":
        return cls(
            f"Profile fetch from {endpoint} failed: {type(exc).__name__}",
            exit_code=EXIT_CONNECTION_ERROR,
        )


class MappingError(AuthenticationError):
    """Raised when a GitHub profile lacks the ``login`` needed for a local identity."""
