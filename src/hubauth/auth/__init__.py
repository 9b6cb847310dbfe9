"""GitHub login flow for host web applications.

The main entry points are:

- :class:`GitHubIdentityProvider` -- starts (:meth:`~GitHubIdentityProvider.init`)
  and completes (:meth:`~GitHubIdentityProvider.callback`) the OAuth2 flow.
- :class:`CallbackContext` / :class:`InitContext` -- what the host web
  application must provide to the provider.
- :func:`map_to_identity` -- the pure GitHub profile to local identity mapping.

Typical usage::

    from hubauth.auth import GitHubIdentityProvider
    from hubauth.settings import load_settings

    provider = GitHubIdentityProvider(load_settings())
    identity = provider.callback(context)
"""

from hubauth.auth.base import CallbackContext, CallbackRequest, IdentityProvider, InitContext
from hubauth.auth.identity import LOGIN_SUFFIX, map_to_identity
from hubauth.auth.provider import FlowState, GitHubIdentityProvider

__all__ = [
    "CallbackContext",
    "CallbackRequest",
    "FlowState",
    "GitHubIdentityProvider",
    "IdentityProvider",
    "InitContext",
    "LOGIN_SUFFIX",
    "map_to_identity",
]
