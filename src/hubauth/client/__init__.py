"""HTTP side of the GitHub OAuth2 flow.

Provides the endpoint shapes (:class:`GitHubApi`), the code-for-token
exchange (:class:`TokenExchanger`) and the profile fetch
(:class:`ProfileFetcher`). All of them use a caller-owned
:class:`httpx.Client`, so tests can inject an :class:`httpx.MockTransport`.
"""

from hubauth.client.api import GitHubApi
from hubauth.client.profile import ProfileFetcher
from hubauth.client.token import (
    TokenExchanger,
    TokenParser,
    parse_form_encoded_token,
    parse_json_token,
)

__all__ = [
    "GitHubApi",
    "ProfileFetcher",
    "TokenExchanger",
    "TokenParser",
    "parse_form_encoded_token",
    "parse_json_token",
]
