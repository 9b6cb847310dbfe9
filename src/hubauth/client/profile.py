"""Fetches the authenticated user's GitHub profile."""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from hubauth.client.api import GitHubApi
from hubauth.exceptions import ProfileFetchError
from hubauth.models import AccessToken, RawProfile
from hubauth.settings import GitHubSettings

logger = logging.getLogger(__name__)


class ProfileFetcher:
    """Sends ``GET /user`` with the access token and parses the JSON answer.

    Args:
        http_client: Client used to send the request. Owned by the caller.
    """

    def __init__(self, http_client: httpx.Client) -> None:
        self._http = http_client

    def fetch_profile(self, token: AccessToken, settings: GitHubSettings) -> RawProfile:
        """Fetch the profile of the user *token* belongs to.

        Unknown fields are ignored. A missing ``name`` or ``email`` is kept
        as ``None``; a missing ``login`` is left for the identity mapper to
        report.

        Raises:
            ProfileFetchError: On transport errors, timeouts, non-2xx
                statuses, a body that is not a JSON object, or fields of the
                wrong type.
        """
        api = GitHubApi(settings)
        endpoint = api.profile_endpoint
        logger.debug("Fetching GitHub profile from %s", endpoint)
        try:
            response = self._http.send(api.build_profile_request(token.value))
        except httpx.HTTPError as exc:
            logger.warning("Profile fetch from %s failed: %s", endpoint, type(exc).__name__)
            raise ProfileFetchError.from_transport(endpoint, exc) from exc

        if not response.is_success:
            logger.warning(
                "Profile fetch from %s failed: status=%d", endpoint, response.status_code
            )
            logger.debug("Profile error body: %s", response.text[:200])
            raise ProfileFetchError(
                f"Profile fetch failed with status {response.status_code}"
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.debug("Non-JSON profile body: %s", response.text[:200])
            raise ProfileFetchError("Profile response is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ProfileFetchError("Profile response is not a JSON object")

        try:
            return RawProfile.model_validate(data)
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
            raise ProfileFetchError(f"Profile response has invalid fields: {fields}") from exc
