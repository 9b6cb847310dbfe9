"""Maps a GitHub profile to the local identity handed to the host."""

from __future__ import annotations

from hubauth.exceptions import MappingError
from hubauth.models import NormalizedIdentity, RawProfile

LOGIN_SUFFIX = "@github"
"""Namespace appended to every GitHub login so it cannot collide with
logins coming from other identity providers."""


def map_to_identity(raw: RawProfile) -> NormalizedIdentity:
    """Derive a :class:`~hubauth.models.NormalizedIdentity` from *raw*.

    * ``login`` is ``raw.login`` followed by :data:`LOGIN_SUFFIX`, always.
    * ``name`` is ``raw.name`` when non-empty, otherwise ``raw.login``.
    * ``email`` is ``raw.email`` or ``None``.

    Raises:
        MappingError: If ``raw.login`` is missing or empty.
    """
    login = raw.login
    if not login:
        raise MappingError("GitHub profile has no login")
    return NormalizedIdentity(
        login=login + LOGIN_SUFFIX,
        name=raw.name or login,
        email=raw.email or None,
    )
