"""Canonical Pydantic models shared across all hubauth modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- loaded once at startup (or per request) and
never mutated afterwards:
    :class:`ProviderConfig` and :class:`Display`.

**Flow models** -- created and discarded within a single callback
invocation:
    :class:`AccessToken`, :class:`RawProfile`, and
    :class:`NormalizedIdentity`.

All models use Pydantic v2. Configuration and identity models are frozen so
they can be shared between concurrent callbacks without locking.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationInfo,
    field_validator,
    model_validator,
)

DEFAULT_API_URL = "https://api.github.com/"
DEFAULT_WEB_URL = "https://github.com/"


# --- Configuration ---


class ProviderConfig(BaseModel):
    """GitHub OAuth App settings.

    ``client_id`` and ``client_secret`` are held as :class:`~pydantic.SecretStr`
    so they are masked in ``repr()``, logs and ``model_dump(mode="json")``.
    Base URLs always end with ``/``; an empty value falls back to the public
    github.com endpoints.

    Example::

        ProviderConfig(
            enabled=True,
            client_id="Iv1.0123456789abcdef",
            client_secret="s3cr3t",
            api_base_url="https://github.example.com/api/v3",
            web_base_url="https://github.example.com",
            token_url="https://github.example.com/login/oauth/access_token",
        )

    Raises:
        pydantic.ValidationError: If ``enabled`` is true and the client id or
            secret is empty, or ``timeout`` is not positive.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    client_id: SecretStr = Field(default=SecretStr(""))
    client_secret: SecretStr = Field(default=SecretStr(""))
    api_base_url: str = Field(
        default=DEFAULT_API_URL, description="Base URL of the GitHub REST API"
    )
    web_base_url: str = Field(
        default=DEFAULT_WEB_URL, description="Base URL of the GitHub web UI"
    )
    allow_users_to_sign_up: bool = Field(
        default=True,
        description="Whether unknown GitHub users may create a local account",
    )
    timeout: float = Field(
        default=30.0, gt=0, description="Per-request timeout in seconds"
    )
    scopes: tuple[str, ...] = ("user:email",)
    token_url: Optional[str] = Field(
        default=None, description="Explicit token endpoint (overrides the base URL)"
    )

    @field_validator("api_base_url", "web_base_url", mode="before")
    @classmethod
    def _normalize_base_url(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        if isinstance(value, str):
            value = value.strip()
            if not value.endswith("/"):
                value += "/"
        return value

    @model_validator(mode="after")
    def _require_credentials_when_enabled(self) -> ProviderConfig:
        if self.enabled:
            missing = [
                name
                for name in ("client_id", "client_secret")
                if not getattr(self, name).get_secret_value().strip()
            ]
            if missing:
                raise ValueError(
                    "GitHub authentication is enabled but "
                    f"{' and '.join(missing)} is not set"
                )
        return self


class Display(BaseModel):
    """How a host renders the "Log in with GitHub" button."""

    model_config = ConfigDict(frozen=True)

    icon_path: str
    background_color: str


# --- Flow models ---


class AccessToken(BaseModel):
    """Credential returned by the token endpoint.

    Lives only for the duration of one callback. ``value`` is excluded from
    ``repr()`` so a token never ends up in a log line by accident.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(min_length=1, repr=False)
    scope: Optional[str] = None
    token_type: Optional[str] = None


class RawProfile(BaseModel):
    """The subset of ``GET /user`` that hubauth reads.

    Every other field GitHub returns (``id``, ``avatar_url``, ...) is
    dropped. ``login`` is optional here; its absence is reported by
    :func:`~hubauth.auth.identity.map_to_identity`.
    """

    model_config = ConfigDict(extra="ignore")

    login: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class NormalizedIdentity(BaseModel):
    """Provider-agnostic user record handed to the host for authentication."""

    model_config = ConfigDict(frozen=True)

    login: str = Field(min_length=1, description="GitHub login with the @github suffix")
    name: str = Field(min_length=1)
    email: Optional[str] = None
