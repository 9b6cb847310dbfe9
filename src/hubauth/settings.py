"""GitHub settings: typed read-only accessor, loading, and persistence.

This module handles all configuration for hubauth:

* **Accessor** -- :class:`GitHubSettings` is the read-only view the rest of
  the package uses. It never mutates the underlying
  :class:`~hubauth.models.ProviderConfig`.
* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.hubauth/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Loading** -- :func:`load_provider_config` merges the JSON settings file
  with ``HUBAUTH_*`` environment variables (environment wins).
* **Credential resolution** -- :func:`resolve_credential` reads secrets from
  env vars or files so that the settings file need not contain them.

Writes use an atomic temp-file-then-rename strategy (:func:`_atomic_write`)
and restrict the file to its owner, since it may hold the client secret.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from hubauth.exceptions import ConfigurationError
from hubauth.models import ProviderConfig

_APP_NAME = "hubauth"
_SETTINGS_FILENAME = "github.json"

ENV_PREFIX = "HUBAUTH_"

_ENV_FIELDS: dict[str, str] = {
    "ENABLED": "enabled",
    "CLIENT_ID": "client_id",
    "CLIENT_SECRET": "client_secret",
    "API_URL": "api_base_url",
    "WEB_URL": "web_base_url",
    "ALLOW_USERS_TO_SIGN_UP": "allow_users_to_sign_up",
    "TIMEOUT": "timeout",
    "TOKEN_URL": "token_url",
}

_SOURCE_KEYS: dict[str, str] = {
    "client_id_source": "client_id",
    "client_secret_source": "client_secret",
}


class GitHubSettings:
    """Typed, read-only view over a :class:`~hubauth.models.ProviderConfig`.

    Construct one per process (or per request) and pass it explicitly to the
    components that need it. All methods are pure reads.

    Args:
        config: The validated provider configuration.
    """

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def is_enabled(self) -> bool:
        return self._config.enabled

    def client_id(self) -> str:
        """Return the OAuth App client id.

        Raises:
            ConfigurationError: If authentication is enabled but the client id
                is empty.
        """
        return self._required_secret("client_id")

    def client_secret(self) -> str:
        """Return the OAuth App client secret.

        Raises:
            ConfigurationError: If authentication is enabled but the client
                secret is empty.
        """
        return self._required_secret("client_secret")

    def api_base_url(self) -> str:
        return self._config.api_base_url

    def web_base_url(self) -> str:
        return self._config.web_base_url

    def allow_users_to_sign_up(self) -> bool:
        return self._config.allow_users_to_sign_up

    def timeout(self) -> float:
        return self._config.timeout

    def scopes(self) -> tuple[str, ...]:
        return self._config.scopes

    def token_url(self) -> Optional[str]:
        return self._config.token_url

    def _required_secret(self, field: str) -> str:
        value = getattr(self._config, field).get_secret_value()
        if self._config.enabled and not value.strip():
            raise ConfigurationError(
                f"GitHub authentication is enabled but {field} is not set"
            )
        return value


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: Path, fallback: Path) -> Path:
    """Pick the XDG location on Linux/BSD and *fallback* elsewhere, then create it."""
    if _is_xdg_platform():
        root = os.environ.get(xdg_var) or xdg_default
        path = Path(root) / _APP_NAME
    else:
        path = fallback
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding the settings file.

    ``$XDG_CONFIG_HOME/hubauth`` (default ``~/.config/hubauth``) on Linux and
    BSD, ``~/.hubauth`` on macOS and Windows.
    """
    home = Path.home()
    return _app_dir("XDG_CONFIG_HOME", home / ".config", home / f".{_APP_NAME}")


def get_data_dir() -> Path:
    """Directory for crash logs.

    ``$XDG_DATA_HOME/hubauth`` (default ``~/.local/share/hubauth``) on Linux
    and BSD, ``~/.hubauth/logs`` on macOS and Windows.
    """
    home = Path.home()
    return _app_dir(
        "XDG_DATA_HOME", home / ".local" / "share", home / f".{_APP_NAME}" / "logs"
    )


def default_settings_path() -> Path:
    return get_config_dir() / _SETTINGS_FILENAME


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one step.

    The content goes to a sibling temp file, created ``0600`` because it may
    hold the client secret, and is renamed over *path* once flushed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp:
            os.chmod(tmp.name, 0o600)
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise


# --- Credential sources ---


def resolve_credential(source: str) -> str:
    """Read a secret from where *source* points.

    ``env:NAME`` returns the environment variable ``NAME``; ``file:PATH``
    returns the file's content without surrounding whitespace (``~`` is
    expanded).

    Raises:
        ConfigurationError: For an unset variable, an unreadable file, or
            any other prefix.
    """
    kind, _, target = source.partition(":")
    if kind == "env":
        if target not in os.environ:
            raise ConfigurationError(f"Environment variable '{target}' is not set ({source})")
        return os.environ[target]

    if kind == "file":
        path = Path(target).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"Credential file not found: {path} ({source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc

    raise ConfigurationError(f"Unknown credential source format: {source}")


# --- Loading ---


def read_settings_file(path: Path) -> dict[str, Any]:
    """Return the raw settings mapping stored at *path* (empty if absent).

    Raises:
        ConfigurationError: If the file is not a JSON object.
    """
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigurationError(f"Invalid settings file at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid settings file at {path}: expected a JSON object")
    return data


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for suffix, field in _ENV_FIELDS.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if value is not None:
            overrides[field] = value
    return overrides


def build_provider_config(data: dict[str, Any]) -> ProviderConfig:
    """Validate a settings mapping into a :class:`ProviderConfig`.

    ``client_id_source`` / ``client_secret_source`` keys are resolved with
    :func:`resolve_credential` unless the literal value is also present.

    Raises:
        ConfigurationError: On unresolvable sources or failed validation.
    """
    data = dict(data)
    for source_key, field in _SOURCE_KEYS.items():
        source = data.pop(source_key, None)
        if source and not data.get(field):
            data[field] = resolve_credential(source)
    try:
        return ProviderConfig.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(err["msg"] for err in exc.errors())
        raise ConfigurationError(f"Invalid GitHub settings: {details}") from exc


def load_provider_config(path: Optional[Path] = None) -> ProviderConfig:
    """Load the GitHub settings.

    Precedence (high to low):
        1. ``HUBAUTH_*`` environment variables
        2. The settings file (*path*, default :func:`default_settings_path`)
        3. Model defaults (authentication disabled, public github.com URLs)

    Args:
        path: Optional explicit settings file.

    Returns:
        The validated, frozen configuration.

    Raises:
        ConfigurationError: If the file is not valid JSON, a credential source
            cannot be resolved, or validation fails.
    """
    data = read_settings_file(path or default_settings_path())
    data.update(_env_overrides())
    return build_provider_config(data)


def write_settings_file(data: dict[str, Any], path: Optional[Path] = None) -> Path:
    """Persist a raw settings mapping atomically and return the file path.

    The mapping is written as given, so credential sources stay sources
    rather than being replaced by the secrets they resolve to.
    """
    target = path or default_settings_path()
    _atomic_write(target, json.dumps(data, indent=2) + "\n")
    return target


def load_settings(path: Optional[Path] = None) -> GitHubSettings:
    """Shortcut for ``GitHubSettings(load_provider_config(path))``."""
    return GitHubSettings(load_provider_config(path))
