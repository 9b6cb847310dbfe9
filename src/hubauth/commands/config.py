"""Config commands -- view, validate, and modify the GitHub settings.

Provides the ``hubauth config`` sub-command group. Settings live in
``<config_dir>/github.json`` (or the file given with ``--config``) and can be
overridden with ``HUBAUTH_*`` environment variables; ``show`` and ``check``
report the effective result, ``set`` edits the file only.
"""

from __future__ import annotations

import typer

from hubauth.commands import settings_path
from hubauth.exceptions import HubauthError
from hubauth.output import error, info, print_table, success, suggest, warning


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective GitHub settings with secrets masked.

    Example::

        hubauth config show
        hubauth --json config show
    """
    from hubauth.settings import default_settings_path, load_provider_config

    path = settings_path(ctx)
    try:
        config = load_provider_config(path)
    except HubauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Settings file: {path or default_settings_path()}")
    data = config.model_dump(mode="json")
    for secret in ("client_id", "client_secret"):
        if not getattr(config, secret).get_secret_value():
            data[secret] = ""
    rows = [[key, _display(value)] for key, value in data.items()]
    print_table(["setting", "value"], rows, title="GitHub authentication")
    if not config.enabled:
        warning("GitHub authentication is disabled.")


@config_app.command("check")
def config_check(ctx: typer.Context) -> None:
    """Validate the settings and fail unless GitHub authentication is usable.

    Raises:
        typer.Exit: With the error's exit code when the settings are invalid
            or authentication is disabled.

    Example::

        hubauth config check && deploy
    """
    from hubauth.settings import GitHubSettings, load_provider_config

    try:
        settings = GitHubSettings(load_provider_config(settings_path(ctx)))
        if not settings.is_enabled():
            error("GitHub authentication is disabled.")
            suggest("Run: hubauth config set enabled true")
            raise typer.Exit(code=1)
        settings.client_id()
        settings.client_secret()
    except HubauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success("GitHub settings are valid.")


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(help="Setting name, e.g. 'client_id' or 'api_base_url'."),
    value: str = typer.Argument(help="Value to set. Scopes are comma-separated."),
) -> None:
    """Set a value in the settings file.

    The updated settings are validated before saving, so enable
    authentication only after ``client_id`` and ``client_secret`` are set.

    Raises:
        typer.Exit: With code 2 for an unknown key, or the error's exit code
            when validation fails.

    Example::

        hubauth config set client_id Iv1.0123456789abcdef
        hubauth config set client_secret "$GITHUB_CLIENT_SECRET"
        hubauth config set enabled true
    """
    from hubauth.models import ProviderConfig
    from hubauth.settings import (
        build_provider_config,
        default_settings_path,
        read_settings_file,
        write_settings_file,
    )

    if key not in ProviderConfig.model_fields:
        error(f"Unknown setting: {key}")
        suggest(f"Known settings: {', '.join(ProviderConfig.model_fields)}")
        raise typer.Exit(code=2)

    path = settings_path(ctx) or default_settings_path()
    try:
        data = read_settings_file(path)
        if key == "scopes":
            data[key] = [s.strip() for s in value.split(",") if s.strip()]
        else:
            data[key] = value
        build_provider_config(data)
        write_settings_file(data, path)
    except HubauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    shown = "********" if key in ("client_id", "client_secret") else value
    success(f"Set {key} = {shown}")


def _display(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return str(value)
