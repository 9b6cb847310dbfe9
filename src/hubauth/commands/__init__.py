"""Built-in CLI sub-commands for hubauth.

* :mod:`~hubauth.commands.config` -- view, validate, and modify the GitHub
  settings file.
* :mod:`~hubauth.commands.login` -- print the authorize URL and run an
  interactive login against a loopback callback server.

Each module exports either a :class:`typer.Typer` sub-application (for
multi-command groups like ``config``) or plain callback functions registered
directly on the root app.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer


def settings_path(ctx: typer.Context) -> Optional[Path]:
    """Return the ``--config`` path stored by the root callback, if any."""
    if ctx.obj and ctx.obj.get("config_path"):
        return Path(ctx.obj["config_path"])
    return None
