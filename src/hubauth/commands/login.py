"""Login commands -- exercise the GitHub flow from a terminal.

Provides two root-level commands used to check an OAuth App registration
without deploying the host application:

* ``hubauth authorize-url`` prints the URL that starts the flow.
* ``hubauth login`` runs the whole flow: it opens the browser, receives
  GitHub's redirect on a temporary server bound to ``127.0.0.1``, verifies
  the ``state`` parameter, and prints the resulting identity.

The OAuth App's callback URL must match the one printed by these commands
(``http://127.0.0.1:<port>/callback``); pass ``--port`` to pin it.
"""

from __future__ import annotations

import secrets
import socket
import threading
import webbrowser
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Optional
from urllib.parse import parse_qsl, urlparse

import typer

from hubauth.auth.provider import GitHubIdentityProvider
from hubauth.commands import settings_path
from hubauth.exceptions import AuthenticationError, HubauthError
from hubauth.models import NormalizedIdentity
from hubauth.output import debug, error, format_response, info, print_data, success, suggest


class CsrfStateError(AuthenticationError):
    """Raised when the callback's ``state`` differs from the one we issued."""


class LoopbackInitContext:
    """Init context for a terminal session.

    Uses a random state unless one is given, and either opens the authorize URL in the
    default browser (from a daemon thread, so a slow browser launch never
    blocks the callback server) or just remembers it for printing.
    """

    def __init__(
        self,
        callback_url: str,
        open_browser: bool = True,
        state: Optional[str] = None,
    ) -> None:
        self._callback_url = callback_url
        self._open_browser = open_browser
        self.state = state
        self.authorize_url: Optional[str] = None

    def generate_csrf_state(self) -> str:
        if self.state is None:
            self.state = secrets.token_urlsafe(32)
        return self.state

    def get_callback_url(self) -> str:
        return self._callback_url

    def redirect_to(self, url: str) -> None:
        self.authorize_url = url
        if self._open_browser:
            threading.Thread(target=webbrowser.open, args=(url,), daemon=True).start()


class LoopbackCallbackContext:
    """Callback context backed by the query string the loopback server received."""

    def __init__(self, query_params: dict[str, str], expected_state: str) -> None:
        self.query_params = query_params
        self._expected_state = expected_state
        self.identity: Optional[NormalizedIdentity] = None
        self.redirected = False

    def verify_csrf_state(self) -> None:
        received = self.query_params.get("state", "")
        if not received or not secrets.compare_digest(received, self._expected_state):
            raise CsrfStateError("OAuth state parameter does not match; login aborted")

    def get_request(self) -> LoopbackCallbackContext:
        return self

    def authenticate(self, identity: NormalizedIdentity) -> None:
        self.identity = identity

    def redirect_to_requested_page(self) -> None:
        self.redirected = True


def _find_free_port() -> int:
    """Find a free TCP port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class CallbackServer:
    """Single-request HTTP server on ``127.0.0.1`` that captures the redirect.

    The socket is bound on construction, so the browser can be sent to
    GitHub before :meth:`wait` starts serving.
    """

    def __init__(self, port: int, timeout: float = 120.0) -> None:
        self.port = port
        self.query_params: dict[str, str] = {}
        captured = self.query_params

        class CallbackHandler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                captured.update(parse_qsl(urlparse(self.path).query))
                if "error" in captured:
                    body = f"Authorization failed: {captured['error']}"
                else:
                    body = (
                        "Authorization received. You can close this window "
                        "and return to the terminal."
                    )
                self.send_response(200)
                self.send_header("Content-Type", "text/html; charset=utf-8")
                self.end_headers()
                self.wfile.write(
                    f"<html><body><h2>{body}</h2></body></html>".encode("utf-8")
                )

            def log_message(self, format: str, *args: Any) -> None:
                pass

        self._server = HTTPServer(("127.0.0.1", port), CallbackHandler)
        self._server.timeout = timeout

    @property
    def callback_url(self) -> str:
        return f"http://127.0.0.1:{self.port}/callback"

    def wait(self) -> dict[str, str]:
        """Serve one request (or time out) and return its query parameters."""
        self._server.handle_request()
        return self.query_params

    def close(self) -> None:
        self._server.server_close()

    def __enter__(self) -> CallbackServer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def authorize_url_command(
    ctx: typer.Context,
    callback_url: str = typer.Option(
        ..., "--callback-url", help="Callback URL registered on the OAuth App."
    ),
    state: Optional[str] = typer.Option(
        None, "--state", help="CSRF state to embed (random if omitted)."
    ),
) -> None:
    """Print the GitHub authorize URL that starts the login flow.

    Example::

        hubauth authorize-url --callback-url https://app.example.com/oauth/callback/github
    """
    from hubauth.settings import load_settings

    init_context = LoopbackInitContext(callback_url, open_browser=False, state=state)
    try:
        GitHubIdentityProvider(load_settings(settings_path(ctx))).init(init_context)
    except HubauthError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    assert init_context.authorize_url is not None
    print_data(init_context.authorize_url)
    if not state:
        info(f"state: {init_context.state}")


def login_command(
    ctx: typer.Context,
    port: Optional[int] = typer.Option(
        None, "--port", help="Loopback port for the callback (random if omitted)."
    ),
    timeout: float = typer.Option(
        120.0, "--timeout", help="Seconds to wait for GitHub's redirect."
    ),
    no_browser: bool = typer.Option(
        False, "--no-browser", help="Print the authorize URL instead of opening it."
    ),
) -> None:
    """Log in with GitHub and print the resulting identity.

    Raises:
        typer.Exit: With the error's exit code if any step of the flow fails.

    Example::

        hubauth login --port 8765
    """
    from hubauth.settings import load_settings

    try:
        provider = GitHubIdentityProvider(load_settings(settings_path(ctx)))
        with CallbackServer(port or _find_free_port(), timeout=timeout) as server:
            init_context = LoopbackInitContext(
                server.callback_url, open_browser=not no_browser
            )
            provider.init(init_context)
            if no_browser:
                info("Open this URL in a browser to continue:")
                print_data(init_context.authorize_url or "")
            else:
                info("Waiting for GitHub authorization in your browser...")
            debug(f"Listening on {server.callback_url}")
            query_params = server.wait()

        if not query_params:
            raise AuthenticationError("No callback received before the timeout")
        if "error" in query_params:
            raise AuthenticationError(f"GitHub authorization failed: {query_params['error']}")

        assert init_context.state is not None
        callback_context = LoopbackCallbackContext(query_params, init_context.state)
        identity = provider.callback(callback_context)
    except HubauthError as exc:
        error(str(exc))
        if isinstance(exc, CsrfStateError):
            suggest("Restart the login; do not reuse an old authorize URL.")
        raise typer.Exit(code=exc.exit_code) from None
    except OSError as exc:
        error(f"Cannot listen for the callback: {exc}")
        raise typer.Exit(code=1) from None

    format_response(identity.model_dump(mode="json"))
    success(f"Logged in as {identity.login}")
