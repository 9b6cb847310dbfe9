"""hubauth -- GitHub OAuth2 login for Python web applications.

This package completes GitHub's three-legged OAuth2 flow on behalf of a host
web application: it verifies the callback (through the host), exchanges the
authorization code for an access token, fetches the GitHub profile, and
hands the host a normalized identity such as ``octocat@github``.

Typical usage::

    from hubauth.auth import GitHubIdentityProvider
    from hubauth.settings import load_settings

    provider = GitHubIdentityProvider(load_settings())
    provider.init(init_context)        # "Log in with GitHub" clicked
    provider.callback(callback_ctx)    # GitHub redirected back

Modules:
    app: Typer application and CLI entry point (``hubauth``).
    auth: Identity provider, host contracts, and identity mapping.
    client: GitHub endpoint shapes, token exchange, and profile fetch.
    models: Pydantic models shared across the package.
    settings: Settings accessor, loading, and persistence.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting for the CLI.
"""

__version__ = "0.1.0"
