"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~hubauth.exceptions.HubauthError` subclass.
Shell wrappers and CI jobs that check an OAuth App registration with
``hubauth login`` can inspect the exit code to tell a misconfiguration from a
rejected login or an unreachable GitHub without parsing stderr.

Example::

    $ hubauth config check
    $ echo $?
    1   # EXIT_GENERIC_FAILURE -- client id or secret missing
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including configuration errors."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The OAuth2 flow was rejected (bad code, bad profile, failed exchange)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred while talking to GitHub (timeout, DNS, refused)."""
