"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~vaultcache.exceptions.VaultCacheError` subclass.

Example::

    $ vaultcache cache install
    $ echo $?
    7   # EXIT_INSTALL_FAILURE -- a manifest asset could not be fetched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The backend returned an HTTP 5xx error (including the synthesized offline 503)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_INSTALL_FAILURE = 7
"""The static asset manifest could not be fetched; the new version was not installed."""

EXIT_PUSH_PAYLOAD_ERROR = 8
"""A push message payload was not valid JSON."""
