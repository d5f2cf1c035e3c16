"""Exception hierarchy for vaultcache.

All exceptions inherit from :class:`VaultCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`vaultcache.exit_codes`.
The top-level error handler in :func:`vaultcache.app.main` catches
``VaultCacheError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    VaultCacheError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- InstallError        (exit 7)
    +-- PushPayloadError    (exit 8)
    +-- ConfigError         (exit 1)

Cache-write failures have no exception class; they never leave the worker.
"""

from vaultcache.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INSTALL_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PUSH_PAYLOAD_ERROR,
    EXIT_SERVER_ERROR,
)


class VaultCacheError(Exception):
    """Base exception for all vaultcache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`vaultcache.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(VaultCacheError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(VaultCacheError):
    """Raised when the backend answers HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(VaultCacheError):
    """Raised when the backend answers HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(VaultCacheError):
    """Raised when the backend (or the offline fallback) answers HTTP 5xx."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(VaultCacheError):
    """Raised on network-level failures that no cache layer recovered from.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class InstallError(VaultCacheError):
    """Raised when a static manifest asset cannot be fetched during install.

    Install is all-or-nothing: when this is raised no entry of the manifest
    has been stored and the previously active worker keeps serving.

    Args:
        message: Human-readable error description.
        path: The manifest path that failed, when known.
    """

    exit_code = EXIT_INSTALL_FAILURE

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class PushPayloadError(VaultCacheError):
    """Raised when a push message carries a payload that is not a JSON object."""

    exit_code = EXIT_PUSH_PAYLOAD_ERROR


class ConfigError(VaultCacheError):
    """Raised for configuration problems (missing profiles, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
