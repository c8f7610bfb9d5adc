"""Exception hierarchy for speccode.

All exceptions inherit from :class:`SpeccodeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`speccode.exit_codes`.
The top-level error handler in :func:`speccode.app.main` catches
``SpeccodeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    SpeccodeError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- ConflictError       (exit 8)
    +-- SyncError           (exit 9)
    +-- ConfigError         (exit 1)
        +-- ConfigurationMissingError (exit 1)
"""

from __future__ import annotations

from typing import Optional

from speccode.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFLICT,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SYNC_FAILURE,
)


class SpeccodeError(Exception):
    """Base exception for all speccode errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`speccode.exit_codes`. The entry point catches
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


class InvalidUsageError(SpeccodeError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(SpeccodeError):
    """Raised when the remote service answers 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(SpeccodeError):
    """Raised when the remote service returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(SpeccodeError):
    """Raised for any other unexpected error status from the remote service.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code, when one was received.
        body: The raw response body, kept for diagnostics.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ConnectionError_(SpeccodeError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConflictError(SpeccodeError):
    """Raised when the remote service rejects a request with validation errors.

    Args:
        messages: The individual validation messages returned by the server.
    """

    exit_code = EXIT_CONFLICT

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages) or "Validation failed")


class SyncError(SpeccodeError):
    """Raised after ``update`` when some targets errored or some writes failed."""

    exit_code = EXIT_SYNC_FAILURE


class ConfigError(SpeccodeError):
    """Raised for configuration problems (invalid JSON/YAML, missing profiles, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class ConfigurationMissingError(ConfigError):
    """Raised when the project configuration file does not exist."""
