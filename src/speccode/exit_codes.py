"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~speccode.exceptions.SpeccodeError` subclass.
Shell wrappers and CI jobs can inspect the exit code to tell a missing
project file apart from a failed sync without parsing stderr.

Example::

    $ speccode update
    $ echo $?
    9   # EXIT_SYNC_FAILURE -- at least one target errored or failed to write
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The remote service rejected the configured token."""

EXIT_NOT_FOUND = 4
"""The requested organization, application, version or generator was not found."""

EXIT_SERVER_ERROR = 5
"""The remote service returned an unexpected error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CONFLICT = 8
"""The remote service reported validation errors (HTTP 409 / 422)."""

EXIT_SYNC_FAILURE = 9
"""``update`` finished, but some targets errored or some files could not be written."""
