"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ctcli.exceptions.CtcliError` subclass.
Shell wrappers can inspect the exit code to tell a rejected login from an
unreachable appliance without parsing stderr.

Example::

    $ ctcli list api/v1/usermgmt/users
    $ echo $?
    4   # EXIT_AUTH_FAILURE -- the appliance answered 401
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""Settings are missing or invalid (no credentials, bad address, bad config file)."""

EXIT_AUTH_FAILURE = 4
"""The appliance rejected the request with HTTP 401 or 403."""

EXIT_SERVER_ERROR = 5
"""The appliance answered with a non-success HTTP status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, TLS failure, connection refused)."""

EXIT_ENCODING_ERROR = 7
"""An outgoing payload could not be encoded as JSON."""

EXIT_NOT_FOUND = 8
"""The requested object does not exist (HTTP 404)."""

EXIT_DECODING_ERROR = 9
"""A response body that should be JSON could not be parsed."""
