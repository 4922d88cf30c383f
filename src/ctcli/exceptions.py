"""Exception hierarchy for ctcli.

All exceptions inherit from :class:`CtcliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ctcli.exit_codes`.
The client layer raises these to its immediate caller and never recovers
locally. The top-level error handler in :func:`ctcli.app.main` catches
``CtcliError`` and exits with the appropriate code.

Subclass hierarchy::

    CtcliError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigurationError  (exit 3)
    +-- EncodingError       (exit 7)
    +-- TransportError      (exit 6)
    +-- DecodingError       (exit 9)
    +-- ServerError         (exit 5)
        +-- AuthError       (exit 4)
        +-- NotFoundError   (exit 8)
"""

from ctcli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODING_ERROR,
    EXIT_ENCODING_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class CtcliError(Exception):
    """Base exception for all ctcli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`ctcli.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CtcliError):
    """Raised for invalid CLI arguments (e.g. a ``--data`` value that is not JSON)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(CtcliError):
    """Raised for missing credentials, a malformed address, or bad config values."""

    exit_code = EXIT_CONFIG_ERROR


class EncodingError(CtcliError):
    """Raised when an outgoing payload cannot be encoded as JSON."""

    exit_code = EXIT_ENCODING_ERROR


class TransportError(CtcliError):
    """Raised on network-level failures (timeout, DNS, TLS handshake, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class DecodingError(CtcliError):
    """Raised when a response body that should be JSON cannot be parsed."""

    exit_code = EXIT_DECODING_ERROR


class ServerError(CtcliError):
    """Raised when the appliance answers with a non-success HTTP status.

    The message has the form ``status: <code>, body: <raw body>`` so the
    appliance's own diagnostic text reaches the operator verbatim.

    Args:
        status_code: The HTTP status code of the response.
        body: The raw response body, decoded as text.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, status_code: int, body: str):
        super().__init__(f"status: {status_code}, body: {body}")
        self.status_code = status_code
        self.body = body


class AuthError(ServerError):
    """Raised when the appliance answers HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ServerError):
    """Raised when the appliance answers HTTP 404."""

    exit_code = EXIT_NOT_FOUND


def error_for_status(status_code: int, body: str) -> ServerError:
    """Build the :class:`ServerError` subclass matching *status_code*."""
    if status_code in (401, 403):
        return AuthError(status_code, body)
    if status_code == 404:
        return NotFoundError(status_code, body)
    return ServerError(status_code, body)
