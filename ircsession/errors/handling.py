from __future__ import annotations

import logging

from ..logging_config import log_structured_error
from .session import (
    AlreadyConnectingError,
    AlreadyJoinedError,
    CommandError,
    ConnectionErrorKind,
    ConnectionFailure,
    NotConnectedError,
    ProtocolError,
    SessionError,
    UnknownChannelError,
)

# Raw error type / message fragments reported by the transport, per kind.
_LOOKUP_MARKERS = ("enotfound", "eai_again", "getaddrinfo", "lookup", "dns")
_REFUSED_MARKERS = ("econnrefused", "connection refused", "connection_refused")
_SOCKET_MARKERS = (
    "socket_error",
    "socket error",
    "econnreset",
    "etimedout",
    "epipe",
    "ehostunreach",
    "enetunreach",
)
_GENERIC_CONNECTION_MARKERS = ("connection", "tls", "ssl", "websocket")


def _matches(haystack: str, markers: tuple[str, ...]) -> bool:
    return any(marker in haystack for marker in markers)


def classify_error(error_type: str, message: str = "") -> SessionError:
    """Classify a raw protocol error record into the session error taxonomy.

    The error type is checked first; the message is only consulted when the
    type alone is not conclusive (transports often report ``"error"`` with the
    errno in the text).

    Args:
        error_type: Error type string as reported by the transport.
        message: Human readable error text.

    Returns:
        A ``ConnectionFailure`` for transport failures, otherwise a
        ``ProtocolError`` carrying the original type as its code.
    """
    kind_text = (error_type or "").lower()
    full_text = f"{kind_text} {(message or '').lower()}"
    text = message or error_type or "Unknown error"

    if _matches(kind_text, _LOOKUP_MARKERS) or _matches(full_text, _LOOKUP_MARKERS[:3]):
        kind = ConnectionErrorKind.LOOKUP_FAILURE
    elif _matches(full_text, _REFUSED_MARKERS):
        kind = ConnectionErrorKind.CONNECTION_REFUSED
    elif _matches(full_text, _SOCKET_MARKERS):
        kind = ConnectionErrorKind.SOCKET_ERROR
    elif _matches(kind_text, _GENERIC_CONNECTION_MARKERS):
        kind = ConnectionErrorKind.GENERIC
    else:
        return ProtocolError(error_type or "UnknownError", text)
    return ConnectionFailure(kind, text, error_type=error_type)


def is_connection_class(error: SessionError) -> bool:
    """Return True if ``error`` forces the session back to Disconnected."""
    return isinstance(error, ConnectionFailure) and error.is_connection_class


def error_category(error: BaseException) -> str:
    """Map an exception to the category used by structured error logging."""
    if isinstance(error, ConnectionFailure | OSError | ConnectionError):
        return "connection"
    if isinstance(error, ProtocolError):
        return "protocol"
    if isinstance(error, CommandError | UnknownChannelError):
        return "command"
    if isinstance(error, NotConnectedError | AlreadyConnectingError | AlreadyJoinedError):
        return "state"
    if isinstance(error, SessionError):
        return "session"
    return "unknown"


def log_error(
    message: str,
    error: BaseException,
    context: dict | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level, informational errors pass ``logging.INFO``.
    """
    log_structured_error(
        error_type=error_category(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
        level=level,
    )
