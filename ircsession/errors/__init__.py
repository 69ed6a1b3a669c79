"""Session error taxonomy and classification helpers."""

from .handling import classify_error, error_category, is_connection_class, log_error  # noqa: F401
from .session import (  # noqa: F401
    CONNECTION_CLASS_KINDS,
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

__all__ = [
    "SessionError",
    "NotConnectedError",
    "AlreadyConnectingError",
    "AlreadyJoinedError",
    "CommandError",
    "UnknownChannelError",
    "ConnectionErrorKind",
    "CONNECTION_CLASS_KINDS",
    "ConnectionFailure",
    "ProtocolError",
    "classify_error",
    "error_category",
    "is_connection_class",
    "log_error",
]
