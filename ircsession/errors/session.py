"""Session error hierarchy.

These exceptions give semantic categories to every failure a command or an
inbound protocol error can produce. Commands raise them synchronously before
any state is touched; inbound protocol errors are classified into them by
:mod:`ircsession.errors.handling` and recorded in the server log.

Classes:
  SessionError            – Base for all session errors.
  NotConnectedError       – Command needs a registered connection.
  AlreadyConnectingError  – ``connect`` while a connection exists or is pending.
  AlreadyJoinedError      – ``join`` of a channel id that already exists.
  CommandError            – Malformed local slash command or invalid input.
  UnknownChannelError     – Command names a channel id that does not exist.
  ConnectionFailure       – Classified transport failure (lookup, socket, refused).
  ProtocolError           – Non-fatal error reported by the server.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class SessionError(Exception):
    """Base class for all session errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NotConnectedError(SessionError):
    """Raised when a command requires a registered connection."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Cannot {operation}: not connected to a server.",
            data={"operation": operation},
        )
        self.operation = operation


class AlreadyConnectingError(SessionError):
    """Raised when ``connect`` is issued while a session is connecting or connected.

    Informational: the existing session is left untouched.
    """

    def __init__(self, server_id: str) -> None:
        super().__init__(
            f"A connection to {server_id} is already in progress.",
            data={"server_id": server_id},
        )
        self.server_id = server_id


class AlreadyJoinedError(SessionError):
    """Raised when joining a channel whose id already exists.

    Non-fatal. ``channel_id`` names the existing channel so the caller can
    present it as the active view instead.
    """

    def __init__(self, channel_id: str, name: str) -> None:
        super().__init__(
            f"You are already in channel {name}.",
            data={"channel_id": channel_id, "name": name},
        )
        self.channel_id = channel_id
        self.name = name


class CommandError(SessionError):
    """Raised for malformed local commands; carries the offending input."""

    def __init__(self, message: str, command_input: str) -> None:
        super().__init__(message, data={"input": command_input})
        self.command_input = command_input


class UnknownChannelError(SessionError):
    """Raised when a command refers to a channel id that is not in the session."""

    def __init__(self, channel_id: str) -> None:
        super().__init__(
            f"No such channel: {channel_id}", data={"channel_id": channel_id}
        )
        self.channel_id = channel_id


class ConnectionErrorKind(str, Enum):
    LOOKUP_FAILURE = "lookup_failure"
    SOCKET_ERROR = "socket_error"
    CONNECTION_REFUSED = "connection_refused"
    GENERIC = "generic"


# Kinds that mean the transport is gone and the session must reset.
CONNECTION_CLASS_KINDS = frozenset(
    {
        ConnectionErrorKind.LOOKUP_FAILURE,
        ConnectionErrorKind.SOCKET_ERROR,
        ConnectionErrorKind.CONNECTION_REFUSED,
    }
)


class ConnectionFailure(SessionError):
    """Classified transport-level failure.

    Args:
        kind: The connection error category.
        message: Error text reported by the transport.
        error_type: The raw error type string as reported by the transport.
    """

    def __init__(
        self, kind: ConnectionErrorKind, message: str, *, error_type: str = ""
    ) -> None:
        super().__init__(message, data={"kind": kind.value, "error_type": error_type})
        self.kind = kind
        self.error_type = error_type

    @property
    def is_connection_class(self) -> bool:
        return self.kind in CONNECTION_CLASS_KINDS


class ProtocolError(SessionError):
    """Non-fatal error reported by the server, passed through unchanged."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message, data={"code": code})
        self.code = code


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
]
