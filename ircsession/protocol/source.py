"""Protocol definition for the external protocol event source.

The event source owns the socket, performs the handshake and turns wire
traffic into :mod:`ircsession.protocol.events`. The synchronizer only needs
to hand it commands and to know whether the transport is fully established.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .commands import OutboundCommand


@runtime_checkable
class ProtocolEventSource(Protocol):
    """Protocol for the transport side of a session."""

    @property
    def is_connected(self) -> bool:
        """True once the transport connection is fully established."""
        ...

    def send(self, command: OutboundCommand) -> None:
        """Queue a command for the wire. Must not block."""
        ...
