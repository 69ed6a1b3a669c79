"""Typed protocol vocabulary shared with the external event source."""

from . import commands, events  # noqa: F401
from .commands import OutboundCommand  # noqa: F401
from .events import ProtocolEvent  # noqa: F401
from .source import ProtocolEventSource  # noqa: F401

__all__ = [
    "commands",
    "events",
    "OutboundCommand",
    "ProtocolEvent",
    "ProtocolEventSource",
]
