"""Inbound event vocabulary emitted by the protocol event source.

The set is closed: ``ProtocolEvent`` is the union of every event the
synchronizer understands, and the reducer matches it exhaustively.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class Registered:
    """Server accepted registration. ``nick`` is the nickname it confirmed."""

    nick: str | None = None


@dataclass(frozen=True, slots=True)
class Closed:
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class SocketClosed:
    """The socket dropped without an orderly close."""


@dataclass(frozen=True, slots=True)
class ErrorOccurred:
    """Error reported by the transport or the server.

    ``fatal`` marks errors after which the transport is gone regardless of
    how the error classifies.
    """

    error_type: str
    message: str = ""
    fatal: bool = False


MessageKind = Literal["message", "action", "notice"]


@dataclass(frozen=True, slots=True)
class MessageReceived:
    """PRIVMSG, CTCP ACTION or NOTICE addressed to a channel or to us."""

    nick: str
    target: str
    text: str
    kind: MessageKind = "message"
    timestamp: float | None = None


@dataclass(frozen=True, slots=True)
class UserJoined:
    channel: str
    nick: str
    ident: str | None = None
    hostname: str | None = None


@dataclass(frozen=True, slots=True)
class UserParted:
    channel: str
    nick: str
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class UserQuit:
    nick: str
    reason: str | None = None
    channels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class NickChanged:
    old: str
    new: str
    channels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TopicChanged:
    channel: str
    topic: str
    nick: str | None = None


@dataclass(frozen=True, slots=True)
class UserRecord:
    nick: str
    ident: str | None = None
    hostname: str | None = None
    modes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class UserListReceived:
    """Authoritative member snapshot (NAMES / userlist) for one channel."""

    channel: str
    users: tuple[UserRecord, ...] = ()


@dataclass(frozen=True, slots=True)
class ChannelListStarted:
    pass


@dataclass(frozen=True, slots=True)
class ChannelListItem:
    channel: str
    user_count: int | None = None
    topic: str | None = None
    modes: str | None = None


@dataclass(frozen=True, slots=True)
class ChannelListEnded:
    pass


@dataclass(frozen=True, slots=True)
class ModeDelta:
    mode: str
    param: str | None = None

    def render(self) -> str:
        return f"{self.mode} {self.param}" if self.param else self.mode


@dataclass(frozen=True, slots=True)
class ModeChanged:
    target: str
    nick: str
    modes: tuple[ModeDelta, ...] = ()

    @property
    def modes_string(self) -> str:
        return " ".join(delta.render() for delta in self.modes)

    @property
    def params(self) -> tuple[str, ...]:
        return tuple(d.param for d in self.modes if d.param)


@dataclass(frozen=True, slots=True)
class Kicked:
    channel: str
    kicked: str
    nick: str
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class MotdReceived:
    text: str


@dataclass(frozen=True, slots=True)
class NumericReply:
    """A three-digit server reply, passed through for the server log."""

    command: str
    params: tuple[str, ...] = ()
    line: str | None = None


@dataclass(frozen=True, slots=True)
class CtcpRequest:
    nick: str
    command: str
    params: str | None = None


@dataclass(frozen=True, slots=True)
class AwayChanged:
    """RPL_NOWAWAY / RPL_UNAWAY confirmation for our own away status."""

    away: bool
    message: str | None = None


ProtocolEvent = (
    Registered
    | Closed
    | SocketClosed
    | ErrorOccurred
    | MessageReceived
    | UserJoined
    | UserParted
    | UserQuit
    | NickChanged
    | TopicChanged
    | UserListReceived
    | ChannelListStarted
    | ChannelListItem
    | ChannelListEnded
    | ModeChanged
    | Kicked
    | MotdReceived
    | NumericReply
    | CtcpRequest
    | AwayChanged
)

__all__ = [
    "AwayChanged",
    "ChannelListEnded",
    "ChannelListItem",
    "ChannelListStarted",
    "Closed",
    "CtcpRequest",
    "ErrorOccurred",
    "Kicked",
    "MessageKind",
    "MessageReceived",
    "ModeChanged",
    "ModeDelta",
    "MotdReceived",
    "NickChanged",
    "NumericReply",
    "ProtocolEvent",
    "Registered",
    "SocketClosed",
    "TopicChanged",
    "UserJoined",
    "UserListReceived",
    "UserParted",
    "UserQuit",
    "UserRecord",
]
