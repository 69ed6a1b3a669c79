"""Outbound command vocabulary accepted by the protocol event source."""

from __future__ import annotations

from dataclasses import dataclass

from ..config.model import ConnectRequest


@dataclass(frozen=True, slots=True)
class Connect:
    request: ConnectRequest


@dataclass(frozen=True, slots=True)
class Disconnect:
    reason: str


@dataclass(frozen=True, slots=True)
class Join:
    channel: str


@dataclass(frozen=True, slots=True)
class Part:
    channel: str
    reason: str


@dataclass(frozen=True, slots=True)
class Privmsg:
    target: str
    text: str


@dataclass(frozen=True, slots=True)
class Action:
    target: str
    text: str


@dataclass(frozen=True, slots=True)
class Notice:
    target: str
    text: str


@dataclass(frozen=True, slots=True)
class Nick:
    nick: str


@dataclass(frozen=True, slots=True)
class ListChannels:
    pass


@dataclass(frozen=True, slots=True)
class NamesRefresh:
    channel: str


@dataclass(frozen=True, slots=True)
class Raw:
    line: str


@dataclass(frozen=True, slots=True)
class CtcpResponse:
    target: str
    command: str
    params: str


OutboundCommand = (
    Connect
    | Disconnect
    | Join
    | Part
    | Privmsg
    | Action
    | Notice
    | Nick
    | ListChannels
    | NamesRefresh
    | Raw
    | CtcpResponse
)

__all__ = [
    "Action",
    "Connect",
    "CtcpResponse",
    "Disconnect",
    "Join",
    "ListChannels",
    "NamesRefresh",
    "Nick",
    "Notice",
    "OutboundCommand",
    "Part",
    "Privmsg",
    "Raw",
]
