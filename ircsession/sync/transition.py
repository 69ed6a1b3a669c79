"""Transition value and state helpers shared by the event and command reducers."""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..protocol.commands import OutboundCommand
from ..state.models import (
    Channel,
    ChannelKind,
    ConnectionState,
    Message,
    MessageType,
    SessionState,
)
from .signals import Signal


@dataclass(frozen=True, slots=True)
class Transition:
    """Result of reducing one event or command.

    ``commands`` are forwarded to the protocol event source in order, then
    ``signals`` are delivered to signal listeners.
    """

    state: SessionState
    commands: tuple[OutboundCommand, ...] = ()
    signals: tuple[Signal, ...] = ()


def append_message(state: SessionState, channel_id: str, message: Message) -> SessionState:
    """Append to a channel's history; unknown channel ids leave state untouched."""
    channel = state.channels.get(channel_id)
    if channel is None:
        return state
    return state.with_channel(channel.with_message(message))


def log_to_server(
    state: SessionState,
    content: str,
    message_type: MessageType = MessageType.SYSTEM,
    *,
    nickname: str | None = None,
    target: str | None = None,
    mode_params: tuple[str, ...] = (),
    raw_line: str | None = None,
) -> SessionState:
    """Append a message to the server-log channel, if there is one."""
    if state.server is None:
        return state
    server_id = state.server.server_id
    message = Message(
        content=content,
        type=message_type,
        channel_id=server_id,
        nickname=nickname,
        target=target or server_id,
        mode_params=mode_params,
        raw_line=raw_line,
    )
    return append_message(state, server_id, message)


def server_log_channel(server_id: str, host: str) -> Channel:
    return Channel(
        id=server_id,
        server_id=server_id,
        name=host,
        kind=ChannelKind.SERVER_LOG,
    )


def reset_to_disconnected(state: SessionState, reason: str) -> SessionState:
    """Drop every channel but the server log, clear discovery, mark Disconnected.

    The server log survives so the disconnect reason stays readable; the next
    ``connect`` replaces it.
    """
    server = state.server
    if server is None:
        return state
    server_log = state.channels.get(server.server_id) or server_log_channel(
        server.server_id, server.host
    )
    state = replace(
        state,
        server=replace(
            server,
            connection_state=ConnectionState.DISCONNECTED,
            pending_nickname=None,
            away_message=None,
        ),
        channels={server_log.id: server_log},
        available_channels=(),
        discovery_in_progress=False,
    )
    return log_to_server(state, f"Disconnected: {reason}", MessageType.SYSTEM)
