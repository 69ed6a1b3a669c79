"""Command reduction: user intents validated against state.

Each intent either raises a :class:`~ircsession.errors.SessionError` without
touching state, or returns a :class:`Transition` carrying the optimistic state
change and the normalized commands for the protocol event source.

Optimism policy: a part removes the channel immediately with no rollback
path; a nick change is staged in ``ServerSession.pending_nickname`` and the
authoritative ``nickname`` only moves on the server's confirmation.
"""

from __future__ import annotations

import logging
import re

from ..config.model import ConnectDetails
from ..constants import CHANNEL_SIGILS, DEFAULT_PART_REASON, DEFAULT_QUIT_REASON
from ..errors import (
    AlreadyConnectingError,
    AlreadyJoinedError,
    CommandError,
    NotConnectedError,
    UnknownChannelError,
)
from ..logs.logger import logger
from ..protocol.commands import (
    Action,
    Connect,
    Disconnect,
    Join,
    ListChannels,
    NamesRefresh,
    Nick,
    Notice,
    Part,
    Privmsg,
    Raw,
)
from ..state.casefold import make_channel_id, normalize_channel_name
from ..state.models import (
    Channel,
    ChannelKind,
    ConnectionState,
    Message,
    MessageType,
    ServerSession,
    SessionState,
    User,
)
from .signals import ActiveViewInvalidated, ActiveViewSuggested
from .transition import Transition, log_to_server, reset_to_disconnected, server_log_channel

_NOTICE_PATTERN = re.compile(r"^/notice\s+(\S+)\s+(.+)", re.DOTALL)
_QUERY_PATTERN = re.compile(r"^/query\s+(\S+)")


def _require_connected(state: SessionState, operation: str) -> ServerSession:
    server = state.server
    if server is None or server.connection_state is not ConnectionState.CONNECTED:
        raise NotConnectedError(operation)
    return server


def _require_channel(state: SessionState, channel_id: str) -> Channel:
    channel = state.channels.get(channel_id)
    if channel is None:
        raise UnknownChannelError(channel_id)
    return channel


def _is_command(text: str, name: str) -> bool:
    return text == name or text.startswith(f"{name} ")


def connect(state: SessionState, details: ConnectDetails) -> Transition:
    """Start a fresh session; everything from a previous session is dropped."""
    if state.connection_state is not ConnectionState.DISCONNECTED:
        raise AlreadyConnectingError(state.server.server_id)  # type: ignore[union-attr]

    server_id = details.server_id
    server = ServerSession(
        server_id=server_id,
        host=details.host,
        port=details.port,
        nickname=details.nickname,
        connection_state=ConnectionState.CONNECTING,
    )
    server_log = server_log_channel(server_id, details.host).with_message(
        Message(
            content=(
                f"Attempting to connect to {details.host}:{details.port} "
                f"as {details.nickname}..."
            ),
            type=MessageType.SYSTEM,
            channel_id=server_id,
            target=server_id,
        )
    )
    new_state = SessionState(server=server, channels={server_id: server_log})
    logger.log_event(
        "session",
        "connecting",
        server=server_id,
        nickname=details.nickname,
        tls=details.uses_tls,
    )
    return Transition(
        new_state,
        commands=(Connect(details.to_request()),),
        signals=(ActiveViewSuggested(server_id),),
    )


def disconnect(
    state: SessionState, reason: str | None = None, *, transport_live: bool
) -> Transition:
    """Ask the transport to quit; synthesize the close locally when it cannot.

    A transport that never finished connecting may never emit a close event,
    so while Connecting, or whenever the transport is not live, the reset is
    applied here. A close event arriving later is ignored by the reducer.
    """
    server = state.server
    if server is None or server.connection_state is ConnectionState.DISCONNECTED:
        logger.log_event("session", "disconnect_noop", level=logging.DEBUG)
        return Transition(state)

    reason = reason or DEFAULT_QUIT_REASON
    commands = (Disconnect(reason),)
    if transport_live and server.connection_state is ConnectionState.CONNECTED:
        logger.log_event(
            "session", "disconnect_requested", server=server.server_id, reason=reason
        )
        return Transition(state, commands=commands)

    logger.log_event(
        "session",
        "disconnect_synthesized",
        server=server.server_id,
        reason=reason,
        state=server.connection_state.value,
    )
    return Transition(reset_to_disconnected(state, reason), commands=commands)


def join_channel(state: SessionState, name: str) -> Transition:
    server = _require_connected(state, "join a channel")
    channel_name = normalize_channel_name(name)
    if (
        not channel_name
        or channel_name in CHANNEL_SIGILS
        or any(ch in channel_name for ch in " ,\x07")
    ):
        raise CommandError(f"Invalid channel name: {name!r}", name)

    channel_id = make_channel_id(server.server_id, channel_name)
    if channel_id in state.channels:
        raise AlreadyJoinedError(channel_id, state.channels[channel_id].name)

    # Placeholder until the server's JOIN and NAMES replies arrive.
    channel = Channel(
        id=channel_id,
        server_id=server.server_id,
        name=channel_name,
        kind=ChannelKind.CHANNEL,
    ).with_user(User(server.nickname))
    channel = channel.with_message(
        Message(
            content=f"Joining {channel_name}...",
            type=MessageType.SYSTEM,
            channel_id=channel_id,
            target=channel_name,
        )
    )
    logger.log_event("command", "join", server=server.server_id, channel=channel_name)
    return Transition(
        state.with_channel(channel),
        commands=(Join(channel_name),),
        signals=(ActiveViewSuggested(channel_id),),
    )


def part_channel(
    state: SessionState, channel_id: str, reason: str | None = None
) -> Transition:
    channel = _require_channel(state, channel_id)
    if channel.is_virtual:
        raise CommandError("The server log cannot be left.", channel_id)

    commands: tuple[Part, ...] = ()
    server = state.server
    if (
        channel.kind is ChannelKind.CHANNEL
        and server is not None
        and server.connection_state is ConnectionState.CONNECTED
    ):
        commands = (Part(channel.name, reason or DEFAULT_PART_REASON),)
    logger.log_event(
        "command", "part", server=channel.server_id, channel=channel.name
    )
    return Transition(
        state.without_channel(channel_id),
        commands=commands,
        signals=(ActiveViewInvalidated(channel_id, reason="Left channel"),),
    )


def send_message(state: SessionState, channel_id: str, text: str) -> Transition:
    """Parse local slash commands, then send text to a channel or conversation.

    ``/me <text>`` sends an action, ``/notice <target> <text>`` a notice and
    ``/query <nick>`` only writes a hint to the server log. Anything else is a
    plain message. Plain messages and actions are echoed locally because the
    server does not echo a sender's own PRIVMSG.
    """
    server = _require_connected(state, "send a message")
    channel = _require_channel(state, channel_id)
    if channel.is_virtual:
        raise CommandError("Messages cannot be sent to the server log.", text)
    if not text.strip():
        raise CommandError("Cannot send an empty message.", text)

    if text.startswith("/me "):
        action = text[4:]
        if not action.strip():
            raise CommandError("Invalid /me format. Use /me <action>", text)
        return _send_echoed(
            state, server, channel, action, MessageType.ACTION, Action(channel.name, action)
        )

    if _is_command(text, "/notice"):
        match = _NOTICE_PATTERN.match(text)
        if not match:
            raise CommandError(
                "Invalid /notice format. Use /notice <target> <message>", text
            )
        target, body = match.group(1), match.group(2)
        logger.log_event("command", "notice", server=server.server_id, target=target)
        return Transition(state, commands=(Notice(target, body),))

    if _is_command(text, "/query"):
        match = _QUERY_PATTERN.match(text)
        if not match:
            raise CommandError("Invalid /query format. Use /query <nickname>", text)
        nick = match.group(1)
        state = log_to_server(
            state,
            f"Query requested with {nick}. Select their name in the sidebar to chat.",
            MessageType.INFO,
        )
        return Transition(state)

    return _send_echoed(
        state, server, channel, text, MessageType.MESSAGE, Privmsg(channel.name, text)
    )


def _send_echoed(
    state: SessionState,
    server: ServerSession,
    channel: Channel,
    content: str,
    message_type: MessageType,
    command: Action | Privmsg,
) -> Transition:
    message = Message(
        content=content,
        type=message_type,
        channel_id=channel.id,
        nickname=server.nickname,
        target=channel.name,
        is_self=True,
    )
    logger.log_event(
        "command",
        "send",
        level=logging.DEBUG,
        server=server.server_id,
        channel=channel.name,
        kind=message_type.value,
    )
    return Transition(state.with_channel(channel.with_message(message)), commands=(command,))


def change_nick(state: SessionState, new_nick: str) -> Transition:
    server = _require_connected(state, "change nickname")
    nickname = new_nick.strip()
    if not nickname or " " in nickname:
        raise CommandError(f"Invalid nickname: {new_nick!r}", new_nick)
    if nickname == server.nickname:
        return Transition(
            log_to_server(state, f"You are already known as {nickname}.", MessageType.INFO)
        )
    logger.log_event(
        "command",
        "nick",
        server=server.server_id,
        old=server.nickname,
        new=nickname,
    )
    return Transition(
        state.with_server(pending_nickname=nickname), commands=(Nick(nickname),)
    )


def request_user_list_refresh(state: SessionState, channel_id: str) -> Transition:
    """Ask for a fresh NAMES snapshot. Advisory: non-channels are ignored."""
    _require_connected(state, "refresh the user list")
    channel = _require_channel(state, channel_id)
    if channel.kind is not ChannelKind.CHANNEL:
        return Transition(state)
    return Transition(state, commands=(NamesRefresh(channel.name),))


def list_available_channels(state: SessionState) -> Transition:
    server = _require_connected(state, "list channels")
    logger.log_event("discovery", "requested", server=server.server_id)
    return Transition(state, commands=(ListChannels(),))


def send_raw(state: SessionState, line: str) -> Transition:
    _require_connected(state, "send a raw command")
    command_line = line.strip()
    if not command_line:
        raise CommandError("Cannot send an empty raw command.", line)
    return Transition(state, commands=(Raw(command_line),))


def set_away(state: SessionState, message: str | None = None) -> Transition:
    """Mark or unmark away; the state follows the server's confirmation."""
    _require_connected(state, "change away status")
    text = (message or "").strip()
    line = f"AWAY :{text}" if text else "AWAY"
    return Transition(state, commands=(Raw(line),))
