"""Event reduction: ``(SessionState, ProtocolEvent) -> Transition``.

Every handler is pure. Events that reference channels or members the session
no longer knows about are no-ops, since optimistic local changes (a part, a
nick change) routinely run ahead of the server's own events.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import assert_never

from ..constants import (
    CLIENT_VERSION,
    DEFAULT_CLOSE_REASON,
    IGNORED_NUMERICS,
    NICK_REJECTION_ERRORS,
    SOCKET_CLOSED_REASON,
)
from ..errors import ConnectionFailure, ProtocolError, classify_error, is_connection_class
from ..logs.logger import logger
from ..protocol.commands import CtcpResponse, ListChannels, NamesRefresh
from ..protocol.events import (
    AwayChanged,
    ChannelListEnded,
    ChannelListItem,
    ChannelListStarted,
    Closed,
    CtcpRequest,
    ErrorOccurred,
    Kicked,
    MessageReceived,
    ModeChanged,
    MotdReceived,
    NickChanged,
    NumericReply,
    ProtocolEvent,
    Registered,
    SocketClosed,
    TopicChanged,
    UserJoined,
    UserListReceived,
    UserParted,
    UserQuit,
)
from ..state.casefold import casefold, is_channel_name, make_channel_id, same_name
from ..state.derivation import affects_member_prefix, member_modes, sort_available_channels
from ..state.models import (
    AvailableChannelInfo,
    Channel,
    ChannelKind,
    ConnectionState,
    Message,
    MessageType,
    ServerSession,
    SessionState,
    Topic,
    User,
)
from .signals import ActiveViewInvalidated
from .transition import Transition, append_message, log_to_server, reset_to_disconnected

_MESSAGE_TYPES = {
    "message": MessageType.MESSAGE,
    "action": MessageType.ACTION,
    "notice": MessageType.NOTICE,
}


def reduce_event(state: SessionState, event: ProtocolEvent) -> Transition:
    """Apply one protocol event to ``state``.

    Events arriving while there is no session, or after the session went back
    to Disconnected (a late close after a locally synthesized disconnect), are
    ignored.
    """
    server = state.server
    if server is None or server.connection_state is ConnectionState.DISCONNECTED:
        logger.log_event(
            "event",
            "ignored_disconnected",
            level=logging.DEBUG,
            event=type(event).__name__,
        )
        return Transition(state)

    match event:
        case Registered():
            return _on_registered(state, server, event)
        case Closed():
            return _on_closed(state, server, event.reason or DEFAULT_CLOSE_REASON)
        case SocketClosed():
            return _on_closed(state, server, SOCKET_CLOSED_REASON)
        case ErrorOccurred():
            return _on_error(state, server, event)
        case MessageReceived():
            return _on_message(state, server, event)
        case UserJoined():
            return _on_join(state, server, event)
        case UserParted():
            return _on_part(state, server, event)
        case UserQuit():
            return _on_quit(state, server, event)
        case NickChanged():
            return _on_nick(state, server, event)
        case TopicChanged():
            return _on_topic(state, server, event)
        case UserListReceived():
            return _on_user_list(state, server, event)
        case ChannelListStarted():
            return _on_list_started(state)
        case ChannelListItem():
            return _on_list_item(state, server, event)
        case ChannelListEnded():
            return _on_list_ended(state, server)
        case ModeChanged():
            return _on_mode(state, server, event)
        case Kicked():
            return _on_kick(state, server, event)
        case MotdReceived():
            return _on_motd(state, event)
        case NumericReply():
            return _on_numeric(state, event)
        case CtcpRequest():
            return _on_ctcp(state, event)
        case AwayChanged():
            return _on_away(state, event)
        case _:
            assert_never(event)


def _channel(state: SessionState, server: ServerSession, name: str) -> Channel | None:
    channel = state.channels.get(make_channel_id(server.server_id, name))
    if channel is None:
        logger.log_event(
            "event",
            "unknown_channel",
            level=logging.DEBUG,
            server=server.server_id,
            channel=name,
        )
    return channel


def _on_registered(
    state: SessionState, server: ServerSession, event: Registered
) -> Transition:
    nickname = event.nick or server.nickname
    state = state.with_server(
        connection_state=ConnectionState.CONNECTED,
        nickname=nickname,
        pending_nickname=None,
    )
    state = log_to_server(state, f"Connected to {server.host} as {nickname}.")
    logger.log_event(
        "session", "registered", server=server.server_id, nickname=nickname
    )
    return Transition(state, commands=(ListChannels(),))


def _on_closed(state: SessionState, server: ServerSession, reason: str) -> Transition:
    logger.log_event(
        "session",
        "disconnected",
        level=logging.WARNING,
        server=server.server_id,
        reason=reason,
    )
    return Transition(reset_to_disconnected(state, reason))


def _on_error(
    state: SessionState, server: ServerSession, event: ErrorOccurred
) -> Transition:
    error = classify_error(event.error_type, event.message)
    if isinstance(error, ConnectionFailure):
        label = error.kind.value
    else:
        label = error.code if isinstance(error, ProtocolError) else type(error).__name__
    state = log_to_server(state, f"Error ({label}): {error}", MessageType.ERROR)
    logger.log_event(
        "event",
        "error",
        level=logging.ERROR,
        server=server.server_id,
        error_type=event.error_type,
        kind=label,
        error=str(error),
    )

    if event.fatal or is_connection_class(error):
        return _on_closed(state, server, str(error))

    if (
        isinstance(error, ProtocolError)
        and casefold(error.code) in NICK_REJECTION_ERRORS
        and server.pending_nickname is not None
    ):
        state = state.with_server(pending_nickname=None)
        state = log_to_server(
            state,
            f"Nickname change to {server.pending_nickname} was rejected.",
            MessageType.INFO,
        )
    return Transition(state)


def _routes_to_server_log(server: ServerSession, event: MessageReceived) -> bool:
    """Notices to us, from the server host, or to a non-channel target."""
    return (
        same_name(event.target, server.nickname)
        or event.nick == server.host
        or not is_channel_name(event.target)
    )


def _on_message(
    state: SessionState, server: ServerSession, event: MessageReceived
) -> Transition:
    message_type = _MESSAGE_TYPES[event.kind]
    timestamp = event.timestamp or time.time()

    if event.kind == "notice" and _routes_to_server_log(server, event):
        state = log_to_server(
            state, event.text, MessageType.NOTICE, nickname=event.nick, target=event.target
        )
        return Transition(state)

    is_self = same_name(event.nick, server.nickname)
    if is_channel_name(event.target):
        channel = _channel(state, server, event.target)
        if channel is None:
            return Transition(state)
    else:
        # Private conversation, keyed by the other party.
        other = event.target if is_self else event.nick
        channel = state.channels.get(make_channel_id(server.server_id, other))
        if channel is None:
            channel = _private_channel(server, other)
            state = state.with_channel(channel)
            logger.log_event(
                "event", "query_opened", server=server.server_id, nick=other
            )

    message = Message(
        content=event.text,
        type=message_type,
        channel_id=channel.id,
        nickname=event.nick,
        target=event.target,
        is_self=is_self,
        timestamp=timestamp,
    )
    return Transition(append_message(state, channel.id, message))


def _private_channel(server: ServerSession, other: str) -> Channel:
    channel = Channel(
        id=make_channel_id(server.server_id, other),
        server_id=server.server_id,
        name=other,
        kind=ChannelKind.PRIVATE_MESSAGE,
    )
    return channel.with_user(User(server.nickname)).with_user(User(other))


def _on_join(state: SessionState, server: ServerSession, event: UserJoined) -> Transition:
    is_self = same_name(event.nick, server.nickname)
    channel_id = make_channel_id(server.server_id, event.channel)
    channel = state.channels.get(channel_id)
    if channel is None:
        if not is_self:
            return Transition(state)
        # Server-initiated join (bouncer, forced join): the server confirmed it.
        channel = Channel(id=channel_id, server_id=server.server_id, name=event.channel)

    if not channel.has_user(event.nick):
        channel = channel.with_user(
            User(event.nick, username=event.ident, hostname=event.hostname)
        )
    channel = channel.with_message(
        Message(
            content=f"{event.nick} has joined {channel.name}",
            type=MessageType.JOIN,
            channel_id=channel.id,
            nickname=event.nick,
            target=channel.name,
            is_self=is_self,
        )
    )
    state = state.with_channel(channel)
    commands = (NamesRefresh(channel.name),) if is_self else ()
    return Transition(state, commands=commands)


def _on_part(state: SessionState, server: ServerSession, event: UserParted) -> Transition:
    channel = _channel(state, server, event.channel)
    if channel is None:
        return Transition(state)
    channel = channel.without_user(event.nick).with_message(
        Message(
            content=event.reason or "",
            type=MessageType.PART,
            channel_id=channel.id,
            nickname=event.nick,
            target=channel.name,
            is_self=same_name(event.nick, server.nickname),
        )
    )
    return Transition(state.with_channel(channel))


def _on_quit(state: SessionState, server: ServerSession, event: UserQuit) -> Transition:
    affected = {make_channel_id(server.server_id, name) for name in event.channels}
    for channel_id in affected:
        channel = state.channels.get(channel_id)
        if channel is None or channel.is_virtual:
            continue
        channel = channel.without_user(event.nick).with_message(
            Message(
                content=event.reason or "",
                type=MessageType.QUIT,
                channel_id=channel.id,
                nickname=event.nick,
                target=channel.name,
            )
        )
        state = state.with_channel(channel)
    return Transition(state)


def _on_nick(state: SessionState, server: ServerSession, event: NickChanged) -> Transition:
    listed = {make_channel_id(server.server_id, name) for name in event.channels}
    is_self = same_name(event.old, server.nickname)

    for channel in list(state.channels.values()):
        if channel.is_virtual:
            continue
        member = channel.get_user(event.old)
        if member is None and channel.id not in listed:
            continue
        if member is not None:
            channel = channel.without_user(event.old).with_user(member.renamed(event.new))
        if channel.kind is ChannelKind.PRIVATE_MESSAGE and same_name(channel.name, event.old):
            # Replies target the name; the id stays stable.
            channel = replace(channel, name=event.new)
        channel = channel.with_message(
            Message(
                content=f"{event.old} is now known as {event.new}",
                type=MessageType.NICK,
                channel_id=channel.id,
                nickname=event.new,
                old_nickname=event.old,
                target=channel.name,
                is_self=is_self,
            )
        )
        state = state.with_channel(channel)

    if is_self:
        state = state.with_server(nickname=event.new, pending_nickname=None)
        state = log_to_server(state, f"You are now known as {event.new}.", MessageType.INFO)
        logger.log_event(
            "session", "nick_confirmed", server=server.server_id, nickname=event.new
        )
    return Transition(state)


def _on_topic(state: SessionState, server: ServerSession, event: TopicChanged) -> Transition:
    channel = _channel(state, server, event.channel)
    if channel is None:
        return Transition(state)
    channel = replace(
        channel, topic=Topic(text=event.topic, setter=event.nick, timestamp=time.time())
    )
    if event.nick:
        channel = channel.with_message(
            Message(
                content=event.topic,
                type=MessageType.TOPIC,
                channel_id=channel.id,
                nickname=event.nick,
                target=channel.name,
                is_self=same_name(event.nick, server.nickname),
            )
        )
    return Transition(state.with_channel(channel))


def _on_user_list(
    state: SessionState, server: ServerSession, event: UserListReceived
) -> Transition:
    channel = _channel(state, server, event.channel)
    if channel is None:
        return Transition(state)
    users = [
        User(
            record.nick,
            username=record.ident,
            hostname=record.hostname,
            modes=member_modes(record.modes),
        )
        for record in event.users
    ]
    logger.log_event(
        "event",
        "user_list",
        level=logging.DEBUG,
        server=server.server_id,
        channel=channel.name,
        count=len(users),
    )
    return Transition(state.with_channel(channel.with_users(users)))


def _on_list_started(state: SessionState) -> Transition:
    return Transition(replace(state, available_channels=(), discovery_in_progress=True))


def _on_list_item(
    state: SessionState, server: ServerSession, event: ChannelListItem
) -> Transition:
    if not state.discovery_in_progress:
        logger.log_event(
            "discovery", "item_outside_cycle", level=logging.DEBUG, name=event.channel
        )
        return Transition(state)
    info = AvailableChannelInfo(
        id=make_channel_id(server.server_id, event.channel),
        server_id=server.server_id,
        name=event.channel,
        topic=event.topic,
        user_count=event.user_count,
        modes=event.modes,
    )
    return Transition(
        replace(state, available_channels=state.available_channels + (info,))
    )


def _on_list_ended(state: SessionState, server: ServerSession) -> Transition:
    ordered = sort_available_channels(state.available_channels)
    logger.log_event(
        "discovery", "completed", server=server.server_id, count=len(ordered)
    )
    return Transition(
        replace(state, available_channels=ordered, discovery_in_progress=False)
    )


def _on_mode(state: SessionState, server: ServerSession, event: ModeChanged) -> Transition:
    if not is_channel_name(event.target):
        state = log_to_server(
            state,
            event.modes_string,
            MessageType.MODE,
            nickname=event.nick,
            target=event.target,
            mode_params=event.params,
        )
        return Transition(state)

    channel = _channel(state, server, event.target)
    if channel is None:
        return Transition(state)
    commands: tuple[NamesRefresh, ...] = ()
    # Member prefixes are re-derived from a fresh NAMES snapshot, not from deltas.
    if affects_member_prefix(((d.mode, d.param) for d in event.modes), channel):
        commands = (NamesRefresh(channel.name),)
    channel = channel.with_message(
        Message(
            content=event.modes_string,
            type=MessageType.MODE,
            channel_id=channel.id,
            nickname=event.nick,
            target=channel.name,
            mode_params=event.params,
            is_self=same_name(event.nick, server.nickname),
        )
    )
    return Transition(state.with_channel(channel), commands=commands)


def _on_kick(state: SessionState, server: ServerSession, event: Kicked) -> Transition:
    channel = _channel(state, server, event.channel)
    if channel is None:
        return Transition(state)
    content = f"{event.kicked} was kicked by {event.nick}"
    if event.reason:
        content = f"{content} ({event.reason})"
    channel = channel.without_user(event.kicked).with_message(
        Message(
            content=content,
            type=MessageType.KICK,
            channel_id=channel.id,
            nickname=event.nick,
            target=channel.name,
            kicked=event.kicked,
            kick_reason=event.reason,
            is_self=same_name(event.nick, server.nickname),
        )
    )
    state = state.with_channel(channel)
    if not same_name(event.kicked, server.nickname):
        return Transition(state)
    logger.log_event(
        "event",
        "self_kicked",
        level=logging.WARNING,
        server=server.server_id,
        channel=channel.name,
        by=event.nick,
    )
    signal = ActiveViewInvalidated(channel.id, reason=f"Kicked by {event.nick}")
    return Transition(state, signals=(signal,))


def _on_motd(state: SessionState, event: MotdReceived) -> Transition:
    for line in event.text.splitlines():
        state = log_to_server(state, line, MessageType.INFO)
    return Transition(state)


def _on_numeric(state: SessionState, event: NumericReply) -> Transition:
    command = event.command
    if not (len(command) == 3 and command.isdigit()) or int(command) in IGNORED_NUMERICS:
        return Transition(state)
    content = f"({command}) {' '.join(event.params[1:])}".rstrip()
    return Transition(
        log_to_server(state, content, MessageType.RAW, raw_line=event.line)
    )


def _on_ctcp(state: SessionState, event: CtcpRequest) -> Transition:
    match event.command.upper():
        case "VERSION":
            response = CtcpResponse(event.nick, "VERSION", CLIENT_VERSION)
        case "PING":
            response = CtcpResponse(event.nick, "PING", event.params or "")
        case _:
            return Transition(state)
    return Transition(state, commands=(response,))


def _on_away(state: SessionState, event: AwayChanged) -> Transition:
    if event.away:
        state = state.with_server(away_message=event.message or "")
        text = "You have been marked as being away."
    else:
        state = state.with_server(away_message=None)
        text = "You are no longer marked as being away."
    return Transition(log_to_server(state, text, MessageType.INFO))
