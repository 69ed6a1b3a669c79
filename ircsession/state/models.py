"""Session state model.

All types are immutable; reducers build new instances with
``dataclasses.replace``. Mappings stored on state objects are never mutated
after construction.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum

from ..constants import OP_MODES, VOICE_MODES
from .casefold import casefold


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ChannelKind(Enum):
    CHANNEL = "channel"
    PRIVATE_MESSAGE = "private_message"
    SERVER_LOG = "server_log"


class MessageType(str, Enum):
    MESSAGE = "message"
    NOTICE = "notice"
    ACTION = "action"
    JOIN = "join"
    PART = "part"
    QUIT = "quit"
    KICK = "kick"
    NICK = "nick"
    MODE = "mode"
    TOPIC = "topic"
    SYSTEM = "system"
    ERROR = "error"
    INFO = "info"
    RAW = "raw"


@dataclass(frozen=True, slots=True)
class Topic:
    text: str
    setter: str | None = None
    timestamp: float | None = None


@dataclass(frozen=True, slots=True)
class User:
    """A channel member. Keyed in member maps by ``key`` (casefolded nick)."""

    nickname: str
    username: str | None = None
    hostname: str | None = None
    modes: frozenset[str] = frozenset()

    @property
    def key(self) -> str:
        return casefold(self.nickname)

    @property
    def is_op(self) -> bool:
        return bool(self.modes & OP_MODES)

    @property
    def is_voice(self) -> bool:
        return bool(self.modes & VOICE_MODES)

    def renamed(self, nickname: str) -> User:
        return replace(self, nickname=nickname)


@dataclass(frozen=True, slots=True)
class Message:
    """One entry in a channel's write-once history."""

    content: str
    type: MessageType
    channel_id: str
    nickname: str | None = None
    target: str | None = None
    is_self: bool = False
    old_nickname: str | None = None
    kicked: str | None = None
    kick_reason: str | None = None
    mode_params: tuple[str, ...] = ()
    raw_line: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    server_id: str
    name: str
    kind: ChannelKind = ChannelKind.CHANNEL
    topic: Topic | None = None
    users: Mapping[str, User] = field(default_factory=dict)
    messages: tuple[Message, ...] = ()

    @property
    def is_virtual(self) -> bool:
        return self.kind is ChannelKind.SERVER_LOG

    def get_user(self, nickname: str) -> User | None:
        return self.users.get(casefold(nickname))

    def has_user(self, nickname: str) -> bool:
        return casefold(nickname) in self.users

    def with_message(self, message: Message) -> Channel:
        return replace(self, messages=self.messages + (message,))

    def with_user(self, user: User) -> Channel:
        users = dict(self.users)
        users[user.key] = user
        return replace(self, users=users)

    def without_user(self, nickname: str) -> Channel:
        key = casefold(nickname)
        if key not in self.users:
            return self
        users = {k: u for k, u in self.users.items() if k != key}
        return replace(self, users=users)

    def with_users(self, users: Iterable[User]) -> Channel:
        return replace(self, users=users_by_key(users))


def users_by_key(users: Iterable[User]) -> dict[str, User]:
    """Build a member map; a later duplicate (by casefold) replaces an earlier one."""
    mapping: dict[str, User] = {}
    for user in users:
        mapping[user.key] = user
    return mapping


@dataclass(frozen=True, slots=True)
class ServerSession:
    """The one server connection owned by a synchronizer.

    ``nickname`` is authoritative (server confirmed). ``pending_nickname``
    holds a requested change until the server confirms or rejects it.
    """

    server_id: str
    host: str
    port: int
    nickname: str
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    away_message: str | None = None
    pending_nickname: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.connection_state is ConnectionState.CONNECTED


@dataclass(frozen=True, slots=True)
class AvailableChannelInfo:
    id: str
    server_id: str
    name: str
    topic: str | None = None
    user_count: int | None = None
    modes: str | None = None


@dataclass(frozen=True, slots=True)
class SessionState:
    """Snapshot of everything the presentation layer can render."""

    server: ServerSession | None = None
    channels: Mapping[str, Channel] = field(default_factory=dict)
    available_channels: tuple[AvailableChannelInfo, ...] = ()
    discovery_in_progress: bool = False

    @property
    def connection_state(self) -> ConnectionState:
        if self.server is None:
            return ConnectionState.DISCONNECTED
        return self.server.connection_state

    @property
    def server_log(self) -> Channel | None:
        if self.server is None:
            return None
        return self.channels.get(self.server.server_id)

    def get_channel(self, channel_id: str) -> Channel | None:
        return self.channels.get(channel_id)

    def with_channel(self, channel: Channel) -> SessionState:
        channels = dict(self.channels)
        channels[channel.id] = channel
        return replace(self, channels=channels)

    def without_channel(self, channel_id: str) -> SessionState:
        if channel_id not in self.channels:
            return self
        channels = {cid: c for cid, c in self.channels.items() if cid != channel_id}
        return replace(self, channels=channels)

    def with_server(self, **changes: object) -> SessionState:
        if self.server is None:
            return self
        return replace(self, server=replace(self.server, **changes))
