"""Immutable session state model and derived views."""

from .casefold import (  # noqa: F401
    casefold,
    is_channel_name,
    make_channel_id,
    normalize_channel_name,
    same_name,
)
from .derivation import (  # noqa: F401
    affects_member_prefix,
    member_modes,
    needs_user_list_refresh,
    sort_available_channels,
)
from .models import (  # noqa: F401
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
    users_by_key,
)

__all__ = [
    "AvailableChannelInfo",
    "Channel",
    "ChannelKind",
    "ConnectionState",
    "Message",
    "MessageType",
    "ServerSession",
    "SessionState",
    "Topic",
    "User",
    "affects_member_prefix",
    "casefold",
    "is_channel_name",
    "make_channel_id",
    "member_modes",
    "needs_user_list_refresh",
    "normalize_channel_name",
    "same_name",
    "sort_available_channels",
    "users_by_key",
]
