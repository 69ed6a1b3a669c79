"""Derived views over state: member status and channel discovery ordering."""

from __future__ import annotations

from collections.abc import Iterable

from ..constants import MEMBER_PREFIX_MODE_LETTERS, USER_LIST_REFRESH_THRESHOLD
from .casefold import casefold
from .models import AvailableChannelInfo, Channel, ChannelKind


def member_modes(prefixes: Iterable[str] | str | None) -> frozenset[str]:
    """Normalize a member's prefix/mode list (``["@", "+"]`` or ``"@+"``)."""
    if not prefixes:
        return frozenset()
    if isinstance(prefixes, str):
        return frozenset(prefixes)
    modes: set[str] = set()
    for item in prefixes:
        modes.update(item)
    return frozenset(modes)


def discovery_sort_key(info: AvailableChannelInfo) -> tuple[bool, int, str]:
    """Counted entries first (descending count), then name ascending.

    Ties in count and the uncounted tail are both ordered by casefolded name.
    """
    if info.user_count is None:
        return (True, 0, casefold(info.name))
    return (False, -info.user_count, casefold(info.name))


def sort_available_channels(
    channels: Iterable[AvailableChannelInfo],
) -> tuple[AvailableChannelInfo, ...]:
    return tuple(sorted(channels, key=discovery_sort_key))


def affects_member_prefix(
    deltas: Iterable[tuple[str, str | None]], channel: Channel
) -> bool:
    """True when a mode change grants or revokes a prefix of a known member.

    ``deltas`` are ``(mode, param)`` pairs such as ``("+o", "bob")``.
    """
    for mode, param in deltas:
        letter = mode.lstrip("+-")[:1]
        if letter in MEMBER_PREFIX_MODE_LETTERS and param and channel.has_user(param):
            return True
    return False


def needs_user_list_refresh(channel: Channel) -> bool:
    """A channel with suspiciously few known members should ask for NAMES."""
    return (
        channel.kind is ChannelKind.CHANNEL
        and len(channel.users) <= USER_LIST_REFRESH_THRESHOLD
    )
