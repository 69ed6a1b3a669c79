"""Identity normalization for channel names and nicknames.

Every identity comparison in the package (channel ids, member keys, self
detection) goes through :func:`casefold`. It lowercases ASCII letters only;
the RFC 1459 casemapping (``[]\\~`` folding to ``{}|^``) and server-advertised
CASEMAPPING are not applied.
"""

from __future__ import annotations

from ..constants import CHANNEL_DEFAULT_SIGIL, CHANNEL_SIGILS

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def casefold(name: str) -> str:
    return name.translate(_ASCII_LOWER)


def same_name(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return casefold(a) == casefold(b)


def is_channel_name(name: str) -> bool:
    return bool(name) and name[0] in CHANNEL_SIGILS


def normalize_channel_name(name: str) -> str:
    """Strip whitespace and make sure the name carries a channel sigil."""
    stripped = name.strip()
    if not stripped or is_channel_name(stripped):
        return stripped
    return f"{CHANNEL_DEFAULT_SIGIL}{stripped}"


def make_channel_id(server_id: str, name: str) -> str:
    """Derive a channel id: ``serverId`` followed by the casefolded name.

    Used for both channels (``host:port#chan``) and private-message
    conversations (``host:port`` + nick).
    """
    return f"{server_id}{casefold(name)}"
