"""
Configuration constants for the IRC session synchronizer

This module contains all configurable constants used throughout the package.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_str(name: str, default: str) -> str:
    """Retrieve a non-empty string value from an environment variable."""
    value = os.getenv(name)
    if value is not None and value.strip():
        return value.strip()
    return default


def _get_env_int_tuple(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    """Retrieve a comma separated list of integers from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The tuple returned when the variable is unset or malformed.

    Returns:
        The parsed tuple of integers, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return tuple(int(part) for part in value.split(",") if part.strip())
        except ValueError:
            print(
                f"Warning: Invalid integer list for {name}='{value}', using default {default}"
            )
    return default


# Client identity advertised to the server
CLIENT_VERSION = _get_env_str(
    "CLIENT_VERSION", "ircsession 0.5.0 - A modern IRC client"
)  # Answer to CTCP VERSION and default connect version string
DEFAULT_REAL_NAME = _get_env_str(
    "DEFAULT_REAL_NAME", "IRC Session User"
)  # GECOS used when the user gives no real name

# Default reasons for outbound PART / QUIT
DEFAULT_PART_REASON = _get_env_str("DEFAULT_PART_REASON", "Leaving channel")
DEFAULT_QUIT_REASON = _get_env_str("DEFAULT_QUIT_REASON", "Client disconnected")
DEFAULT_CLOSE_REASON = _get_env_str(
    "DEFAULT_CLOSE_REASON", "Connection closed"
)  # Used when a close event carries no reason
SOCKET_CLOSED_REASON = _get_env_str("SOCKET_CLOSED_REASON", "Socket closed abruptly")

# Ports on which the transport is asked to negotiate TLS
TLS_PORTS = _get_env_int_tuple("TLS_PORTS", (6697, 9999, 443))

# Connection detail limits
MAX_NICKNAME_LENGTH = _get_env_int("MAX_NICKNAME_LENGTH", 32)
MIN_PORT = 1
MAX_PORT = 65535

# A selected channel with this many known members (or fewer) should ask for NAMES
USER_LIST_REFRESH_THRESHOLD = _get_env_int("USER_LIST_REFRESH_THRESHOLD", 1)

# Event pump
EVENT_QUEUE_MAXSIZE = _get_env_int(
    "EVENT_QUEUE_MAXSIZE", 0
)  # 0 means unbounded

# Channel name sigils accepted as-is by join; anything else gets CHANNEL_DEFAULT_SIGIL
CHANNEL_SIGILS = ("#", "&")
CHANNEL_DEFAULT_SIGIL = "#"

# Member prefixes / mode letters granting operator status (owner, admin, op, halfop)
OP_MODES = frozenset({"~", "&", "@", "%", "q", "a", "o"})
# Member prefixes / mode letters granting voice
VOICE_MODES = frozenset({"+", "v"})
# Channel mode letters that change a member prefix
MEMBER_PREFIX_MODE_LETTERS = frozenset("qaohv")

# Numerics already covered by dedicated events (welcome, lusers, whois, list,
# topic, names, motd); anything else is echoed to the server log as raw text
IGNORED_NUMERICS = frozenset(
    {
        1, 2, 3, 4, 5,
        250, 251, 252, 253, 254, 255,
        265, 266,
        301,
        305, 306,
        311, 312, 313, 317, 318, 319, 378,
        321, 322, 323,
        331, 332,
        353,
        366,
        372, 375, 376,
    }
)

# Protocol error types that reject a pending nickname change
NICK_REJECTION_ERRORS = frozenset(
    {"nick_in_use", "erroneous_nickname", "nickname_in_use", "433", "432"}
)
