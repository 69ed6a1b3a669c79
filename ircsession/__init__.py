"""IRC session state synchronization.

Keeps an immutable model of one IRC server session (server log, channels,
private conversations, members, history and channel discovery) in step with
typed protocol events and user commands.
"""

from .config import ConnectDetails  # noqa: F401
from .errors import SessionError  # noqa: F401
from .state import ConnectionState, SessionState  # noqa: F401
from .sync import EventPump, SessionSynchronizer  # noqa: F401

__version__ = "0.5.0"

__all__ = [
    "ConnectDetails",
    "ConnectionState",
    "EventPump",
    "SessionError",
    "SessionState",
    "SessionSynchronizer",
    "__version__",
]
