"""Session synchronization: reducers, the single-writer synchronizer and the event pump."""

from .pump import EventPump  # noqa: F401
from .reducer import reduce_event  # noqa: F401
from .signals import ActiveViewInvalidated, ActiveViewSuggested, Signal  # noqa: F401
from .synchronizer import SessionSynchronizer  # noqa: F401
from .transition import Transition  # noqa: F401

__all__ = [
    "ActiveViewInvalidated",
    "ActiveViewSuggested",
    "EventPump",
    "SessionSynchronizer",
    "Signal",
    "Transition",
    "reduce_event",
]
