"""Side signals emitted to the presentation layer.

The synchronizer does not own the "active view"; it only tells the
presentation layer when a view became invalid or when one should be shown.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ActiveViewInvalidated:
    """The channel is no longer valid as an active view (self-kick, part)."""

    channel_id: str
    reason: str


@dataclass(frozen=True, slots=True)
class ActiveViewSuggested:
    """The channel should become the active view (fresh join, already joined)."""

    channel_id: str


Signal = ActiveViewInvalidated | ActiveViewSuggested

__all__ = ["ActiveViewInvalidated", "ActiveViewSuggested", "Signal"]
