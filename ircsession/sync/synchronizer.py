"""Session state synchronizer.

Owns the current :class:`SessionState` for one server connection and is its
only writer. Protocol events and user commands both pass through
``_submit``, which runs exactly one reduction to completion (state swap,
command forwarding, subscriber and signal notification) before admitting the
next. Submissions made while a commit is running, typically from a listener
reacting to a new snapshot, are queued and run afterwards in order.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Mapping
from typing import Any

from ..config.model import ConnectDetails, coerce_connect_details
from ..errors import AlreadyJoinedError, SessionError, log_error
from ..logs.logger import logger
from ..protocol.commands import OutboundCommand
from ..protocol.events import ProtocolEvent
from ..protocol.source import ProtocolEventSource
from ..state.casefold import make_channel_id, normalize_channel_name
from ..state.derivation import needs_user_list_refresh
from ..state.models import SessionState
from . import intents
from .reducer import reduce_event
from .signals import ActiveViewSuggested, Signal
from .transition import Transition

StateListener = Callable[[SessionState], Any]
SignalListener = Callable[[Signal], Any]
Step = Callable[[SessionState], Transition]


class SessionSynchronizer:
    """Single-writer reducer over the session state of one connection.

    Attributes:
        source (ProtocolEventSource): Transport receiving outbound commands.
    """

    def __init__(
        self, source: ProtocolEventSource, *, state: SessionState | None = None
    ) -> None:
        self.source = source
        self._state = state or SessionState()
        self._subscribers: list[StateListener] = []
        self._signal_listeners: list[SignalListener] = []
        self._pending: deque[tuple[Step, str]] = deque()
        self._committing = False

    @property
    def state(self) -> SessionState:
        """Read-only snapshot of the current session state."""
        return self._state

    # --- Presentation-side registration ---

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener(state)`` after every committed mutation.

        Returns:
            A callable removing the subscription.
        """
        self._subscribers.append(listener)
        return lambda: self._remove(self._subscribers, listener)

    def add_signal_listener(self, listener: SignalListener) -> Callable[[], None]:
        """Call ``listener(signal)`` for active-view signals."""
        self._signal_listeners.append(listener)
        return lambda: self._remove(self._signal_listeners, listener)

    @staticmethod
    def _remove(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)

    # --- Inbound events ---

    def handle_event(self, event: ProtocolEvent) -> None:
        """Reduce one protocol event. Never raises for stale references."""
        logger.log_event("event", "received", level=logging.DEBUG, event=type(event).__name__)
        self._submit(lambda state: reduce_event(state, event), type(event).__name__)

    # --- User commands ---

    def connect(self, details: ConnectDetails | Mapping[str, Any]) -> None:
        """Start connecting; raises ``AlreadyConnectingError`` unless Disconnected."""
        validated = coerce_connect_details(details)
        self._submit(lambda state: intents.connect(state, validated), "connect")

    def disconnect(self, reason: str | None = None) -> None:
        transport_live = bool(self.source.is_connected)
        self._submit(
            lambda state: intents.disconnect(state, reason, transport_live=transport_live),
            "disconnect",
        )

    def join_channel(self, name: str) -> str | None:
        """Join a channel optimistically and return its channel id.

        Returns None when called from a listener during a commit: the join is
        queued, and a rejection is then only logged.

        Raises:
            AlreadyJoinedError: The channel exists; ``channel_id`` on the error
                names it and an ``ActiveViewSuggested`` signal is emitted.
        """
        try:
            committed = self._submit(lambda state: intents.join_channel(state, name), "join")
        except AlreadyJoinedError as e:
            self._emit_signals((ActiveViewSuggested(e.channel_id),))
            raise
        if not committed:
            return None
        server = self._state.server
        server_id = server.server_id if server else ""
        return make_channel_id(server_id, normalize_channel_name(name))

    def part_channel(self, channel_id: str, reason: str | None = None) -> None:
        self._submit(lambda state: intents.part_channel(state, channel_id, reason), "part")

    def send_message(self, channel_id: str, text: str) -> None:
        self._submit(lambda state: intents.send_message(state, channel_id, text), "send")

    def change_nick(self, new_nick: str) -> None:
        self._submit(lambda state: intents.change_nick(state, new_nick), "nick")

    def request_user_list_refresh(self, channel_id: str) -> None:
        self._submit(
            lambda state: intents.request_user_list_refresh(state, channel_id),
            "names",
        )

    def list_available_channels(self) -> None:
        self._submit(intents.list_available_channels, "list")

    def send_raw(self, line: str) -> None:
        self._submit(lambda state: intents.send_raw(state, line), "raw")

    def set_away(self, message: str | None = None) -> None:
        self._submit(lambda state: intents.set_away(state, message), "away")

    def channel_selected(self, channel_id: str) -> bool:
        """Presentation hook: a channel became the active view.

        Requests a user-list refresh when the channel knows suspiciously few
        members. Returns True if a refresh was requested.
        """
        channel = self._state.channels.get(channel_id)
        if channel is None or not self._state.server or not self._state.server.is_connected:
            return False
        if not needs_user_list_refresh(channel):
            return False
        self.request_user_list_refresh(channel_id)
        return True

    # --- Single mutation entry point ---

    def _submit(self, step: Step, label: str) -> bool:
        """Run ``step`` now, or queue it behind the running commit.

        Returns True when the step was committed before returning.
        """
        if self._committing:
            self._pending.append((step, label))
            logger.log_event("sync", "deferred", level=logging.DEBUG, step=label)
            return False
        self._committing = True
        try:
            self._commit(step, label)
        finally:
            try:
                self._drain()
            finally:
                self._committing = False
        return True

    def _drain(self) -> None:
        while self._pending:
            step, label = self._pending.popleft()
            try:
                self._commit(step, label)
            except SessionError as e:
                log_error(f"Deferred {label} rejected", e, level=logging.WARNING)

    def _commit(self, step: Step, label: str) -> None:
        previous = self._state
        try:
            transition = step(previous)
        except SessionError as e:
            logger.log_event(
                "command",
                "rejected",
                level=logging.INFO,
                step=label,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        self._state = transition.state
        if transition.state.connection_state is not previous.connection_state:
            logger.log_event(
                "session",
                "state_changed",
                old=previous.connection_state.value,
                new=transition.state.connection_state.value,
            )
        for command in transition.commands:
            self._forward(command)
        if transition.state is not previous:
            self._notify(transition.state)
        self._emit_signals(transition.signals)

    def _forward(self, command: OutboundCommand) -> None:
        logger.log_event(
            "command",
            "forward",
            level=logging.DEBUG,
            command=type(command).__name__,
        )
        # The state is already committed; a transport failure must not keep
        # subscribers or signal listeners from seeing it.
        try:
            self.source.send(command)
        except Exception as e:  # noqa: BLE001
            log_error(
                f"Forwarding {type(command).__name__} failed",
                e,
                context={"command": type(command).__name__},
            )

    def _notify(self, state: SessionState) -> None:
        for listener in list(self._subscribers):
            try:
                listener(state)
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "sync",
                    "subscriber_error",
                    level=logging.ERROR,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def _emit_signals(self, signals: tuple[Signal, ...]) -> None:
        for signal in signals:
            logger.log_event(
                "sync",
                "signal",
                level=logging.DEBUG,
                signal=type(signal).__name__,
                channel_id=signal.channel_id,
            )
            for listener in list(self._signal_listeners):
                try:
                    listener(signal)
                except Exception as e:  # noqa: BLE001
                    logger.log_event(
                        "sync",
                        "signal_listener_error",
                        level=logging.ERROR,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
