import os

import pytest

# Keep log output quiet and deterministic regardless of the developer's shell
os.environ.setdefault("IRCSESSION_CONSOLE_LOG", "false")

from ircsession.config import ConnectDetails  # noqa: E402
from ircsession.protocol.events import Registered, UserJoined  # noqa: E402
from ircsession.sync import SessionSynchronizer  # noqa: E402
from tests.fixtures.event_source import RecordingEventSource  # noqa: E402
from tests.fixtures.sample_details import VALID_DETAILS  # noqa: E402


@pytest.fixture
def details() -> ConnectDetails:
    return ConnectDetails(**VALID_DETAILS)


@pytest.fixture
def source() -> RecordingEventSource:
    return RecordingEventSource()


@pytest.fixture
def sync(source) -> SessionSynchronizer:
    return SessionSynchronizer(source)


@pytest.fixture
def connected(sync, source, details) -> SessionSynchronizer:
    """Synchronizer registered as alice on chat.example:6667, sent list cleared."""
    sync.connect(details)
    source.connected = True
    sync.handle_event(Registered(nick=details.nickname))
    source.clear()
    return sync


@pytest.fixture
def joined(connected, source) -> SessionSynchronizer:
    """Connected synchronizer that has joined #test with bob present."""
    connected.join_channel("#test")
    connected.handle_event(UserJoined("#test", "alice"))
    connected.handle_event(UserJoined("#test", "bob", ident="b", hostname="host.b"))
    source.clear()
    return connected
