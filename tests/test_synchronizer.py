"""Tests for SessionSynchronizer: commit ordering, notification and scenarios."""

import logging

import pytest

from ircsession.errors import AlreadyJoinedError, CommandError, NotConnectedError
from ircsession.protocol.commands import (
    Connect,
    Disconnect,
    Join,
    ListChannels,
    NamesRefresh,
    Nick,
    Part,
    Privmsg,
)
from ircsession.protocol.events import (
    ChannelListEnded,
    ChannelListItem,
    ChannelListStarted,
    Closed,
    Kicked,
    MessageReceived,
    NickChanged,
    Registered,
    UserJoined,
    UserListReceived,
    UserParted,
    UserRecord,
)
from ircsession.protocol.source import ProtocolEventSource
from ircsession.state.models import ConnectionState, MessageType
from ircsession.sync import SessionSynchronizer
from ircsession.sync.signals import ActiveViewInvalidated, ActiveViewSuggested
from tests.fixtures.event_source import RecordingEventSource
from tests.fixtures.sample_details import CHANNEL_ID, SERVER_ID, VALID_DETAILS


def test_recording_source_satisfies_protocol(source):
    assert isinstance(source, ProtocolEventSource)


def test_initial_state_is_empty(sync):
    assert sync.state.server is None
    assert sync.state.connection_state is ConnectionState.DISCONNECTED
    assert sync.state.channels == {}


class TestConnectFlow:
    def test_connect_accepts_mapping(self, sync, source):
        sync.connect(VALID_DETAILS)
        assert sync.state.connection_state is ConnectionState.CONNECTING
        connect = source.of_type(Connect)[0]
        assert connect.request.auto_reconnect is False
        assert connect.request.nick == "alice"

    def test_invalid_details_rejected_before_state_change(self, sync, source):
        with pytest.raises(CommandError):
            sync.connect({"host": "", "port": 6667, "nickname": "alice"})
        assert sync.state.server is None
        assert source.sent == []

    def test_registration_then_list(self, sync, source, details):
        sync.connect(details)
        sync.handle_event(Registered("alice"))
        assert sync.state.connection_state is ConnectionState.CONNECTED
        assert source.of_type(ListChannels)

    def test_disconnect_while_connecting_resets_immediately(self, sync, source, details):
        sync.connect(details)
        sync.disconnect()
        assert sync.state.connection_state is ConnectionState.DISCONNECTED
        assert source.of_type(Disconnect)
        # A late close from the transport changes nothing
        before = sync.state
        sync.handle_event(Closed("late"))
        assert sync.state is before

    def test_disconnect_live_waits_for_close(self, joined, source):
        joined.disconnect("bye")
        assert joined.state.connection_state is ConnectionState.CONNECTED
        assert source.sent == [Disconnect("bye")]
        source.connected = False
        joined.handle_event(Closed("bye"))
        assert joined.state.connection_state is ConnectionState.DISCONNECTED
        assert list(joined.state.channels) == [SERVER_ID]


class TestCommands:
    def test_join_returns_channel_id(self, connected, source):
        channel_id = connected.join_channel("Test")
        assert channel_id == CHANNEL_ID
        assert source.sent == [Join("#Test")]

    def test_join_existing_suggests_view_and_raises(self, joined):
        signals = []
        joined.add_signal_listener(signals.append)
        with pytest.raises(AlreadyJoinedError):
            joined.join_channel("#test")
        assert signals == [ActiveViewSuggested(CHANNEL_ID)]

    def test_rejected_command_leaves_state_untouched(self, sync, source):
        seen = []
        sync.subscribe(seen.append)
        before = sync.state
        with pytest.raises(NotConnectedError):
            sync.join_channel("#test")
        assert sync.state is before
        assert seen == []
        assert source.sent == []

    def test_part_is_optimistic(self, joined, source):
        joined.part_channel(CHANNEL_ID, "bye")
        assert CHANNEL_ID not in joined.state.channels
        assert source.sent == [Part("#test", "bye")]
        # The server's echo of our part is a no-op
        before = joined.state
        joined.handle_event(UserParted("#test", "alice", "bye"))
        assert joined.state is before

    def test_send_message_echo(self, joined, source):
        joined.send_message(CHANNEL_ID, "hello")
        assert source.sent == [Privmsg("#test", "hello")]
        assert joined.state.channels[CHANNEL_ID].messages[-1].is_self

    def test_nick_confirmed_by_server(self, joined, source):
        joined.change_nick("alicia")
        assert source.sent == [Nick("alicia")]
        assert joined.state.server.nickname == "alice"
        joined.handle_event(NickChanged("alice", "alicia", ("#test",)))
        assert joined.state.server.nickname == "alicia"
        assert joined.state.channels[CHANNEL_ID].has_user("alicia")

    def test_channel_selected_requests_refresh_for_sparse_channel(self, connected, source):
        connected.join_channel("#test")
        source.clear()
        assert connected.channel_selected(CHANNEL_ID)
        assert source.sent == [NamesRefresh("#test")]

    def test_channel_selected_skips_populated_channel(self, joined, source):
        assert not joined.channel_selected(CHANNEL_ID)
        assert not joined.channel_selected(SERVER_ID)
        assert not joined.channel_selected("missing")
        assert source.sent == []

    def test_set_away_and_raw(self, connected, source):
        connected.set_away("brb")
        connected.send_raw("WHOIS bob")
        connected.list_available_channels()
        assert [type(c).__name__ for c in source.sent] == ["Raw", "Raw", "ListChannels"]


class TestNotification:
    def test_subscribers_get_each_committed_state(self, joined):
        seen = []
        unsubscribe = joined.subscribe(seen.append)
        joined.handle_event(MessageReceived("bob", "#test", "one"))
        joined.handle_event(MessageReceived("bob", "#test", "two"))
        assert [s.channels[CHANNEL_ID].messages[-1].content for s in seen] == ["one", "two"]
        assert seen[-1] is joined.state
        unsubscribe()
        joined.handle_event(MessageReceived("bob", "#test", "three"))
        assert len(seen) == 2

    def test_noop_events_do_not_notify(self, joined):
        seen = []
        joined.subscribe(seen.append)
        joined.handle_event(MessageReceived("bob", "#unknown", "hi"))
        joined.handle_event(UserParted("#unknown", "bob"))
        assert seen == []

    def test_commands_sent_before_subscribers_run(self, connected, source):
        observed = []
        connected.subscribe(lambda state: observed.append(list(source.sent)))
        connected.join_channel("#test")
        assert observed == [[Join("#test")]]

    def test_failing_subscriber_does_not_break_commit(self, joined, caplog):
        def broken(state):
            raise RuntimeError("render failed")

        seen = []
        joined.subscribe(broken)
        joined.subscribe(seen.append)
        with caplog.at_level(logging.ERROR, logger="ircsession"):
            joined.handle_event(MessageReceived("bob", "#test", "hi"))
        assert len(seen) == 1
        assert "render failed" in caplog.text

    def test_transport_failure_still_notifies(self, details, caplog):
        class BrokenSource(RecordingEventSource):
            def send(self, command):
                raise OSError("socket closed")

        sync = SessionSynchronizer(BrokenSource())
        seen, signals = [], []
        sync.subscribe(seen.append)
        sync.add_signal_listener(signals.append)
        with caplog.at_level(logging.ERROR, logger="ircsession"):
            sync.connect(details)
        assert sync.state.connection_state is ConnectionState.CONNECTING
        assert seen == [sync.state]
        assert signals == [ActiveViewSuggested(SERVER_ID)]
        assert "Forwarding Connect failed" in caplog.text

    def test_self_kick_signal(self, joined):
        signals = []
        joined.add_signal_listener(signals.append)
        joined.handle_event(Kicked("#test", "alice", "bob", "bye"))
        assert signals == [ActiveViewInvalidated(CHANNEL_ID, "Kicked by bob")]

    def test_signal_listener_unsubscribe(self, joined):
        signals = []
        remove = joined.add_signal_listener(signals.append)
        remove()
        remove()
        joined.part_channel(CHANNEL_ID)
        assert signals == []


class TestReentrancy:
    def test_submission_from_subscriber_is_deferred(self, joined, source):
        order = []

        def reply_once(state):
            order.append(len(state.channels[CHANNEL_ID].messages))
            if len(order) == 1:
                joined.send_message(CHANNEL_ID, "auto-reply")

        joined.subscribe(reply_once)
        joined.handle_event(MessageReceived("bob", "#test", "ping"))
        messages = joined.state.channels[CHANNEL_ID].messages
        assert [m.content for m in messages[-2:]] == ["ping", "auto-reply"]
        assert order[1] == order[0] + 1
        assert source.sent == [Privmsg("#test", "auto-reply")]

    def test_rejected_deferred_command_is_logged(self, joined, caplog):
        def bad(state):
            joined.send_message("missing", "hi")

        joined.subscribe(bad)
        with caplog.at_level(logging.WARNING, logger="ircsession"):
            joined.handle_event(MessageReceived("bob", "#test", "ping"))
        assert "Deferred send rejected" in caplog.text

    def test_join_from_subscriber_returns_none_and_applies(self, connected, source):
        results = []

        def join_once(state):
            if not results:
                results.append(connected.join_channel("#test"))

        connected.subscribe(join_once)
        connected.handle_event(MessageReceived("bob", "alice", "come to #test"))
        assert results == [None]
        assert CHANNEL_ID in connected.state.channels
        assert source.of_type(Join) == [Join("#test")]


class TestScenarios:
    def test_full_session(self, sync, source, details):
        sync.connect(details)
        source.connected = True
        sync.handle_event(Registered("alice"))
        sync.handle_event(ChannelListStarted())
        sync.handle_event(ChannelListItem("#python", 500))
        sync.handle_event(ChannelListItem("#test", 2))
        sync.handle_event(ChannelListEnded())
        assert [c.name for c in sync.state.available_channels] == ["#python", "#test"]

        sync.join_channel("#test")
        sync.handle_event(UserJoined("#test", "alice"))
        sync.handle_event(
            UserListReceived("#test", (UserRecord("alice"), UserRecord("bob", modes=("@",))))
        )
        assert sync.state.channels[CHANNEL_ID].get_user("bob").is_op

        sync.handle_event(MessageReceived("bob", "alice", "private hello"))
        assert f"{SERVER_ID}bob" in sync.state.channels

        source.connected = False
        sync.handle_event(Closed("Connection reset"))
        assert list(sync.state.channels) == [SERVER_ID]
        assert sync.state.server_log.messages[-1].type is MessageType.SYSTEM

    def test_source_may_be_any_protocol_implementation(self, details):
        source = RecordingEventSource(connected=True)
        sync = SessionSynchronizer(source)
        sync.connect(details)
        sync.disconnect()
        # Still connecting, so the reset is local even with a live transport
        assert sync.state.connection_state is ConnectionState.DISCONNECTED
