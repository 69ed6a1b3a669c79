"""Tests for command reduction: validation, optimistic updates and commands."""

import pytest

from ircsession.config import ConnectDetails
from ircsession.constants import DEFAULT_PART_REASON, DEFAULT_QUIT_REASON
from ircsession.errors import (
    AlreadyConnectingError,
    AlreadyJoinedError,
    CommandError,
    NotConnectedError,
    UnknownChannelError,
)
from ircsession.protocol.commands import (
    Action,
    Connect,
    Disconnect,
    Join,
    ListChannels,
    NamesRefresh,
    Nick,
    Notice,
    Part,
    Privmsg,
    Raw,
)
from ircsession.protocol.events import MessageReceived, Registered, UserJoined
from ircsession.state.models import ChannelKind, ConnectionState, MessageType, SessionState
from ircsession.sync import intents
from ircsession.sync.reducer import reduce_event
from ircsession.sync.signals import ActiveViewInvalidated, ActiveViewSuggested
from tests.fixtures.sample_details import CHANNEL_ID, SERVER_ID, VALID_DETAILS


@pytest.fixture
def details():
    return ConnectDetails(**VALID_DETAILS)


@pytest.fixture
def connecting(details):
    return intents.connect(SessionState(), details).state


@pytest.fixture
def connected(connecting):
    return reduce_event(connecting, Registered("alice")).state


@pytest.fixture
def in_channel(connected):
    state = intents.join_channel(connected, "#test").state
    return reduce_event(state, UserJoined("#test", "alice")).state


class TestConnect:
    def test_connect_builds_fresh_session(self, details):
        transition = intents.connect(SessionState(), details)
        state = transition.state
        assert state.connection_state is ConnectionState.CONNECTING
        assert list(state.channels) == [SERVER_ID]
        log = state.server_log
        assert log.kind is ChannelKind.SERVER_LOG
        assert log.name == "chat.example"
        assert log.messages[0].content == (
            "Attempting to connect to chat.example:6667 as alice..."
        )
        assert transition.commands == (Connect(details.to_request()),)
        assert transition.signals == (ActiveViewSuggested(SERVER_ID),)

    @pytest.mark.parametrize("fixture", ["connecting", "connected"])
    def test_connect_while_active_raises(self, request, details, fixture):
        state = request.getfixturevalue(fixture)
        with pytest.raises(AlreadyConnectingError):
            intents.connect(state, details)

    def test_reconnect_after_disconnect_drops_old_log(self, connected, details):
        state = intents.disconnect(connected, transport_live=False).state
        state = intents.connect(state, details).state
        assert len(state.server_log.messages) == 1


class TestDisconnect:
    def test_noop_without_session(self):
        transition = intents.disconnect(SessionState(), transport_live=False)
        assert transition.commands == ()

    def test_live_connected_waits_for_close_event(self, in_channel):
        transition = intents.disconnect(in_channel, "bye", transport_live=True)
        assert transition.state is in_channel
        assert transition.commands == (Disconnect("bye"),)

    def test_connecting_synthesizes_close(self, connecting):
        transition = intents.disconnect(connecting, transport_live=True)
        assert transition.state.connection_state is ConnectionState.DISCONNECTED
        assert transition.commands == (Disconnect(DEFAULT_QUIT_REASON),)
        assert transition.state.server_log.messages[-1].content == (
            f"Disconnected: {DEFAULT_QUIT_REASON}"
        )

    def test_dead_transport_synthesizes_close(self, in_channel):
        state = intents.disconnect(in_channel, "gone", transport_live=False).state
        assert state.connection_state is ConnectionState.DISCONNECTED
        assert list(state.channels) == [SERVER_ID]


class TestJoin:
    def test_requires_connection(self, connecting):
        with pytest.raises(NotConnectedError):
            intents.join_channel(connecting, "#test")

    def test_placeholder_channel(self, connected):
        transition = intents.join_channel(connected, "Test")
        channel = transition.state.channels[CHANNEL_ID]
        assert channel.name == "#Test"
        assert channel.kind is ChannelKind.CHANNEL
        assert list(channel.users) == ["alice"]
        assert channel.messages[-1].content == "Joining #Test..."
        assert transition.commands == (Join("#Test"),)
        assert transition.signals == (ActiveViewSuggested(CHANNEL_ID),)

    def test_already_joined_is_case_insensitive(self, in_channel):
        with pytest.raises(AlreadyJoinedError) as exc:
            intents.join_channel(in_channel, "#TEST")
        assert exc.value.channel_id == CHANNEL_ID

    @pytest.mark.parametrize("name", ["", "   ", "#", "&", "#a b", "#a,b", "#a\x07"])
    def test_invalid_names(self, connected, name):
        with pytest.raises(CommandError):
            intents.join_channel(connected, name)


class TestPart:
    def test_part_removes_immediately(self, in_channel):
        transition = intents.part_channel(in_channel, CHANNEL_ID)
        assert CHANNEL_ID not in transition.state.channels
        assert transition.commands == (Part("#test", DEFAULT_PART_REASON),)
        assert transition.signals == (ActiveViewInvalidated(CHANNEL_ID, "Left channel"),)

    def test_part_with_reason(self, in_channel):
        transition = intents.part_channel(in_channel, CHANNEL_ID, "later")
        assert transition.commands == (Part("#test", "later"),)

    def test_closing_private_conversation_sends_nothing(self, connected):
        state = reduce_event(connected, MessageReceived("bob", "alice", "hi")).state
        transition = intents.part_channel(state, f"{SERVER_ID}bob")
        assert f"{SERVER_ID}bob" not in transition.state.channels
        assert transition.commands == ()

    def test_unknown_channel(self, connected):
        with pytest.raises(UnknownChannelError):
            intents.part_channel(connected, f"{SERVER_ID}#nope")

    def test_server_log_cannot_be_parted(self, connected):
        with pytest.raises(CommandError):
            intents.part_channel(connected, SERVER_ID)


class TestSendMessage:
    def test_plain_message_echoed(self, in_channel):
        transition = intents.send_message(in_channel, CHANNEL_ID, "hello")
        message = transition.state.channels[CHANNEL_ID].messages[-1]
        assert message.is_self
        assert message.nickname == "alice"
        assert message.type is MessageType.MESSAGE
        assert transition.commands == (Privmsg("#test", "hello"),)

    def test_me_action(self, in_channel):
        transition = intents.send_message(in_channel, CHANNEL_ID, "/me waves")
        message = transition.state.channels[CHANNEL_ID].messages[-1]
        assert message.type is MessageType.ACTION
        assert message.content == "waves"
        assert transition.commands == (Action("#test", "waves"),)

    @pytest.mark.parametrize("text", ["/me ", "/me    "])
    def test_empty_me_action_rejected(self, in_channel, text):
        with pytest.raises(CommandError, match="Invalid /me format"):
            intents.send_message(in_channel, CHANNEL_ID, text)

    def test_notice(self, in_channel):
        transition = intents.send_message(in_channel, CHANNEL_ID, "/notice bob hi there")
        assert transition.commands == (Notice("bob", "hi there"),)
        assert transition.state is in_channel

    @pytest.mark.parametrize("text", ["/notice", "/notice bob", "/query"])
    def test_malformed_local_commands(self, in_channel, text):
        with pytest.raises(CommandError) as exc:
            intents.send_message(in_channel, CHANNEL_ID, text)
        assert exc.value.command_input == text

    def test_query_writes_hint_only(self, in_channel):
        transition = intents.send_message(in_channel, CHANNEL_ID, "/query bob")
        assert transition.commands == ()
        hint = transition.state.server_log.messages[-1]
        assert hint.type is MessageType.INFO
        assert "bob" in hint.content

    def test_unrecognized_slash_text_is_plain_message(self, in_channel):
        transition = intents.send_message(in_channel, CHANNEL_ID, "/noticeboard rules")
        assert transition.commands == (Privmsg("#test", "/noticeboard rules"),)

    def test_private_conversation_target_is_nick(self, connected):
        state = reduce_event(connected, MessageReceived("Bob", "alice", "hi")).state
        transition = intents.send_message(state, f"{SERVER_ID}bob", "yo")
        assert transition.commands == (Privmsg("Bob", "yo"),)

    def test_errors(self, in_channel, connecting):
        with pytest.raises(CommandError):
            intents.send_message(in_channel, CHANNEL_ID, "   ")
        with pytest.raises(CommandError):
            intents.send_message(in_channel, SERVER_ID, "hi")
        with pytest.raises(UnknownChannelError):
            intents.send_message(in_channel, f"{SERVER_ID}#nope", "hi")
        with pytest.raises(NotConnectedError):
            intents.send_message(connecting, SERVER_ID, "hi")


class TestNickAndMisc:
    def test_change_nick_is_staged(self, connected):
        transition = intents.change_nick(connected, " alicia ")
        assert transition.state.server.nickname == "alice"
        assert transition.state.server.pending_nickname == "alicia"
        assert transition.commands == (Nick("alicia"),)

    def test_same_nick_logs_info(self, connected):
        transition = intents.change_nick(connected, "alice")
        assert transition.commands == ()
        assert transition.state.server_log.messages[-1].content == (
            "You are already known as alice."
        )

    @pytest.mark.parametrize("nick", ["", "  ", "two words"])
    def test_invalid_nick(self, connected, nick):
        with pytest.raises(CommandError):
            intents.change_nick(connected, nick)

    def test_user_list_refresh(self, in_channel, connected):
        transition = intents.request_user_list_refresh(in_channel, CHANNEL_ID)
        assert transition.commands == (NamesRefresh("#test"),)
        assert intents.request_user_list_refresh(connected, SERVER_ID).commands == ()
        with pytest.raises(UnknownChannelError):
            intents.request_user_list_refresh(connected, f"{SERVER_ID}#nope")

    def test_list_available_channels(self, connected, connecting):
        assert intents.list_available_channels(connected).commands == (ListChannels(),)
        with pytest.raises(NotConnectedError):
            intents.list_available_channels(connecting)

    def test_send_raw(self, connected):
        assert intents.send_raw(connected, " WHOIS bob ").commands == (Raw("WHOIS bob"),)
        with pytest.raises(CommandError):
            intents.send_raw(connected, "  ")

    def test_set_away(self, connected):
        assert intents.set_away(connected, "lunch").commands == (Raw("AWAY :lunch"),)
        assert intents.set_away(connected).commands == (Raw("AWAY"),)
