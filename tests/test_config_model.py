"""Tests for ConnectDetails validation and the derived connect request."""

import pytest

from ircsession.config import ConnectDetails, coerce_connect_details
from ircsession.constants import CLIENT_VERSION, DEFAULT_REAL_NAME
from ircsession.errors import CommandError
from tests.fixtures.sample_details import INVALID_DETAILS, TLS_DETAILS, VALID_DETAILS


def test_server_id_is_host_colon_port():
    details = ConnectDetails(**VALID_DETAILS)
    assert details.server_id == "chat.example:6667"
    assert not details.uses_tls


def test_strips_whitespace_and_blank_optionals():
    details = ConnectDetails.from_dict(
        {"host": " chat.example ", "port": 6667, "nickname": " alice ", "password": "  "}
    )
    assert details.host == "chat.example"
    assert details.nickname == "alice"
    assert details.password is None


def test_real_name_alias():
    details = ConnectDetails.from_dict(TLS_DETAILS)
    assert details.real_name == "Alice Example"
    assert details.uses_tls


@pytest.mark.parametrize("data", INVALID_DETAILS)
def test_invalid_details_raise_command_error(data):
    with pytest.raises(CommandError) as exc:
        ConnectDetails.from_dict(data)
    assert "Invalid connection details" in str(exc.value)


def test_details_are_frozen():
    details = ConnectDetails(**VALID_DETAILS)
    with pytest.raises(Exception):
        details.host = "other"  # type: ignore[misc]


def test_to_request_plain_port():
    request = ConnectDetails(**VALID_DETAILS).to_request()
    assert request.host == "chat.example"
    assert request.port == 6667
    assert request.nick == "alice"
    assert request.username == "alice"
    assert request.gecos == DEFAULT_REAL_NAME
    assert request.tls is False
    assert request.version == CLIENT_VERSION
    assert request.encoding == "utf8"
    assert request.auto_reconnect is False


def test_to_request_tls_port_and_password():
    request = ConnectDetails.from_dict(TLS_DETAILS).to_request()
    assert request.tls is True
    assert request.password == "hunter2"
    assert request.gecos == "Alice Example"


def test_to_dict_omits_unset_fields():
    assert ConnectDetails(**VALID_DETAILS).to_dict() == VALID_DETAILS


def test_coerce_accepts_model_or_mapping():
    details = ConnectDetails(**VALID_DETAILS)
    assert coerce_connect_details(details) is details
    assert coerce_connect_details(VALID_DETAILS) == details
