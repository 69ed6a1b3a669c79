"""Tests for identity normalization helpers."""

import pytest

from ircsession.state.casefold import (
    casefold,
    is_channel_name,
    make_channel_id,
    normalize_channel_name,
    same_name,
)


def test_casefold_lowercases_ascii_only():
    assert casefold("#Test") == "#test"
    # RFC 1459 specials are not folded
    assert casefold("Nick[]\\~") == "nick[]\\~"
    # Non-ASCII letters are left alone
    assert casefold("ÉCOLE") == "École"
    assert casefold("Ä") == "Ä"


def test_same_name_ignores_ascii_case():
    assert same_name("Alice", "alice")
    assert not same_name("alice", "alicia")
    assert not same_name(None, "alice")
    assert not same_name("alice", None)


@pytest.mark.parametrize(
    "name,expected",
    [("#chan", True), ("&local", True), ("alice", False), ("", False)],
)
def test_is_channel_name(name, expected):
    assert is_channel_name(name) is expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("test", "#test"),
        ("  #test  ", "#test"),
        ("&local", "&local"),
        ("", ""),
        ("   ", ""),
    ],
)
def test_normalize_channel_name(raw, expected):
    assert normalize_channel_name(raw) == expected


def test_make_channel_id_concatenates_without_separator():
    assert make_channel_id("chat.example:6667", "#Test") == "chat.example:6667#test"
    assert make_channel_id("chat.example:6667", "Bob") == "chat.example:6667bob"
