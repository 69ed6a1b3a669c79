"""
Connection details used across tests.
"""

HOST = "chat.example"
PORT = 6667
NICK = "alice"
SERVER_ID = f"{HOST}:{PORT}"
CHANNEL_ID = f"{SERVER_ID}#test"

VALID_DETAILS = {
    "host": HOST,
    "port": PORT,
    "nickname": NICK,
}

TLS_DETAILS = {
    "host": "secure.example",
    "port": 6697,
    "nickname": NICK,
    "password": "hunter2",
    "realName": "Alice Example",
}

INVALID_DETAILS = [
    {"host": "", "port": PORT, "nickname": NICK},
    {"host": "bad host", "port": PORT, "nickname": NICK},
    {"host": HOST, "port": 0, "nickname": NICK},
    {"host": HOST, "port": 70000, "nickname": NICK},
    {"host": HOST, "port": PORT, "nickname": ""},
    {"host": HOST, "port": PORT, "nickname": "two words"},
    {"host": HOST, "port": PORT, "nickname": "x" * 40},
]
