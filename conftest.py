"""Root conftest: pins chat_client settings before any test imports them.

Process environment wins over a developer's ``.env``, so these values keep
the suite independent of local configuration.
"""
from __future__ import annotations

import os

_TEST_ENV = {
    "CHAT_API_URL": "http://chat.test/api",
    "CHAT_SOCKET_URL": "",
    "SOCKET_TRANSPORTS": '["websocket", "polling"]',
    "SOCKET_CONNECT_TIMEOUT_SECONDS": "10",
    "RECONNECT_ENABLED": "true",
    "RECONNECT_ATTEMPTS": "0",
    "TOKEN_EXPIRY_LEEWAY_SECONDS": "30",
}

os.environ.update(_TEST_ENV)
os.environ.pop("CHAT_ACCESS_TOKEN", None)
