from __future__ import annotations

from typing import Literal

import httpx
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

_SOCKET_SCHEMES = frozenset({"http", "https", "ws", "wss"})


class Settings(BaseSettings):
    CHAT_API_URL: str = "http://localhost:8081"
    CHAT_SOCKET_URL: str | None = None
    CHAT_ACCESS_TOKEN: str | None = None

    HTTP_TIMEOUT_SECONDS: float = 10.0

    SOCKET_TRANSPORTS: list[Literal["websocket", "polling"]] = ["websocket", "polling"]
    SOCKET_CONNECT_TIMEOUT_SECONDS: float = 10.0

    RECONNECT_ENABLED: bool = True
    RECONNECT_ATTEMPTS: int = 0
    RECONNECT_DELAY_SECONDS: float = 1.0
    RECONNECT_DELAY_MAX_SECONDS: float = 5.0
    RECONNECT_RANDOMIZATION: float = 0.5

    TOKEN_EXPIRY_LEEWAY_SECONDS: int = 30

    LOG_LEVEL: str = "INFO"

    @property
    def socket_url(self) -> str:
        """Realtime endpoint; the API base without its ``/api`` suffix unless set explicitly."""
        if self.CHAT_SOCKET_URL:
            return self.CHAT_SOCKET_URL.strip()
        base = self.CHAT_API_URL.strip().rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return base

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


def is_valid_socket_url(url: str | None) -> bool:
    if not url:
        return False
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return False
    return parsed.scheme in _SOCKET_SCHEMES and bool(parsed.host)


settings = Settings()
