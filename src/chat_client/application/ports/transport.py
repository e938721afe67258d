from __future__ import annotations

from typing import Any, Callable, Coroutine, Protocol

EventHandler = Callable[..., Coroutine[Any, Any, None]]


class RealtimeTransport(Protocol):
    """Bidirectional, event-tagged channel with its own reconnection policy."""

    def on(self, event: str, handler: EventHandler) -> None: ...

    async def connect(self, url: str, auth: dict[str, str]) -> None: ...

    async def emit(self, event: str, data: dict[str, Any]) -> None: ...

    async def disconnect(self) -> None:
        """Close the channel and abandon any reconnection in progress."""
        ...
