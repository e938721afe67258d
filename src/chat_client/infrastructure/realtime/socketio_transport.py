"""Socket.IO implementation of the realtime transport port."""
from __future__ import annotations

import logging
from typing import Any

import socketio
from socketio import exceptions as socketio_exceptions

from chat_client.application.exceptions import NetworkError
from chat_client.application.ports.transport import EventHandler
from chat_client.config import Settings

logger = logging.getLogger(__name__)


class SocketIOTransport:
    """Implements application.ports.transport.RealtimeTransport.

    Reconnection after an established connection drops is handled by the
    Socket.IO client itself; a failed initial handshake is not retried.
    """

    def __init__(self, settings: Settings) -> None:
        self._transports = list(settings.SOCKET_TRANSPORTS)
        self._wait_timeout = settings.SOCKET_CONNECT_TIMEOUT_SECONDS
        self._client = socketio.AsyncClient(
            reconnection=settings.RECONNECT_ENABLED,
            reconnection_attempts=settings.RECONNECT_ATTEMPTS,
            reconnection_delay=settings.RECONNECT_DELAY_SECONDS,
            reconnection_delay_max=settings.RECONNECT_DELAY_MAX_SECONDS,
            randomization_factor=settings.RECONNECT_RANDOMIZATION,
            logger=False,
            engineio_logger=False,
        )

    def on(self, event: str, handler: EventHandler) -> None:
        self._client.on(event, handler)

    async def connect(self, url: str, auth: dict[str, str]) -> None:
        try:
            await self._client.connect(
                url,
                auth=auth,
                transports=self._transports,
                wait_timeout=self._wait_timeout,
            )
        except socketio_exceptions.ConnectionError as exc:
            raise NetworkError(f"Handshake with {url} failed: {exc}") from exc

    async def emit(self, event: str, data: dict[str, Any]) -> None:
        try:
            await self._client.emit(event, data)
        except socketio_exceptions.SocketIOError as exc:
            raise NetworkError(f"Emit {event} failed: {exc}") from exc

    async def disconnect(self) -> None:
        # shutdown() also stops a reconnect loop that disconnect() would leave running.
        await self._client.shutdown()
        logger.debug("Socket.IO client shut down")
