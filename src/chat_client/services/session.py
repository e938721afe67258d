"""One authenticated session: store, connection and view with a shared lifetime."""
from __future__ import annotations

import logging
from types import TracebackType

import httpx

from chat_client.application.ports.credentials import CredentialProvider
from chat_client.application.ports.gateway import ConversationGateway
from chat_client.application.ports.transport import RealtimeTransport
from chat_client.services.connection_manager import RealtimeConnectionManager
from chat_client.services.store import ConversationStore
from chat_client.services.view import ChatView

logger = logging.getLogger(__name__)


class ChatSession:
    """Created on authentication, closed on logout or credential change.

    The session remembers the credential it was opened with; a different
    credential always means a new session and a new connection.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        gateway: ConversationGateway,
        transport: RealtimeTransport,
        *,
        socket_url: str,
        reconnects: bool = True,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.credential = credentials.get_credential()
        self.store = ConversationStore()
        self.connection = RealtimeConnectionManager(
            transport,
            self.store,
            gateway,
            socket_url=socket_url,
            reconnects=reconnects,
        )
        self.view = ChatView(self.store, self.connection, gateway)
        self._http_client = http_client
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> bool:
        return await self.connection.connect(self.credential)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self.connection.close()
        finally:
            if self._http_client is not None:
                await self._http_client.aclose()
        logger.info("Chat session closed")

    async def __aenter__(self) -> ChatSession:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
