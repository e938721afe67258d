from __future__ import annotations

import asyncio
import logging
from typing import Callable

from chat_client.config import Settings, settings as default_settings
from chat_client.infrastructure.auth.token_store import TokenStore
from chat_client.infrastructure.http.gateway import HttpConversationGateway, create_http_client
from chat_client.infrastructure.realtime.socketio_transport import SocketIOTransport
from chat_client.services.session import ChatSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings, TokenStore], ChatSession]


def create_session(settings: Settings, tokens: TokenStore) -> ChatSession:
    """Wire the httpx gateway and the Socket.IO transport into a session."""
    http_client = create_http_client(settings.CHAT_API_URL, settings.HTTP_TIMEOUT_SECONDS)
    return ChatSession(
        tokens,
        HttpConversationGateway(http_client, tokens),
        SocketIOTransport(settings),
        socket_url=settings.socket_url,
        reconnects=settings.RECONNECT_ENABLED,
        http_client=http_client,
    )


class ChatApp:
    """Keeps at most one live :class:`ChatSession`, bound to the current credential.

    Logging out, switching credentials or having the server reject the
    credential tears the session down; the next :meth:`open_session` builds a
    fresh one.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        tokens: TokenStore | None = None,
        session_factory: SessionFactory = create_session,
    ) -> None:
        self._settings = settings or default_settings
        self.tokens = tokens or TokenStore(expiry_leeway=self._settings.TOKEN_EXPIRY_LEEWAY_SECONDS)
        self._session_factory = session_factory
        self._session: ChatSession | None = None
        self._teardowns: set[asyncio.Task[None]] = set()
        self.tokens.subscribe(self._on_credential_changed)

    @property
    def session(self) -> ChatSession | None:
        return self._session

    async def login(self, access_token: str, refresh_token: str | None = None) -> ChatSession:
        self.tokens.set_tokens(access_token, refresh_token)
        return await self.open_session()

    async def open_session(self) -> ChatSession:
        credential = self.tokens.get_credential()
        current = self._session
        if current is not None and not current.closed and current.credential == credential:
            return current
        await self.close_session()

        session = self._session_factory(self._settings, self.tokens)
        self._session = session
        await session.start()
        return session

    async def logout(self) -> None:
        self.tokens.clear()
        await self.close_session()

    async def close_session(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            await session.close()
        if self._teardowns:
            results = await asyncio.gather(*self._teardowns, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error("Session teardown failed: %s", result)

    async def aclose(self) -> None:
        await self.close_session()

    def _on_credential_changed(self, credential: str | None) -> None:
        session = self._session
        if session is None or session.credential == credential:
            return
        self._session = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Credential changed outside the event loop, session left unclosed")
            return
        logger.info("Credential changed, tearing down chat session")
        task = loop.create_task(session.close(), name="chat-session-teardown")
        self._teardowns.add(task)
        task.add_done_callback(self._teardowns.discard)
