"""Owns the realtime connection and translates between events and state."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

import pydantic

from chat_client.application.exceptions import AppError, NetworkError, Unauthorized
from chat_client.application.ports.gateway import ConversationGateway
from chat_client.application.ports.transport import EventHandler, RealtimeTransport
from chat_client.config import is_valid_socket_url
from chat_client.domain.events.conversation_updated import ConversationUpdated
from chat_client.domain.value_objects.enums import ConnectionState
from chat_client.infrastructure.realtime.protocol import (
    ChatRef,
    DeleteMessageIntent,
    EditMessageIntent,
    FINAL_DISCONNECT_REASONS,
    InboundEvent,
    OutboundEvent,
    SendMessageIntent,
    TransportEvent,
    dump,
    parse_inbound,
)
from chat_client.infrastructure.schemas.common import WireModel
from chat_client.services import conversation_service, message_service
from chat_client.services.store import ConversationStore

logger = logging.getLogger(__name__)


class RealtimeConnectionManager:
    """One live connection per credential.

    Outbound intents are fire-and-forget: nothing is inserted or changed
    locally until the server echoes the matching inbound event. Intents
    issued while not connected are logged and dropped.
    """

    def __init__(
        self,
        transport: RealtimeTransport,
        store: ConversationStore,
        gateway: ConversationGateway,
        *,
        socket_url: str,
        reconnects: bool = True,
    ) -> None:
        self._transport = transport
        self._store = store
        self._gateway = gateway
        self._socket_url = socket_url
        self._reconnects = reconnects
        self._closing = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._register_handlers()

    @property
    def state(self) -> ConnectionState:
        return self._store.state.connection_state

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    # lifecycle

    async def connect(self, credential: str | None) -> bool:
        """Open the connection, carrying ``credential`` in the handshake.

        Returns False without any attempt when the credential is missing or
        the endpoint is malformed, and False when the handshake fails. A
        failed handshake is not retried here.
        """
        if not credential:
            logger.warning("No credential available, not connecting")
            return False
        if not is_valid_socket_url(self._socket_url):
            logger.error("Malformed realtime endpoint %r, not connecting", self._socket_url)
            return False
        if self.state != ConnectionState.DISCONNECTED:
            logger.debug("Connect ignored, connection is %s", self.state)
            return self.is_connected

        self._closing = False
        self._store.set_connection_state(ConnectionState.CONNECTING)
        logger.info("Connecting to %s", self._socket_url)
        try:
            await self._transport.connect(self._socket_url, auth={"token": credential})
        except NetworkError as exc:
            logger.error("Realtime handshake failed: %s", exc.detail)
            self._store.set_connection_state(ConnectionState.DISCONNECTED, error=exc.detail)
            return False

        # The transport may or may not have fired its connect event by now.
        await self._on_connect()
        return True

    async def close(self) -> None:
        self._closing = True
        current = asyncio.current_task()
        pending = [t for t in self._tasks if t is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        if self.state != ConnectionState.DISCONNECTED:
            await self._transport.disconnect()
        self._store.set_connection_state(ConnectionState.DISCONNECTED)
        logger.info("Realtime connection closed")

    # outbound intents

    async def send(self, chat_id: str, content: str) -> bool:
        text = content.strip()
        if not text:
            logger.debug("Empty message for chat %s dropped", chat_id)
            return False
        return await self._emit(
            OutboundEvent.SEND_MESSAGE, SendMessageIntent(chat_id=chat_id, content=text),
        )

    async def edit(self, message_id: str, content: str) -> bool:
        text = content.strip()
        if not text:
            logger.debug("Empty edit for message %s dropped", message_id)
            return False
        return await self._emit(
            OutboundEvent.EDIT_MESSAGE, EditMessageIntent(message_id=message_id, content=text),
        )

    async def delete(self, message_id: str) -> bool:
        return await self._emit(
            OutboundEvent.DELETE_MESSAGE, DeleteMessageIntent(message_id=message_id),
        )

    async def join_conversation(self, chat_id: str) -> bool:
        return await self._emit(OutboundEvent.JOIN_CHAT, ChatRef(chat_id=chat_id))

    async def leave_conversation(self, chat_id: str) -> bool:
        return await self._emit(OutboundEvent.LEAVE_CHAT, ChatRef(chat_id=chat_id))

    async def _emit(self, event: OutboundEvent, intent: WireModel) -> bool:
        if not self.is_connected:
            logger.warning("Not connected (%s), dropping %s", self.state, event)
            return False
        try:
            await self._transport.emit(event, dump(intent))
        except NetworkError as exc:
            logger.warning("Emit %s failed: %s", event, exc.detail)
            return False
        return True

    # inbound

    def handle_inbound(self, event: str, data: Any) -> None:
        """Validate and merge one server push into the store."""
        try:
            domain_event = parse_inbound(event, data)
        except (pydantic.ValidationError, KeyError):
            logger.warning("Ignoring malformed %s payload", event, exc_info=True)
            return

        if isinstance(domain_event, ConversationUpdated) and not self._store.has_conversation(
            domain_event.chat_id
        ):
            logger.debug("Update for unknown chat %s, refreshing list", domain_event.chat_id)
            self._spawn(self._baseline_refresh(), name="chat-refresh")
            return

        self._store.apply(domain_event)

    def _register_handlers(self) -> None:
        self._transport.on(TransportEvent.CONNECT, self._on_connect)
        self._transport.on(TransportEvent.DISCONNECT, self._on_disconnect)
        self._transport.on(TransportEvent.DISCONNECT_FINAL, self._on_disconnect_final)
        self._transport.on(TransportEvent.CONNECT_ERROR, self._on_connect_error)
        self._transport.on(TransportEvent.ERROR, self._on_error)
        for event in InboundEvent:
            self._transport.on(event, self._inbound_handler(event))

    def _inbound_handler(self, event: str) -> EventHandler:
        async def _handler(data: Any = None) -> None:
            self.handle_inbound(event, data)

        return _handler

    async def _on_connect(self) -> None:
        if self.is_connected or self._closing:
            return
        self._store.set_connection_state(ConnectionState.CONNECTED)
        logger.info("Realtime connection established")
        self._spawn(self._baseline_refresh(), name="chat-refresh")
        active = self._store.state.active_conversation_id
        if active is not None:
            self._spawn(self._resume_active(active), name=f"chat-resume-{active}")

    async def _on_disconnect(self, reason: Any = None, *_args: Any) -> None:
        if self._closing or not self._reconnects or reason in FINAL_DISCONNECT_REASONS:
            self._store.set_connection_state(ConnectionState.DISCONNECTED)
            logger.info("Realtime connection closed (%s)", reason or "no reason given")
        else:
            self._store.set_connection_state(ConnectionState.RECONNECTING)
            logger.warning("Realtime connection lost, waiting for transport to reconnect")

    async def _on_disconnect_final(self, *_args: Any) -> None:
        if self.state == ConnectionState.DISCONNECTED:
            return
        logger.warning("Transport stopped reconnecting")
        self._store.set_connection_state(
            ConnectionState.DISCONNECTED, error=self._store.state.connection_error,
        )

    async def _on_connect_error(self, data: Any = None) -> None:
        detail = str(data) if data is not None else "connection error"
        logger.error("Realtime connection error: %s", detail)
        self._store.set_connection_state(self.state, error=detail)

    async def _on_error(self, data: Any = None) -> None:
        logger.error("Realtime transport error: %s", data)
        self._store.set_connection_state(self.state, error=str(data))

    # background work

    async def _baseline_refresh(self) -> None:
        try:
            await conversation_service.refresh_conversations(self._store, self._gateway)
        except Unauthorized:
            logger.info("Conversation refresh rejected, session expired")
        except AppError as exc:
            logger.warning("Conversation refresh failed: %s", exc.detail)

    async def _resume_active(self, chat_id: str) -> None:
        await self.join_conversation(chat_id)
        try:
            await message_service.load_history(self._store, self._gateway, chat_id)
        except AppError as exc:
            logger.warning("History load for chat %s failed: %s", chat_id, exc.detail)

    def _spawn(self, coro: Coroutine[Any, Any, None], *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
