"""Read/subscribe surface for a rendering layer."""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from typing import Callable

from chat_client.application.dto.chat import ChatCreationResult
from chat_client.application.exceptions import NotConnected
from chat_client.application.ports.gateway import ConversationGateway
from chat_client.application.state import ChatState
from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.message import Message
from chat_client.domain.entities.user import ChatMember, UserSummary
from chat_client.services import conversation_service, message_service
from chat_client.services.connection_manager import RealtimeConnectionManager
from chat_client.services.store import ConversationStore

logger = logging.getLogger(__name__)

ViewListener = Callable[[ChatState], None]

_STATE_FIELDS = frozenset(f.name for f in dataclasses.fields(ChatState))


class ChatView:
    """Exposes the store snapshot and every user-facing chat operation.

    Realtime operations (send, edit, delete, join, leave) return False when
    they were dropped because the connection is not up; pass
    ``require_connected=True`` to get :class:`NotConnected` instead.
    Request/response operations raise the application errors unchanged.
    """

    def __init__(
        self,
        store: ConversationStore,
        connection: RealtimeConnectionManager,
        gateway: ConversationGateway,
    ) -> None:
        self._store = store
        self._connection = connection
        self._gateway = gateway

    @property
    def state(self) -> ChatState:
        return self._store.state

    def watch(self, listener: ViewListener, *fields: str) -> Callable[[], None]:
        """Call ``listener`` with the new snapshot whenever a watched field changes.

        With no ``fields`` every change is published. Fields are compared by
        identity, which the store keeps stable for untouched parts.
        """
        unknown = [f for f in fields if f not in _STATE_FIELDS]
        if unknown:
            raise ValueError(f"Unknown state fields: {', '.join(unknown)}")

        def _on_change(new: ChatState, old: ChatState) -> None:
            if fields and all(getattr(new, f) is getattr(old, f) for f in fields):
                return
            listener(new)

        return self._store.subscribe(_on_change)

    # selection

    async def select_conversation(self, chat_id: str | None) -> None:
        """Make ``chat_id`` active: join it and load its history once."""
        self._store.select(chat_id)
        if chat_id is None:
            return
        if self._connection.is_connected:
            await self._connection.join_conversation(chat_id)
        await message_service.load_history(self._store, self._gateway, chat_id)

    async def reload_history(self, chat_id: str) -> bool:
        return await message_service.load_history(
            self._store, self._gateway, chat_id, force=True,
        )

    async def refresh_conversations(self) -> list[Conversation]:
        return await conversation_service.refresh_conversations(self._store, self._gateway)

    # realtime intents

    async def send_message(self, chat_id: str, content: str, *, require_connected: bool = False) -> bool:
        self._check_connected(require_connected)
        return await self._connection.send(chat_id, content)

    async def edit_message(self, message_id: str, content: str, *, require_connected: bool = False) -> bool:
        self._check_connected(require_connected)
        return await self._connection.edit(message_id, content)

    async def delete_message(self, message_id: str, *, require_connected: bool = False) -> bool:
        self._check_connected(require_connected)
        return await self._connection.delete(message_id)

    async def join_conversation(self, chat_id: str) -> bool:
        return await self._connection.join_conversation(chat_id)

    async def leave_conversation(self, chat_id: str) -> bool:
        return await self._connection.leave_conversation(chat_id)

    # request/response

    async def update_message(self, message_id: str, content: str) -> Message:
        """Edit over HTTP and merge the server's copy without waiting for an event."""
        return await message_service.edit_message(self._store, self._gateway, message_id, content)

    async def remove_message(self, message_id: str) -> Message:
        return await message_service.delete_message(self._store, self._gateway, message_id)

    async def list_members(self, chat_id: str) -> list[ChatMember]:
        return await conversation_service.list_members(self._gateway, chat_id)

    async def search_users(self, query: str, *, exclude: Iterable[str] = ()) -> list[UserSummary]:
        return await conversation_service.search_users(self._gateway, query, exclude=exclude)

    async def create_personal_chat(self, other_user_id: str) -> ChatCreationResult:
        result = await conversation_service.create_personal_chat(self._gateway, other_user_id)
        await self._open_created(result)
        return result

    async def create_group_chat(self, member_ids: Iterable[str], name: str) -> ChatCreationResult:
        result = await conversation_service.create_group_chat(self._gateway, member_ids, name)
        await self._open_created(result)
        return result

    async def _open_created(self, result: ChatCreationResult) -> None:
        # New and pre-existing chats are handled the same way.
        logger.debug("Opening chat %s (existing=%s)", result.chat.id, result.existing)
        await self.refresh_conversations()
        await self.select_conversation(result.chat.id)

    def _check_connected(self, required: bool) -> None:
        if required and not self._connection.is_connected:
            raise NotConnected(f"Realtime connection is {self._connection.state}")
