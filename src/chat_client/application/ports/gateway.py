from __future__ import annotations

from typing import Protocol

from chat_client.application.dto.chat import ChatCreationResult
from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.message import Message
from chat_client.domain.entities.user import ChatMember, UserSummary


class ConversationGateway(Protocol):
    async def list_conversations(self) -> list[Conversation]: ...

    async def list_members(self, chat_id: str) -> list[ChatMember]: ...

    async def list_messages(self, chat_id: str) -> list[Message]: ...

    async def edit_message(self, message_id: str, content: str) -> Message: ...

    async def delete_message(self, message_id: str) -> Message: ...

    async def search_users(self, query: str) -> list[UserSummary]: ...

    async def create_personal_chat(self, other_user_id: str) -> ChatCreationResult: ...

    async def create_group_chat(self, member_ids: list[str], name: str) -> ChatCreationResult: ...
