"""Immutable snapshot of everything the presentation layer can observe."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.message import Message
from chat_client.domain.value_objects.enums import ConnectionState


def _no_messages() -> Mapping[str, tuple[Message, ...]]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ChatState:
    conversations: tuple[Conversation, ...] = ()
    messages: Mapping[str, tuple[Message, ...]] = field(default_factory=_no_messages)
    active_conversation_id: str | None = None
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    connection_error: str | None = None
    conversations_loading: bool = False
    history_loading: frozenset[str] = frozenset()
    history_loaded: frozenset[str] = frozenset()

    def conversation(self, chat_id: str) -> Conversation | None:
        for conv in self.conversations:
            if conv.id == chat_id:
                return conv
        return None

    def messages_for(self, chat_id: str) -> tuple[Message, ...]:
        return self.messages.get(chat_id, ())

    @property
    def active_conversation(self) -> Conversation | None:
        if self.active_conversation_id is None:
            return None
        return self.conversation(self.active_conversation_id)

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED

    def is_history_loading(self, chat_id: str) -> bool:
        return chat_id in self.history_loading

    def is_history_loaded(self, chat_id: str) -> bool:
        return chat_id in self.history_loaded
