"""Pure merge functions for inbound realtime events.

Each reducer takes the current snapshot and a domain event and returns the
next snapshot. Untouched parts of the state are carried over by reference,
so consumers can detect changes with ``is``.

Messages for a conversation are kept in arrival order. Events for a given
conversation are assumed to arrive in the order the server emitted them;
nothing here re-sorts or checks sequence numbers.
"""
from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable

from chat_client.application.state import ChatState
from chat_client.domain.entities.message import Message
from chat_client.domain.events.conversation_updated import ConversationUpdated
from chat_client.domain.events.message_created import MessageCreated
from chat_client.domain.events.message_deleted import MessageDeleted
from chat_client.domain.events.message_edited import MessageEdited

Reducer = Callable[[ChatState, Any], ChatState]


def with_sequence(
    messages: Mapping[str, tuple[Message, ...]],
    chat_id: str,
    sequence: tuple[Message, ...],
) -> Mapping[str, tuple[Message, ...]]:
    updated = dict(messages)
    updated[chat_id] = sequence
    return MappingProxyType(updated)


def replace_message(state: ChatState, message: Message) -> ChatState:
    """Swap the message with the same id in place; unknown ids are ignored."""
    sequence = state.messages.get(message.chat_id, ())
    for idx, existing in enumerate(sequence):
        if existing.id != message.id:
            continue
        if existing == message:
            return state
        sequence = sequence[:idx] + (message,) + sequence[idx + 1:]
        state = dataclasses.replace(
            state, messages=with_sequence(state.messages, message.chat_id, sequence),
        )
        break
    return _refresh_last_message(state, message)


def _refresh_last_message(state: ChatState, message: Message) -> ChatState:
    conversations = state.conversations
    for idx, conv in enumerate(conversations):
        if conv.id != message.chat_id:
            continue
        if conv.last_message is None or conv.last_message.id != message.id:
            return state
        if conv.last_message == message:
            return state
        updated = dataclasses.replace(conv, last_message=message)
        return dataclasses.replace(
            state,
            conversations=conversations[:idx] + (updated,) + conversations[idx + 1:],
        )
    return state


def apply_message_created(state: ChatState, event: MessageCreated) -> ChatState:
    message = event.message
    sequence = state.messages.get(message.chat_id, ())
    return dataclasses.replace(
        state,
        messages=with_sequence(state.messages, message.chat_id, sequence + (message,)),
    )


def apply_message_edited(state: ChatState, event: MessageEdited) -> ChatState:
    return replace_message(state, event.message)


def apply_message_deleted(state: ChatState, event: MessageDeleted) -> ChatState:
    message = event.message
    if not message.is_deleted:
        message = dataclasses.replace(message, is_deleted=True)
    return replace_message(state, message)


def apply_conversation_updated(state: ChatState, event: ConversationUpdated) -> ChatState:
    conversations = state.conversations
    for idx, conv in enumerate(conversations):
        if conv.id != event.chat_id:
            continue
        updated = dataclasses.replace(
            conv,
            last_message=event.last_message,
            last_message_at=event.last_message_at,
        )
        if updated == conv:
            return state
        return dataclasses.replace(
            state,
            conversations=conversations[:idx] + (updated,) + conversations[idx + 1:],
        )
    return state


REDUCERS: dict[str, Reducer] = {
    MessageCreated.tag: apply_message_created,
    MessageEdited.tag: apply_message_edited,
    MessageDeleted.tag: apply_message_deleted,
    ConversationUpdated.tag: apply_conversation_updated,
}


def reduce(state: ChatState, event: Any) -> ChatState:
    """Dispatch ``event`` by its tag. Raises ``KeyError`` for unknown tags."""
    return REDUCERS[event.tag](state, event)
