from __future__ import annotations

import logging

from chat_client.application.exceptions import ValidationError
from chat_client.application.ports.gateway import ConversationGateway
from chat_client.domain.entities.message import Message
from chat_client.domain.events.message_deleted import MessageDeleted
from chat_client.domain.events.message_edited import MessageEdited
from chat_client.services.store import ConversationStore

logger = logging.getLogger(__name__)


async def load_history(
    store: ConversationStore,
    gateway: ConversationGateway,
    chat_id: str,
    *,
    force: bool = False,
) -> bool:
    """Fetch a conversation's history unless it is loaded or already loading.

    Returns True if a fetch was issued. At most one fetch per conversation is
    in flight at any time.
    """
    if not store.begin_history_load(chat_id, force=force):
        logger.debug("History for chat %s already loaded or loading", chat_id)
        return False
    try:
        messages = await gateway.list_messages(chat_id)
    except BaseException:
        store.fail_history_load(chat_id)
        raise
    store.finish_history_load(chat_id, messages)
    logger.debug("Loaded %d messages for chat %s", len(messages), chat_id)
    return True


async def edit_message(
    store: ConversationStore,
    gateway: ConversationGateway,
    message_id: str,
    content: str,
) -> Message:
    content = content.strip()
    if not content:
        raise ValidationError("Message content must not be empty")
    message = await gateway.edit_message(message_id, content)
    store.apply(MessageEdited(message=message))
    return message


async def delete_message(
    store: ConversationStore,
    gateway: ConversationGateway,
    message_id: str,
) -> Message:
    message = await gateway.delete_message(message_id)
    store.apply(MessageDeleted(message=message))
    return message
