from __future__ import annotations

import logging
from collections.abc import Iterable

from chat_client.application.dto.chat import ChatCreationResult
from chat_client.application.exceptions import ValidationError
from chat_client.application.ports.gateway import ConversationGateway
from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.user import ChatMember, UserSummary
from chat_client.services.store import ConversationStore

logger = logging.getLogger(__name__)

MIN_GROUP_OTHER_MEMBERS = 2


async def refresh_conversations(
    store: ConversationStore,
    gateway: ConversationGateway,
) -> list[Conversation]:
    """Replace the conversation list with the server's; message history is left as is.

    When refreshes overlap, the one started last wins regardless of which
    response arrives first.
    """
    generation = store.begin_conversations_load()
    try:
        conversations = await gateway.list_conversations()
    except BaseException:
        store.fail_conversations_load(generation)
        raise
    if store.finish_conversations_load(generation, conversations):
        logger.debug("Loaded %d conversations", len(conversations))
    return conversations


async def list_members(gateway: ConversationGateway, chat_id: str) -> list[ChatMember]:
    return await gateway.list_members(chat_id)


async def search_users(
    gateway: ConversationGateway,
    query: str,
    *,
    exclude: Iterable[str] = (),
) -> list[UserSummary]:
    """Search users by free text, dropping ids in ``exclude``.

    A blank query returns no results without a request.
    """
    query = query.strip()
    if not query:
        return []
    excluded = set(exclude)
    users = await gateway.search_users(query)
    return [u for u in users if u.id not in excluded]


async def create_personal_chat(
    gateway: ConversationGateway,
    other_user_id: str,
) -> ChatCreationResult:
    other_user_id = other_user_id.strip()
    if not other_user_id:
        raise ValidationError("Select exactly one user for a personal chat")
    return await gateway.create_personal_chat(other_user_id)


async def create_group_chat(
    gateway: ConversationGateway,
    member_ids: Iterable[str],
    name: str,
) -> ChatCreationResult:
    """Create a group of the caller plus at least two other members.

    Validation happens before any request is issued.
    """
    unique_ids = list(dict.fromkeys(m for m in member_ids if m))
    name = name.strip()
    if len(unique_ids) < MIN_GROUP_OTHER_MEMBERS:
        raise ValidationError(
            "A group chat needs at least 2 other members (3 including you)"
        )
    if not name:
        raise ValidationError("Group name must not be empty")
    return await gateway.create_group_chat(unique_ids, name)
