from __future__ import annotations

from dataclasses import dataclass

from chat_client.domain.entities.conversation import Conversation


@dataclass(frozen=True, slots=True)
class ChatCreationResult:
    """A created chat, or the one that already existed for the same members.

    Both outcomes mean the same thing to callers: select ``chat``.
    """

    chat: Conversation
    existing: bool = False
