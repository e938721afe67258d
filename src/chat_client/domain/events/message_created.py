from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from chat_client.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageCreated:
    tag: ClassVar[str] = "message-created"

    message: Message
