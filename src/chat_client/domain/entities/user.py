from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserSummary:
    id: str
    email: str
    username: str | None = None

    @property
    def label(self) -> str:
        return self.username or self.email


@dataclass(frozen=True, slots=True)
class ChatMember:
    id: str
    email: str
    username: str | None
    is_online: bool
