from __future__ import annotations

from typing import Protocol


class CredentialProvider(Protocol):
    def get_credential(self) -> str | None: ...

    def clear(self) -> None: ...
