"""In-memory bearer credential holder."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

import jwt

logger = logging.getLogger(__name__)

CredentialListener = Callable[[str | None], None]

_USER_ID_CLAIMS = ("sub", "userId", "id")


class TokenStore:
    """Implements application.ports.credentials.CredentialProvider.

    Claims are read without signature verification. Only ``exp`` and the
    subject are used.
    """

    def __init__(self, *, expiry_leeway: int = 30) -> None:
        self._access_token: str | None = None
        self._refresh_token: str | None = None
        self._expiry_leeway = expiry_leeway
        self._listeners: list[CredentialListener] = []

    def set_tokens(self, access_token: str, refresh_token: str | None = None) -> None:
        changed = access_token != self._access_token
        self._access_token = access_token
        self._refresh_token = refresh_token
        if changed:
            self._notify(access_token)

    def get_credential(self) -> str | None:
        token = self._access_token
        if token is None:
            return None
        exp = self.claims().get("exp")
        if isinstance(exp, (int, float)) and exp - self._expiry_leeway <= time.time():
            logger.debug("Access token expired")
            return None
        return token

    @property
    def refresh_token(self) -> str | None:
        return self._refresh_token

    def clear(self) -> None:
        had_token = self._access_token is not None
        self._access_token = None
        self._refresh_token = None
        if had_token:
            self._notify(None)

    def claims(self) -> dict[str, Any]:
        if self._access_token is None:
            return {}
        try:
            return jwt.decode(self._access_token, options={"verify_signature": False})
        except jwt.DecodeError:
            return {}

    def current_user_id(self) -> str | None:
        claims = self.claims()
        for key in _USER_ID_CLAIMS:
            value = claims.get(key)
            if value is not None:
                return str(value)
        return None

    def subscribe(self, listener: CredentialListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, credential: str | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(credential)
            except Exception:
                logger.exception("Credential listener failed")
