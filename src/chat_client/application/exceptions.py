from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class Unauthenticated(AppError):
    """No credential is available."""


class Unauthorized(AppError):
    """The server rejected the credential; the session must be torn down."""


class NetworkError(AppError):
    def __init__(self, detail: str = "", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail)


class ValidationError(AppError):
    """A precondition failed locally; no request was issued."""


class NotConnected(AppError):
    pass
