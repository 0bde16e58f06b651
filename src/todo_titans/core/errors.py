# src/todo_titans/core/errors.py

"""
Error taxonomy shared by adapters and controllers.

Adapters raise these (wrapping httpx errors with `raise ... from e`);
controllers catch them and turn them into notifications. Nothing here is retried.
"""

from __future__ import annotations

_AUTH_MESSAGES: dict[str, str] = {
    "EMAIL_NOT_FOUND": "No account exists for this email.",
    "INVALID_PASSWORD": "The password is invalid.",
    "INVALID_LOGIN_CREDENTIALS": "The email or password is incorrect.",
    "USER_DISABLED": "This account has been disabled.",
    "EMAIL_EXISTS": "An account already exists for this email.",
    "WEAK_PASSWORD": "The password must be at least 6 characters.",
    "INVALID_EMAIL": "The email address is badly formatted.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Try again later.",
    "TOKEN_EXPIRED": "Your session has expired. Please sign in again.",
    "INVALID_REFRESH_TOKEN": "Your session has expired. Please sign in again.",
}


def friendly_auth_message(code: str) -> str:
    """
    Map an identity-provider error code to readable text.

    Codes may carry a detail suffix ("WEAK_PASSWORD : Password should be ..."),
    only the leading token is used for the lookup. Unknown codes pass through.
    """
    raw = (code or "").strip()
    if not raw:
        return "Authentication failed."
    head = raw.split(":", 1)[0].strip()
    return _AUTH_MESSAGES.get(head, raw)


class TodoError(Exception):
    """Base class for every user-reportable failure."""


class ValidationError(TodoError):
    """Local input was rejected before any network call."""


class AuthError(TodoError):
    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code

    @classmethod
    def from_code(cls, code: str) -> AuthError:
        return cls(friendly_auth_message(code), code=code.split(":", 1)[0].strip() or None)


class StoreError(TodoError):
    """Write, delete or subscription rejected by the store, or the network failed."""


class ProfileNotFound(TodoError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"No profile for user {user_id}")
        self.user_id = user_id
