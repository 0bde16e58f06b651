# src/todo_titans/auth/account_controller.py

from __future__ import annotations

import logging

from ..core.errors import AuthError, ValidationError
from ..core.ports import Navigator, Notifier, SessionService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

MSG_RESET_SENT = "Password reset email sent"


def validate_sign_up(email: str, password: str, confirm: str) -> None:
    if not email or not password or not confirm:
        raise ValidationError("Please fill in all fields")
    if password != confirm:
        raise ValidationError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class SignUpController:
    """Creates an account and hands the new user over to the home screen."""

    def __init__(self, *, session: SessionService, notifier: Notifier, navigator: Navigator) -> None:
        self._session = session
        self._notifier = notifier
        self._navigator = navigator
        self.user_id: str | None = None

    async def submit(self, email: str, password: str, confirm: str) -> bool:
        email = (email or "").strip()
        try:
            validate_sign_up(email, password or "", confirm or "")
        except ValidationError as e:
            self._notifier.notify(str(e))
            return False

        try:
            uid = await self._session.sign_up(email, password)
        except AuthError as e:
            logger.info("Sign-up failed email=%s code=%s", email, e.code)
            self._notifier.notify(f"Sign Up Failed: {e}")
            return False

        self.user_id = uid
        self._notifier.notify("Account created")
        self._navigator.to_home(uid)
        return True


class ForgotPasswordController:
    def __init__(self, *, session: SessionService, notifier: Notifier, navigator: Navigator) -> None:
        self._session = session
        self._notifier = notifier
        self._navigator = navigator

    async def submit(self, email: str) -> bool:
        email = (email or "").strip()
        if not email:
            self._notifier.notify("Please enter your email")
            return False
        try:
            await self._session.send_password_reset(email)
        except AuthError as e:
            self._notifier.notify(f"Reset Failed: {e}")
            return False
        self._notifier.notify(MSG_RESET_SENT)
        self._navigator.to_sign_in()
        return True
