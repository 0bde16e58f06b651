# src/todo_titans/auth/sign_in_controller.py

from __future__ import annotations

"""
Sign-in controller.

States: IDLE -> SUBMITTING -> SUCCESS | FAILED (FAILED falls back to IDLE).
SUCCESS is terminal: the controller has handed off to the home screen.
"""

import logging
from enum import StrEnum

from ..core.errors import AuthError
from ..core.ports import Navigator, Notifier, SessionService

logger = logging.getLogger(__name__)

MSG_FILL_BOTH = "Please fill in both fields"
MSG_SUCCESS = "Login Successful"


class SignInState(StrEnum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class SignInController:
    def __init__(
        self,
        *,
        session: SessionService,
        notifier: Notifier,
        navigator: Navigator,
    ) -> None:
        self._session = session
        self._notifier = notifier
        self._navigator = navigator
        self.state = SignInState.IDLE
        self.user_id: str | None = None

    @property
    def submit_enabled(self) -> bool:
        return self.state == SignInState.IDLE

    @property
    def progress_visible(self) -> bool:
        return self.state == SignInState.SUBMITTING

    @property
    def finished(self) -> bool:
        return self.state == SignInState.SUCCESS

    def enter(self) -> SignInState:
        """Skip the form entirely when a previous session is still valid."""
        uid = self._session.current_user()
        if uid:
            logger.info("Existing session found user=%s", uid)
            self._succeed(uid)
        return self.state

    async def submit(self, email: str, password: str) -> SignInState:
        if self.state != SignInState.IDLE:
            logger.debug("submit ignored in state=%s", self.state)
            return self.state

        email = (email or "").strip()
        password = (password or "").strip()
        if not email or not password:
            self._notifier.notify(MSG_FILL_BOTH)
            return self.state

        self.state = SignInState.SUBMITTING
        try:
            uid = await self._session.sign_in(email, password)
        except AuthError as e:
            logger.info("Sign-in failed email=%s code=%s", email, e.code)
            self.state = SignInState.FAILED
            self._notifier.notify(f"Login Failed: {e}")
            self.state = SignInState.IDLE
            return SignInState.FAILED

        self._notifier.notify(MSG_SUCCESS)
        self._succeed(uid)
        return self.state

    def open_sign_up(self) -> None:
        self._navigator.to_sign_up()

    def open_forgot_password(self) -> None:
        self._navigator.to_forgot_password()

    def _succeed(self, uid: str) -> None:
        self.user_id = uid
        self.state = SignInState.SUCCESS
        self._navigator.to_home(uid)
