# tests/test_auth_controllers.py

from __future__ import annotations

import pytest

from todo_titans.auth.account_controller import (
    MSG_RESET_SENT,
    ForgotPasswordController,
    SignUpController,
)
from todo_titans.auth.sign_in_controller import MSG_FILL_BOTH, MSG_SUCCESS, SignInController, SignInState
from todo_titans.core.errors import AuthError

from .fakes import FakeNavigator, FakeNotifier, FakeSession


def _controller(session: FakeSession, notifier: FakeNotifier, navigator: FakeNavigator) -> SignInController:
    return SignInController(session=session, notifier=notifier, navigator=navigator)


def test_existing_session_skips_the_form(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    session = FakeSession(user="u42")
    ctrl = _controller(session, notifier, navigator)

    assert ctrl.enter() == SignInState.SUCCESS
    assert navigator.routes == [("home", "u42")]
    assert session.sign_in_calls == []


def test_no_session_stays_idle(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    ctrl = _controller(FakeSession(user=None), notifier, navigator)
    assert ctrl.enter() == SignInState.IDLE
    assert ctrl.submit_enabled
    assert not ctrl.progress_visible
    assert navigator.routes == []


@pytest.mark.asyncio
@pytest.mark.parametrize(("email", "password"), [("ada@example.com", ""), ("", "secret"), ("  ", "  ")])
async def test_empty_fields_issue_no_auth_call(
    email: str, password: str, notifier: FakeNotifier, navigator: FakeNavigator
) -> None:
    session = FakeSession(user=None)
    ctrl = _controller(session, notifier, navigator)

    assert await ctrl.submit(email, password) == SignInState.IDLE
    assert session.sign_in_calls == []
    assert notifier.messages == [MSG_FILL_BOTH]


@pytest.mark.asyncio
async def test_successful_sign_in_navigates_home_and_finishes(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    session = FakeSession(user=None, sign_in_result="u7")
    ctrl = _controller(session, notifier, navigator)

    assert await ctrl.submit(" ada@example.com ", "secret") == SignInState.SUCCESS
    assert session.sign_in_calls == [("ada@example.com", "secret")]
    assert notifier.messages == [MSG_SUCCESS]
    assert navigator.routes == [("home", "u7")]
    assert ctrl.finished
    assert not ctrl.submit_enabled

    # Terminal: a second submit does nothing.
    await ctrl.submit("ada@example.com", "secret")
    assert len(session.sign_in_calls) == 1


@pytest.mark.asyncio
async def test_submitting_state_disables_submit_while_in_flight(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    seen: list[tuple[bool, bool]] = []

    class ObservingSession(FakeSession):
        async def sign_in(self, email: str, password: str) -> str:
            seen.append((ctrl.submit_enabled, ctrl.progress_visible))
            return await super().sign_in(email, password)

    ctrl = _controller(ObservingSession(user=None), notifier, navigator)
    await ctrl.submit("ada@example.com", "secret")
    assert seen == [(False, True)]


@pytest.mark.asyncio
async def test_failed_sign_in_reports_and_returns_to_idle(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    session = FakeSession(user=None)
    session.sign_in_error = AuthError.from_code("INVALID_PASSWORD")
    ctrl = _controller(session, notifier, navigator)

    assert await ctrl.submit("ada@example.com", "wrong") == SignInState.FAILED
    assert ctrl.state == SignInState.IDLE
    assert ctrl.submit_enabled
    assert notifier.messages == ["Login Failed: The password is invalid."]
    assert navigator.routes == []


def test_sign_in_links(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    ctrl = _controller(FakeSession(user=None), notifier, navigator)
    ctrl.open_sign_up()
    ctrl.open_forgot_password()
    assert navigator.routes == [("sign_up", None), ("forgot_password", None)]


@pytest.mark.asyncio
async def test_sign_up_validates_locally_before_calling(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    session = FakeSession(user=None)
    ctrl = SignUpController(session=session, notifier=notifier, navigator=navigator)

    assert not await ctrl.submit("ada@example.com", "secret1", "secret2")
    assert not await ctrl.submit("ada@example.com", "abc", "abc")
    assert not await ctrl.submit("", "secret1", "secret1")
    assert session.sign_up_calls == []
    assert notifier.messages == [
        "Passwords do not match",
        "Password must be at least 6 characters",
        "Please fill in all fields",
    ]

    assert await ctrl.submit("ada@example.com", "secret1", "secret1")
    assert session.sign_up_calls == [("ada@example.com", "secret1")]
    assert navigator.routes == [("home", "new-user")]


@pytest.mark.asyncio
async def test_forgot_password(notifier: FakeNotifier, navigator: FakeNavigator) -> None:
    session = FakeSession(user=None)
    ctrl = ForgotPasswordController(session=session, notifier=notifier, navigator=navigator)

    assert not await ctrl.submit(" ")
    assert session.reset_calls == []

    assert await ctrl.submit("ada@example.com")
    assert session.reset_calls == ["ada@example.com"]
    assert notifier.messages[-1] == MSG_RESET_SENT
    assert navigator.routes == [("sign_in", False)]
