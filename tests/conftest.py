# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from todo_titans.config import BACKEND_FIREBASE, Settings
from todo_titans.core.ports import UserProfile
from todo_titans.home.home_controller import HomeController

from .fakes import FakeNavigator, FakeNotifier, FakeProfileRepo, FakeSession, FakeTaskStore, make_task

TODAY = date(2026, 10, 17)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointed at a fake Firebase project.

    Built directly rather than from env, to keep unit tests isolated and deterministic.
    """
    return Settings(
        app_name="todo-test",
        log_level="DEBUG",
        backend=BACKEND_FIREBASE,
        firebase_api_key="test-key",
        firebase_database_url="https://demo-rtdb.example.test",
        auth_base_url="https://auth.example.test/v1",
        token_base_url="https://token.example.test/v1",
        http_timeout_seconds=5.0,
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        strip_days=7,
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def navigator() -> FakeNavigator:
    return FakeNavigator()


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession(user="u1")


@pytest.fixture()
def task_store() -> FakeTaskStore:
    return FakeTaskStore(
        [
            make_task("t1", title="Buy milk"),
            make_task("t2", title="Write report", due_date="October 20th, 2026"),
            make_task("t3", title="Call bank", status="Completed"),
            make_task("x1", owner_id="someone-else", title="Not mine"),
        ]
    )


@pytest.fixture()
def profiles() -> FakeProfileRepo:
    return FakeProfileRepo({"u1": UserProfile(user_id="u1", first_name="Ada", last_name="Lovelace")})


@pytest.fixture()
def home(session, task_store, profiles, notifier, navigator) -> HomeController:
    return HomeController(
        session=session,
        tasks=task_store,
        profiles=profiles,
        notifier=notifier,
        navigator=navigator,
        today=lambda: TODAY,
    )
