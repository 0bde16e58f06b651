# src/todo_titans/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the controllers.

Controllers depend on Protocols instead of concrete backends.
This keeps the hosted backend swappable (Firebase REST, offline in-memory)
and makes testing with fakes straightforward.

Every network-backed method is a coroutine. Cancelling the awaiting asyncio
task is the cancellation mechanism; there are no callbacks.
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol

from ..tasks.task_models import Task


@dataclass(slots=True, frozen=True)
class UserProfile:
    user_id: str
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name.strip(), self.last_name.strip()) if p)


class SessionService(Protocol):
    """Identity provider: credentials in, user id out."""

    async def sign_in(self, email: str, password: str) -> str: ...
    async def sign_up(self, email: str, password: str) -> str: ...
    async def send_password_reset(self, email: str) -> None: ...
    async def sign_out(self) -> None: ...
    def current_user(self) -> str | None: ...


class TaskStoreClient(Protocol):
    """
    Remote keyed task collection.

    watch(owner_id) yields the complete current result set for that owner
    every time it changes (initial load included), in store order. It ends
    with StoreError if the backend cancels the query.
    """

    def watch(self, owner_id: str) -> AsyncIterator[list[Task]]: ...
    async def upsert(self, task_id: str, task: Task) -> None: ...
    async def delete(self, task_id: str) -> None: ...


class ProfileRepo(Protocol):
    async def get_once(self, user_id: str) -> UserProfile: ...


class Notifier(Protocol):
    """Transient user-visible message (toast)."""

    def notify(self, message: str) -> None: ...


class Navigator(Protocol):
    """
    Screen routing.

    Task creation, editing and the calendar live outside the controllers;
    they are only ever reached through this port.
    """

    def to_home(self, user_id: str) -> None: ...
    def to_sign_in(self, *, clear_history: bool = False) -> None: ...
    def to_sign_up(self) -> None: ...
    def to_forgot_password(self) -> None: ...
    def to_add_task(self) -> None: ...
    def to_edit_task(self, task_id: str) -> None: ...
    def to_calendar(self) -> None: ...
