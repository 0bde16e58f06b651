# src/todo_titans/backends/memory.py

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, replace

from ..core.errors import AuthError, ProfileNotFound, StoreError
from ..core.ports import UserProfile
from ..tasks.task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "demo1234"


@dataclass(slots=True)
class _Account:
    user_id: str
    email: str
    password: str


class InMemoryBackend:
    """
    Offline backend used for demos when Firebase is not configured.

    Behavior mirrors the hosted one closely enough for the controllers:
    - ids are assigned by the store,
    - watch() pushes the full result set for an owner after every change,
    - errors use the same taxonomy (AuthError / StoreError / ProfileNotFound).

    Single event loop only; there is no locking.
    """

    def __init__(self) -> None:
        self.accounts: dict[str, _Account] = {}
        self.profiles: dict[str, UserProfile] = {}
        self.records: dict[str, Task] = {}
        self.reset_requests: list[str] = []
        self._watchers: dict[str, set[asyncio.Queue[None]]] = {}

        self.session = MemorySession(self)
        self.tasks = MemoryTaskStore(self)
        self.profile_repo = MemoryProfileRepo(self)

    # ---- accounts ----

    def add_account(self, email: str, password: str, *, first_name: str = "", last_name: str = "") -> str:
        key = email.strip().lower()
        if key in self.accounts:
            raise AuthError.from_code("EMAIL_EXISTS")
        uid = uuid.uuid4().hex
        self.accounts[key] = _Account(user_id=uid, email=key, password=password)
        if first_name or last_name:
            self.profiles[uid] = UserProfile(user_id=uid, first_name=first_name, last_name=last_name)
        return uid

    # ---- tasks ----

    def add_task(self, owner_id: str, title: str, **fields: str) -> Task:
        task = Task(id=uuid.uuid4().hex, owner_id=owner_id, title=title, **fields)
        self.records[task.id] = task
        self._publish(owner_id)
        return replace(task)

    def snapshot(self, owner_id: str) -> list[Task]:
        return [replace(t) for t in self.records.values() if t.owner_id == owner_id]

    def _publish(self, owner_id: str) -> None:
        for q in self._watchers.get(owner_id, ()):
            q.put_nowait(None)

    def _register(self, owner_id: str) -> asyncio.Queue[None]:
        q: asyncio.Queue[None] = asyncio.Queue()
        self._watchers.setdefault(owner_id, set()).add(q)
        return q

    def _unregister(self, owner_id: str, q: asyncio.Queue[None]) -> None:
        qs = self._watchers.get(owner_id)
        if not qs:
            return
        qs.discard(q)
        if not qs:
            del self._watchers[owner_id]

    def watcher_count(self, owner_id: str) -> int:
        return len(self._watchers.get(owner_id, ()))


class MemorySession:
    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend
        self._user_id: str | None = None

    async def sign_in(self, email: str, password: str) -> str:
        account = self._backend.accounts.get(email.strip().lower())
        if account is None or account.password != password:
            raise AuthError.from_code("INVALID_LOGIN_CREDENTIALS")
        self._user_id = account.user_id
        return account.user_id

    async def sign_up(self, email: str, password: str) -> str:
        if len(password) < 6:
            raise AuthError.from_code("WEAK_PASSWORD")
        uid = self._backend.add_account(email, password)
        self._user_id = uid
        return uid

    async def send_password_reset(self, email: str) -> None:
        if email.strip().lower() not in self._backend.accounts:
            raise AuthError.from_code("EMAIL_NOT_FOUND")
        self._backend.reset_requests.append(email.strip().lower())

    async def sign_out(self) -> None:
        self._user_id = None

    def current_user(self) -> str | None:
        return self._user_id


class MemoryTaskStore:
    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend

    async def watch(self, owner_id: str) -> AsyncIterator[list[Task]]:
        q = self._backend._register(owner_id)
        try:
            yield self._backend.snapshot(owner_id)
            while True:
                await q.get()
                # Coalesce bursts: one snapshot covers every change queued so far.
                while not q.empty():
                    q.get_nowait()
                yield self._backend.snapshot(owner_id)
        finally:
            self._backend._unregister(owner_id, q)

    async def upsert(self, task_id: str, task: Task) -> None:
        if not task_id:
            raise StoreError("Task id is required")
        previous = self._backend.records.get(task_id)
        self._backend.records[task_id] = replace(task, id=task_id)
        if previous is not None and previous.owner_id != task.owner_id:
            self._backend._publish(previous.owner_id)
        self._backend._publish(task.owner_id)

    async def delete(self, task_id: str) -> None:
        task = self._backend.records.pop(task_id, None)
        if task is not None:
            self._backend._publish(task.owner_id)


class MemoryProfileRepo:
    def __init__(self, backend: InMemoryBackend) -> None:
        self._backend = backend

    async def get_once(self, user_id: str) -> UserProfile:
        profile = self._backend.profiles.get(user_id)
        if profile is None:
            raise ProfileNotFound(user_id)
        return profile


def create_demo_backend() -> InMemoryBackend:
    """Backend pre-seeded with one account and a few tasks."""
    backend = InMemoryBackend()
    uid = backend.add_account(DEMO_EMAIL, DEMO_PASSWORD, first_name="Ada", last_name="Lovelace")
    backend.add_task(uid, "Buy groceries", description="Milk, eggs, bread", priority_level="Low")
    backend.add_task(
        uid,
        "Finish report",
        description="Quarterly numbers",
        due_date="October 20th, 2026",
        priority_level="High",
    )
    backend.add_task(
        uid,
        "Call the bank",
        priority_level="Medium",
        status=TaskStatus.COMPLETED.value,
    )
    logger.info("Demo backend seeded: %s / %s", DEMO_EMAIL, DEMO_PASSWORD)
    return backend
