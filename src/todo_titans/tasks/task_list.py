# src/todo_titans/tasks/task_list.py

from __future__ import annotations

"""
Task list view-model.

An in-memory mirror of the live query for one owner:
- the displayed sequence is replaced wholesale on every pushed snapshot,
  in the order the store delivered it (no sorting, no dropping),
- the selection set is keyed by task id, so a push between render and click
  cannot move a selection onto a different record,
- writes (status toggle, delete) go straight to the store; the next push
  reconciles the local copy.

Owned by exactly one home screen; nothing else mutates it.
"""

import asyncio
import contextlib
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..core.errors import StoreError
from ..core.ports import Notifier, TaskStoreClient
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

MSG_LOAD_FAILED = "Failed to load tasks."
MSG_UPDATE_FAILED = "Failed to update task"
MSG_DELETE_FAILED = "Failed to delete task"


@dataclass(slots=True, frozen=True)
class Removal:
    """Outcome of one remove_selected() pass."""

    issued: int
    failed: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(slots=True, frozen=True)
class TaskRow:
    """What one list row shows."""

    task_id: str
    title: str
    description: str
    due_date: str | None
    checked: bool
    selected: bool


class TaskListViewModel:
    def __init__(
        self,
        store: TaskStoreClient,
        notifier: Notifier,
        *,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._tasks: list[Task] = []
        self._selected: set[str] = set()
        self._watch_task: asyncio.Task[None] | None = None
        self._owner_id: str | None = None
        self.on_change = on_change

    # ---- read side ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def owner_id(self) -> str | None:
        return self._owner_id

    @property
    def subscribed(self) -> bool:
        return self._watch_task is not None and not self._watch_task.done()

    def __len__(self) -> int:
        return len(self._tasks)

    def task_at(self, position: int) -> Task:
        if position < 0 or position >= len(self._tasks):
            raise IndexError(f"No task at position {position}")
        return self._tasks[position]

    def is_selected(self, position: int) -> bool:
        return self.task_at(position).id in self._selected

    def get_selected(self) -> list[Task]:
        return [t for t in self._tasks if t.id in self._selected]

    def rows(self) -> list[TaskRow]:
        return [
            TaskRow(
                task_id=t.id,
                title=t.title,
                description=t.description,
                due_date=t.due_date if t.has_due_date else None,
                checked=t.is_completed,
                selected=t.id in self._selected,
            )
            for t in self._tasks
        ]

    # ---- subscription ----

    async def subscribe(self, owner_id: str) -> None:
        """Start mirroring the owner's tasks. A previous subscription is dropped first."""
        await self.unsubscribe()
        self._owner_id = owner_id
        self._watch_task = asyncio.create_task(
            self._consume(owner_id), name=f"watch-tasks:{owner_id}"
        )
        logger.info("Subscribed to tasks owner=%s", owner_id)

    async def unsubscribe(self) -> None:
        task = self._watch_task
        self._watch_task = None
        if task is None:
            return
        if not task.done():
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Unsubscribed from tasks owner=%s", self._owner_id)

    async def _consume(self, owner_id: str) -> None:
        try:
            async for snapshot in self._store.watch(owner_id):
                self.apply_snapshot(snapshot)
        except StoreError as e:
            logger.warning("Task subscription failed owner=%s: %s", owner_id, e)
            self._notifier.notify(MSG_LOAD_FAILED)

    def apply_snapshot(self, tasks: Iterable[Task]) -> None:
        """Replace the displayed sequence with a pushed result set."""
        self._tasks = list(tasks)
        live = {t.id for t in self._tasks}
        self._selected &= live
        logger.debug("Snapshot applied: %d tasks, %d selected", len(self._tasks), len(self._selected))
        self._changed()

    # ---- selection ----

    def toggle_selection(self, position: int) -> bool:
        """Flip selection of the task at `position`. Returns the new selected state."""
        task_id = self.task_at(position).id
        if task_id in self._selected:
            self._selected.discard(task_id)
            selected = False
        else:
            self._selected.add(task_id)
            selected = True
        self._changed()
        return selected

    def clear_selection(self) -> None:
        self._selected.clear()
        self._changed()

    # ---- writes ----

    async def set_status(self, position: int, completed: bool) -> bool:
        """
        Mark the task at `position` completed or pending and write the whole record back.

        On failure the local value stays changed until the next snapshot replaces it.
        """
        task = self.task_at(position)
        task.status = TaskStatus.for_completed(completed).value
        self._changed()
        try:
            await self._store.upsert(task.id, task)
        except StoreError as e:
            logger.warning("Upsert failed task_id=%s: %s", task.id, e)
            self._notifier.notify(MSG_UPDATE_FAILED)
            return False
        logger.info("Task %s -> %s", task.id, task.status)
        return True

    async def remove_selected(self) -> Removal:
        """
        Delete every selected task (one call per id) and clear the selection.

        The selection is cleared whatever the outcome; removals become visible
        through the subscription. Failed ids are reported back, not retried.
        """
        doomed = self.get_selected()
        failed: list[str] = []
        for task in doomed:
            try:
                await self._store.delete(task.id)
            except StoreError as e:
                logger.warning("Delete failed task_id=%s: %s", task.id, e)
                self._notifier.notify(MSG_DELETE_FAILED)
                failed.append(task.id)
        self._selected.clear()
        self._changed()
        return Removal(issued=len(doomed), failed=tuple(failed))

    def _changed(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change()
        except Exception:
            logger.exception("on_change callback failed")
