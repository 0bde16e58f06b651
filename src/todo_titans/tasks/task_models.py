# src/todo_titans/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Values this app writes into Task.status.

    Notes:
    - The stored field is free text. Anything else read from the backend is kept
      verbatim on the Task and rendered as not completed.
    """

    PENDING = "Pending"
    COMPLETED = "Completed"

    @classmethod
    def for_completed(cls, completed: bool) -> TaskStatus:
        return cls.COMPLETED if completed else cls.PENDING


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(slots=True)
class Task:
    id: str
    owner_id: str
    title: str = ""
    description: str = ""
    due_date: str = ""
    priority_level: str = ""
    status: str = TaskStatus.PENDING.value

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def has_due_date(self) -> bool:
        return bool(self.due_date.strip())

    @classmethod
    def from_wire(cls, key: str, data: dict[str, Any]) -> Task:
        """Build a Task from a database child. The child key stands in for a missing taskId."""
        return cls(
            id=_text(data.get("taskId")) or key,
            owner_id=_text(data.get("userId")),
            title=_text(data.get("title")),
            description=_text(data.get("description")),
            due_date=_text(data.get("dueDate")),
            priority_level=_text(data.get("priorityLevel")),
            status=_text(data.get("status")),
        )

    def to_wire(self) -> dict[str, str]:
        return {
            "taskId": self.id,
            "userId": self.owner_id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date,
            "priorityLevel": self.priority_level,
            "status": self.status,
        }


def tasks_from_children(children: Any) -> list[Task]:
    """
    Convert a `{child_key: record}` mapping into Tasks, keeping insertion order.

    Non-object children are skipped; the database may hold stray values under /Tasks.
    """
    if not isinstance(children, dict):
        return []
    out: list[Task] = []
    for key, data in children.items():
        if isinstance(data, dict):
            out.append(Task.from_wire(str(key), data))
    return out
