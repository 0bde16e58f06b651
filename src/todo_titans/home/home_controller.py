# src/todo_titans/home/home_controller.py

from __future__ import annotations

"""
Home screen controller.

Lifecycle:
- enter(user_id): LOADING -> READY (profile read once, tasks subscribed)
                  LOADING -> UNAUTHENTICATED (no usable user id)
- exit(): drops the live subscription; it never outlives the screen.

While READY it routes the screen actions (add, edit, complete, select,
remove selected, open calendar, sign out).
"""

import logging
from collections.abc import Callable
from datetime import date
from enum import StrEnum

from ..core.errors import ProfileNotFound, StoreError
from ..core.ports import Navigator, Notifier, ProfileRepo, SessionService, TaskStoreClient
from ..tasks.task_list import TaskListViewModel
from .date_strip import DaySlot, build_date_strip, month_label

logger = logging.getLogger(__name__)

MSG_PROFILE_FAILED = "Failed to retrieve user data"
MSG_NOTHING_SELECTED = "No tasks to remove"
MSG_DELETED = "Selected tasks deleted"
MSG_DELETE_INCOMPLETE = "Some selected tasks could not be deleted"


class HomeState(StrEnum):
    LOADING = "loading"
    READY = "ready"
    UNAUTHENTICATED = "unauthenticated"


class HomeController:
    def __init__(
        self,
        *,
        session: SessionService,
        tasks: TaskStoreClient,
        profiles: ProfileRepo,
        notifier: Notifier,
        navigator: Navigator,
        strip_days: int = 7,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._session = session
        self._profiles = profiles
        self._notifier = notifier
        self._navigator = navigator
        self._strip_days = strip_days
        self._today = today

        self.task_list = TaskListViewModel(tasks, notifier)
        self.state = HomeState.LOADING
        self.user_id: str | None = None
        self.display_name = ""
        self.month_label = ""
        self.date_strip: list[DaySlot] = []

    @property
    def ready(self) -> bool:
        return self.state == HomeState.READY

    async def enter(self, user_id: str | None) -> HomeState:
        self.state = HomeState.LOADING
        uid = (user_id or "").strip() or (self._session.current_user() or "").strip()
        if not uid:
            logger.warning("Home entered without a user id; redirecting to sign-in")
            self.state = HomeState.UNAUTHENTICATED
            self._navigator.to_sign_in(clear_history=True)
            return self.state

        self.user_id = uid
        today = self._today()
        self.month_label = month_label(today)
        self.date_strip = build_date_strip(today, self._strip_days)

        try:
            profile = await self._profiles.get_once(uid)
            self.display_name = profile.display_name
        except (ProfileNotFound, StoreError) as e:
            logger.warning("Profile read failed user=%s: %s", uid, e)
            self.display_name = ""
            self._notifier.notify(MSG_PROFILE_FAILED)

        await self.task_list.subscribe(uid)
        self.state = HomeState.READY
        logger.info("Home ready user=%s", uid)
        return self.state

    async def exit(self) -> None:
        await self.task_list.unsubscribe()

    # ---- actions ----

    def add_task(self) -> None:
        # New tasks show up through the subscription; nothing comes back here.
        self._navigator.to_add_task()

    def edit_task(self, position: int) -> None:
        self._navigator.to_edit_task(self.task_list.task_at(position).id)

    def open_calendar(self) -> None:
        self._navigator.to_calendar()

    def select(self, position: int) -> bool:
        return self.task_list.toggle_selection(position)

    async def toggle_complete(self, position: int) -> bool:
        task = self.task_list.task_at(position)
        return await self.task_list.set_status(position, not task.is_completed)

    async def set_complete(self, position: int, completed: bool) -> bool:
        return await self.task_list.set_status(position, completed)

    async def remove_selected(self) -> int:
        if not self.task_list.get_selected():
            self._notifier.notify(MSG_NOTHING_SELECTED)
            return 0
        removal = await self.task_list.remove_selected()
        self._notifier.notify(MSG_DELETED if removal.ok else MSG_DELETE_INCOMPLETE)
        return removal.issued

    async def sign_out(self) -> None:
        """Leave home for sign-in with history cleared, even if the backend sign-out fails."""
        try:
            await self._session.sign_out()
        except Exception:
            logger.exception("Sign-out failed; leaving home anyway")
        await self.exit()
        self.state = HomeState.UNAUTHENTICATED
        self.user_id = None
        self._navigator.to_sign_in(clear_history=True)
