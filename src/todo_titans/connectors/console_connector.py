# src/todo_titans/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import date, datetime

from ..auth.account_controller import ForgotPasswordController, SignUpController
from ..auth.sign_in_controller import SignInController
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..home.home_controller import HomeController, HomeState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleApp:
    """
    Console stand-in for the app's screens.

    Plays both the Notifier (toasts become timestamped lines) and the Navigator
    (screen switches) for the controllers. Task creation, editing and the
    calendar are external screens; navigating to them only prints a note.

    Screens: sign_in, sign_up, forgot_password, home.
    """

    def __init__(
        self,
        state: AppState,
        *,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.state = state
        self._input = input_fn
        self._out = output
        self._today = today

        self.screen = "sign_in"
        self.history: list[str] = []
        self.home: HomeController | None = None
        self._pending_home: str | None = None
        self._redraw_scheduled = False

        self.sign_in = self._new_sign_in()
        self.sign_up = SignUpController(session=state.session, notifier=self, navigator=self)
        self.forgot_password = ForgotPasswordController(session=state.session, notifier=self, navigator=self)

    def _new_sign_in(self) -> SignInController:
        return SignInController(session=self.state.session, notifier=self, navigator=self)

    # ---- Notifier ----

    def notify(self, message: str) -> None:
        self._out(f"[{_ts_local()}] {message}")

    # ---- Navigator ----

    def to_home(self, user_id: str) -> None:
        # The sign-in flow is finished; nothing to go back to.
        self.history.clear()
        self.screen = "home"
        self._pending_home = user_id

    def to_sign_in(self, *, clear_history: bool = False) -> None:
        if clear_history:
            self.history.clear()
            self.home = None
            self.sign_in = self._new_sign_in()
        elif "sign_in" in self.history:
            del self.history[self.history.index("sign_in") :]
        self.screen = "sign_in"
        self._out("[SIGN IN] /login <email> <password> | /signup | /forgot")

    def to_sign_up(self) -> None:
        self.history.append(self.screen)
        self.screen = "sign_up"

    def to_forgot_password(self) -> None:
        self.history.append(self.screen)
        self.screen = "forgot_password"

    def to_add_task(self) -> None:
        self._out("[NAV] Task creation is not available in the console client.")

    def to_edit_task(self, task_id: str) -> None:
        self._out(f"[NAV] Editing task {task_id} is not available in the console client.")

    def to_calendar(self) -> None:
        self._out("[NAV] The calendar is not available in the console client.")

    def go_back(self) -> bool:
        if not self.history:
            return False
        self.screen = self.history.pop()
        return True

    # ---- rendering ----

    def render_tasks(self) -> str:
        if self.home is None:
            return ""
        rows = self.home.task_list.rows()
        if not rows:
            return "  (no tasks)"
        lines: list[str] = []
        for i, r in enumerate(rows, start=1):
            sel = "*" if r.selected else " "
            mark = "x" if r.checked else " "
            text = f"{i:>3}.{sel}[{mark}] {r.title}"
            if r.description:
                text += f" - {r.description}"
            if r.due_date:
                text += f" (due {r.due_date})"
            lines.append(text)
        return "\n".join(lines)

    def render_header(self) -> str:
        home = self.home
        if home is None:
            return ""
        strip = "  ".join(f"[{s.label}]" if s.is_today else s.label for s in home.date_strip)
        return "\n".join([home.display_name or "(unknown user)", home.month_label, strip])

    def render_home(self) -> str:
        if self.home is None:
            return ""
        return f"{self.render_header()}\n{self.render_tasks()}"

    def _on_tasks_changed(self) -> None:
        # Coalesce bursts (snapshot + selection change) into one redraw.
        if self._redraw_scheduled:
            return
        self._redraw_scheduled = True
        asyncio.get_running_loop().call_soon(self._redraw)

    def _redraw(self) -> None:
        self._redraw_scheduled = False
        if self.screen == "home" and self.home is not None:
            self._out(self.render_tasks())

    # ---- lifecycle ----

    async def _settle(self) -> None:
        """Finish any navigation that needs awaiting (entering home)."""
        uid = self._pending_home
        if uid is None:
            return
        self._pending_home = None

        if self.home is not None:
            await self.home.exit()
        home = HomeController(
            session=self.state.session,
            tasks=self.state.tasks,
            profiles=self.state.profiles,
            notifier=self,
            navigator=self,
            strip_days=self.state.settings.strip_days,
            today=self._today,
        )
        home.task_list.on_change = self._on_tasks_changed
        self.home = home
        if await home.enter(uid) == HomeState.READY:
            self._out(self.render_header())

    async def start(self) -> None:
        self.sign_in.enter()
        await self._settle()
        if self.screen == "sign_in":
            self._out("[SIGN IN] /login <email> <password> | /signup | /forgot")

    async def handle_line(self, line: str) -> str | None:
        reply = await command_registry.handle(self, line)
        if reply is None and not line.startswith("/"):
            reply = "Commands start with '/'. Use /help to list them."
        await self._settle()
        return reply

    async def shutdown(self) -> None:
        if self.home is not None:
            await self.home.exit()

    async def run(self) -> None:
        logger.info("Console connector started (backend=%s).", self.state.backend_name)
        self._out(f"[{_ts_local()}] [CONSOLE] {self.state.settings.app_name}. Use /help for commands, /exit to quit.")

        await self.start()
        try:
            while True:
                try:
                    raw = await asyncio.to_thread(self._input, f"{self.screen}> ")
                except EOFError:
                    logger.info("Console EOF received, exiting.")
                    break

                line = raw.strip()
                if not line:
                    continue
                if line.lower() in ("/exit", "/quit"):
                    logger.info("Console exit command received.")
                    break

                try:
                    reply = await self.handle_line(line)
                except Exception:
                    logger.exception("Command handler crashed.")
                    reply = "Internal error while handling a command."

                if reply:
                    self._out(f"[{_ts_local()}] {reply}")
        finally:
            await self.shutdown()
            logger.info("Console connector finished.")


async def run_console(state: AppState) -> None:
    await ConsoleApp(state).run()
