# src/todo_titans/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..home.home_controller import HomeController

if TYPE_CHECKING:
    from ..connectors.console_connector import ConsoleApp

CommandHandler = Callable[["ConsoleApp", list[str]], Awaitable[str | None]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /login, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, app: ConsoleApp, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string, or None when the line is not a command
        or the handler already produced its own output.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(app, parts[1:])

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _position(args: list[str], usage: str) -> int | str:
    """Parse a 1-based row number into a 0-based position, or return the usage text."""
    if len(args) != 1:
        return usage
    try:
        n = int(args[0])
    except ValueError:
        return usage
    if n < 1:
        return usage
    return n - 1


def _home(app: ConsoleApp) -> HomeController | str:
    if app.home is None or not app.home.ready:
        return "Sign in first (/login <email> <password>)."
    return app.home


async def cmd_help(app: ConsoleApp, args: list[str]) -> str | None:
    return registry.build_help()


async def cmd_login(app: ConsoleApp, args: list[str]) -> str | None:
    if app.screen == "home":
        return "Already signed in. Use /logout first."
    if app.screen != "sign_in":
        # Abandon the sign-up / password-reset form.
        app.to_sign_in()
    if len(args) > 2:
        return "Usage: /login <email> <password>"
    email = args[0] if args else ""
    password = args[1] if len(args) > 1 else ""
    await app.sign_in.submit(email, password)
    return None


async def cmd_signup(app: ConsoleApp, args: list[str]) -> str | None:
    if app.screen not in ("sign_in", "sign_up"):
        return "Sign out before creating another account."
    if app.screen == "sign_in":
        app.sign_in.open_sign_up()
    padded = (args + ["", "", ""])[:3]
    await app.sign_up.submit(*padded)
    return None


async def cmd_forgot(app: ConsoleApp, args: list[str]) -> str | None:
    if app.screen not in ("sign_in", "forgot_password"):
        return "Sign out before resetting a password."
    if app.screen == "sign_in":
        app.sign_in.open_forgot_password()
    await app.forgot_password.submit(args[0] if args else "")
    return None


async def cmd_tasks(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    return app.render_home()


async def cmd_select(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    pos = _position(args, "Usage: /select <n>")
    if isinstance(pos, str):
        return pos
    try:
        selected = home.select(pos)
    except IndexError:
        return f"No task #{pos + 1}."
    return f"Task #{pos + 1} {'selected' if selected else 'unselected'}."


async def _set_done(app: ConsoleApp, args: list[str], completed: bool, usage: str) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    pos = _position(args, usage)
    if isinstance(pos, str):
        return pos
    try:
        await home.set_complete(pos, completed)
    except IndexError:
        return f"No task #{pos + 1}."
    return None


async def cmd_done(app: ConsoleApp, args: list[str]) -> str | None:
    return await _set_done(app, args, True, "Usage: /done <n>")


async def cmd_undo(app: ConsoleApp, args: list[str]) -> str | None:
    return await _set_done(app, args, False, "Usage: /undo <n>")


async def cmd_remove(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    await home.remove_selected()
    return None


async def cmd_add(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    home.add_task()
    return None


async def cmd_edit(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    pos = _position(args, "Usage: /edit <n>")
    if isinstance(pos, str):
        return pos
    try:
        home.edit_task(pos)
    except IndexError:
        return f"No task #{pos + 1}."
    return None


async def cmd_calendar(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    home.open_calendar()
    return None


async def cmd_back(app: ConsoleApp, args: list[str]) -> str | None:
    if not app.go_back():
        return "Nothing to go back to."
    return None


async def cmd_logout(app: ConsoleApp, args: list[str]) -> str | None:
    home = _home(app)
    if isinstance(home, str):
        return home
    await home.sign_out()
    return None


async def cmd_status(app: ConsoleApp, args: list[str]) -> str | None:
    user = app.state.session.current_user() or "-"
    return (
        "Status:\n"
        f"  Backend: {app.state.backend_name}\n"
        f"  Screen: {app.screen}\n"
        f"  User: {user}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show backend, screen and signed-in user.")
registry.register("login", cmd_login, help_text="Sign in: /login <email> <password>.")
registry.register("signup", cmd_signup, help_text="Create an account: /signup <email> <password> <confirm>.")
registry.register("forgot", cmd_forgot, help_text="Send a password reset email: /forgot <email>.")
registry.register("tasks", cmd_tasks, help_text="Show the home screen.", aliases=["ls"])
registry.register("select", cmd_select, help_text="Toggle selection of task n: /select <n>.", aliases=["sel"])
registry.register("done", cmd_done, help_text="Mark task n completed: /done <n>.")
registry.register("undo", cmd_undo, help_text="Mark task n pending: /undo <n>.")
registry.register("remove", cmd_remove, help_text="Delete the selected tasks.", aliases=["rm"])
registry.register("add", cmd_add, help_text="Open the task-creation screen.")
registry.register("edit", cmd_edit, help_text="Open the edit screen for task n: /edit <n>.")
registry.register("calendar", cmd_calendar, help_text="Open the calendar screen.")
registry.register("back", cmd_back, help_text="Go back to the previous screen.")
registry.register("logout", cmd_logout, help_text="Sign out.")
