# tests/test_commands.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from todo_titans.cli.commands import CommandRegistry


@pytest.mark.asyncio
async def test_command_registry_routes_name_and_aliases() -> None:
    reg = CommandRegistry()
    calls: list[list[str]] = []

    async def handler(app, args):
        calls.append(args)
        return "ok"

    reg.register("select", handler, "Toggle selection.", aliases=["sel"])
    app = SimpleNamespace()

    assert await reg.handle(app, "/select 2") == "ok"
    assert await reg.handle(app, "/SEL 3") == "ok"
    assert calls == [["2"], ["3"]]
    assert "/select - Toggle selection." in reg.build_help()
    assert "/sel " not in reg.build_help()


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command() -> None:
    reg = CommandRegistry()
    app = SimpleNamespace()
    assert await reg.handle(app, "hello") is None
    assert "Unknown command" in (await reg.handle(app, "/nope") or "")
    assert "Empty command" in (await reg.handle(app, "/") or "")
