# tests/test_task_list.py

from __future__ import annotations

import pytest

from todo_titans.core.errors import StoreError
from todo_titans.tasks.task_list import MSG_LOAD_FAILED, MSG_UPDATE_FAILED, TaskListViewModel

from .fakes import FakeNotifier, FakeTaskStore, make_task, settle


@pytest.mark.asyncio
async def test_subscribe_mirrors_every_pushed_snapshot_in_order(task_store: FakeTaskStore, notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(task_store, notifier)
    await vm.subscribe("u1")
    await settle()

    assert task_store.watch_calls == ["u1"]
    assert [t.id for t in vm.tasks] == ["t1", "t2", "t3"]

    pushed = [make_task(f"n{i}") for i in (5, 2, 9, 1)]
    task_store.push(pushed)
    await settle()

    # Same length, same order as delivered; no sorting, no drops.
    assert len(vm) == len(pushed)
    assert [t.id for t in vm.tasks] == ["n5", "n2", "n9", "n1"]

    await vm.unsubscribe()


@pytest.mark.asyncio
async def test_unsubscribe_releases_the_live_query(task_store: FakeTaskStore, notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(task_store, notifier)
    await vm.subscribe("u1")
    await settle()
    assert task_store.active_watches == 1
    assert vm.subscribed

    await vm.unsubscribe()
    assert task_store.active_watches == 0
    assert not vm.subscribed

    # Idempotent.
    await vm.unsubscribe()


@pytest.mark.asyncio
async def test_resubscribe_drops_the_previous_stream(task_store: FakeTaskStore, notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(task_store, notifier)
    await vm.subscribe("u1")
    await settle()
    await vm.subscribe("someone-else")
    await settle()

    assert task_store.active_watches == 1
    assert [t.id for t in vm.tasks] == ["x1"]
    await vm.unsubscribe()


@pytest.mark.asyncio
async def test_stream_failure_is_reported_not_raised(task_store: FakeTaskStore, notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(task_store, notifier)
    await vm.subscribe("u1")
    await settle()

    task_store.fail_watch(StoreError("permission denied"))
    await settle()

    assert notifier.messages == [MSG_LOAD_FAILED]
    assert not vm.subscribed
    await vm.unsubscribe()


def test_selection_is_keyed_by_id_and_survives_reordering(notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(FakeTaskStore(), notifier)
    vm.apply_snapshot([make_task("a"), make_task("b"), make_task("c")])

    assert vm.toggle_selection(1) is True
    assert [t.id for t in vm.get_selected()] == ["b"]

    # A push reorders the list; position 1 is now "a" but the selection stays on "b".
    vm.apply_snapshot([make_task("c"), make_task("a"), make_task("b")])
    assert [t.id for t in vm.get_selected()] == ["b"]
    assert vm.is_selected(2)
    assert not vm.is_selected(1)

    # A push without "b" drops it from the selection.
    vm.apply_snapshot([make_task("c"), make_task("a")])
    assert vm.get_selected() == []


def test_toggle_selection_twice_unselects(notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(FakeTaskStore(), notifier)
    vm.apply_snapshot([make_task("a")])
    assert vm.toggle_selection(0) is True
    assert vm.toggle_selection(0) is False
    assert vm.get_selected() == []

    with pytest.raises(IndexError):
        vm.toggle_selection(3)


@pytest.mark.asyncio
async def test_toggling_completion_twice_restores_status_with_two_upserts(notifier: FakeNotifier) -> None:
    store = FakeTaskStore()
    vm = TaskListViewModel(store, notifier)
    vm.apply_snapshot([make_task("a", status="Pending")])

    assert await vm.set_status(0, True)
    assert vm.tasks[0].status == "Completed"
    assert await vm.set_status(0, False)
    assert vm.tasks[0].status == "Pending"

    assert len(store.upsert_calls) == 2
    assert [task_id for task_id, _ in store.upsert_calls] == ["a", "a"]
    # The whole record goes out, not just the status.
    first = store.upsert_calls[0][1]
    assert first.title == "Task a"
    assert first.status == "Completed"


@pytest.mark.asyncio
async def test_failed_upsert_notifies_and_keeps_local_change_until_next_push(notifier: FakeNotifier) -> None:
    store = FakeTaskStore()
    store.fail_upsert = True
    vm = TaskListViewModel(store, notifier)
    vm.apply_snapshot([make_task("a", status="Pending")])

    assert await vm.set_status(0, True) is False
    assert notifier.messages == [MSG_UPDATE_FAILED]
    assert vm.tasks[0].status == "Completed"

    vm.apply_snapshot([make_task("a", status="Pending")])
    assert vm.tasks[0].status == "Pending"


@pytest.mark.asyncio
async def test_remove_selected_issues_one_delete_per_task_and_clears(notifier: FakeNotifier) -> None:
    store = FakeTaskStore()
    store.fail_delete = {"b"}
    vm = TaskListViewModel(store, notifier)
    vm.apply_snapshot([make_task("a"), make_task("b"), make_task("c")])
    vm.toggle_selection(0)
    vm.toggle_selection(1)

    removal = await vm.remove_selected()

    assert removal.issued == 2
    assert removal.failed == ("b",)
    assert not removal.ok
    assert sorted(store.delete_calls) == ["a", "b"]
    assert vm.get_selected() == []
    # Not removed locally; the subscription is the source of truth.
    assert len(vm) == 3
    assert len(notifier.messages) == 1


@pytest.mark.asyncio
async def test_remove_selected_with_nothing_selected_issues_no_calls(notifier: FakeNotifier) -> None:
    store = FakeTaskStore()
    vm = TaskListViewModel(store, notifier)
    vm.apply_snapshot([make_task("a")])

    removal = await vm.remove_selected()
    assert removal.issued == 0
    assert removal.ok
    assert store.delete_calls == []


def test_rows_render_due_date_checked_and_selected(notifier: FakeNotifier) -> None:
    vm = TaskListViewModel(FakeTaskStore(), notifier)
    vm.apply_snapshot(
        [
            make_task("a", due_date="  ", status="Completed"),
            make_task("b", due_date="Oct 20", status="Archived"),
        ]
    )
    vm.toggle_selection(1)

    a, b = vm.rows()
    assert a.due_date is None
    assert a.checked is True
    assert a.selected is False
    assert b.due_date == "Oct 20"
    # Unknown status values are kept and shown as not completed.
    assert b.checked is False
    assert vm.tasks[1].status == "Archived"
    assert b.selected is True


def test_on_change_fires_for_snapshots_and_selection(notifier: FakeNotifier) -> None:
    calls: list[int] = []
    vm = TaskListViewModel(FakeTaskStore(), notifier, on_change=lambda: calls.append(1))
    vm.apply_snapshot([make_task("a")])
    vm.toggle_selection(0)
    vm.clear_selection()
    assert len(calls) == 3
