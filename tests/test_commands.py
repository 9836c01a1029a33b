# tests/test_commands.py

from __future__ import annotations

import asyncio

from pocket_tasks.cli.commands import CommandRegistry, registry, split_options
from pocket_tasks.connectors.console_connector import handle_line, run_console_loop
from pocket_tasks.tasks.task_models import Priority

from .conftest import make_task


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called = {"n": 0}

    def h(state, args):
        called["n"] += 1
        return "|".join(args)

    reg.register("echo", h, "echo args", aliases=["e"])

    assert reg.handle(state, '/echo a "b c"') == "a|b c"
    assert reg.handle(state, "/E x") == "x"
    assert called["n"] == 2


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_split_options() -> None:
    assert split_options(["Buy", "milk", "--priority", "High"]) == (["Buy", "milk"], {"priority": "High"})


def test_add_uses_default_category_and_persists(state, sink) -> None:
    reply = registry.handle(state, '/add Buy milk --priority low --due 2026-03-01 --notes "2 litres"')
    assert reply is not None and reply.startswith("Added")

    (task,) = state.task_store.tasks
    assert task.title == "Buy milk"
    assert task.category == "Personal"
    assert task.priority == Priority.LOW
    assert task.notes == "2 litres"
    assert len(sink.snapshots) == 1


def test_add_empty_title_is_rejected_before_store(state, sink) -> None:
    reply = registry.handle(state, "/add --category Work")
    assert reply == "Error: Task title cannot be empty"
    assert state.task_store.tasks == ()
    assert sink.snapshots == []


def test_done_toggles_by_id_prefix(state) -> None:
    state.task_store.add_task(make_task("abcdef123456", title="Pay rent"))

    assert registry.handle(state, "/done abcdef") == "Completed: Pay rent"
    assert state.task_store.tasks[0].completed is True
    assert registry.handle(state, "/done abcdef") == "Reopened: Pay rent"
    assert state.task_store.tasks[0].completed_at is None


def test_unknown_id_is_reported_not_dispatched(state, sink) -> None:
    assert registry.handle(state, "/delete nothing") == "Error: No task with id nothing"
    assert sink.snapshots == []


def test_ambiguous_prefix_is_reported(state) -> None:
    state.task_store.add_task(make_task("aa1"))
    state.task_store.add_task(make_task("aa2"))
    assert "Ambiguous" in (registry.handle(state, "/show aa") or "")


def test_edit_list_completed_stats(state) -> None:
    state.task_store.add_task(make_task("t1", title="Write report"))
    state.task_store.add_task(make_task("t2", title="Call mom", category="Personal"))

    assert registry.handle(state, "/edit t1 --priority High --title 'Write final report'") == (
        "Updated t1: Write final report"
    )
    assert state.task_store.get("t1").priority == Priority.HIGH

    listing = registry.handle(state, "/list --sort priority") or ""
    assert listing.splitlines()[0].endswith("Write final report  (Work, High, due Jan 01, 2026)")

    assert registry.handle(state, "/list --search mom --category Work") == "No tasks."
    assert registry.handle(state, "/completed") == "No completed tasks."

    registry.handle(state, "/done t2")
    assert "Call mom" in (registry.handle(state, "/completed") or "")
    assert registry.handle(state, "/stats") == "Total: 2 | Completed: 1 | Completion rate: 50.0%"
    assert registry.handle(state, "/categories") == "All, Personal, Work"


def test_edit_with_nothing_to_change(state) -> None:
    state.task_store.add_task(make_task("t1"))
    assert registry.handle(state, "/edit t1") == "Nothing to change."


def test_console_bare_text_adds_task(state) -> None:
    assert handle_line(state, "   ") is None
    assert (handle_line(state, "Water plants") or "").startswith("Added")
    assert state.task_store.tasks[0].title == "Water plants"


def test_console_loop_runs_until_exit(state, capsys) -> None:
    lines = iter(["/add Feed cat", "/stats", "/exit", "/add never"])
    run_console_loop(state, read=lambda _prompt: next(lines))

    out = capsys.readouterr().out
    assert "Total: 1 | Completed: 0" in out
    assert [t.title for t in state.task_store.tasks] == ["Feed cat"]


def test_console_loop_stops_on_eof(state) -> None:
    def read(_prompt: str) -> str:
        raise EOFError

    run_console_loop(state, read=read)


def test_help_lists_exit_and_default_categories(state) -> None:
    text = registry.handle(state, "/help") or ""
    assert "/exit - " in text
    assert "Work|Personal|Urgent" in text
    assert registry.handle(state, "/quit") == "Use /exit at the console prompt to quit."


def test_console_refuses_input_once_storage_is_closed(state) -> None:
    asyncio.run(state.writer.aclose())

    reply = handle_line(state, "/add Late task")

    assert reply == "Storage is closed; changes can no longer be saved."
    assert state.task_store.tasks == ()
