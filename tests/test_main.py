# tests/test_main.py

from __future__ import annotations

import json

from pocket_tasks.cli.bootstrap import create_initial_state
from pocket_tasks.cli.main import run_app, start_background_loop


def _reader(lines: list[str], final: BaseException):
    it = iter(lines)

    def read(_prompt: str) -> str:
        try:
            return next(it)
        except StopIteration:
            raise final from None

    return read


def _stored_titles(settings) -> list[str]:
    path = settings.json_store_dir / "tasks.json"
    return [rec["title"] for rec in json.loads(path.read_text("utf-8"))]


def test_ctrl_c_at_prompt_drains_and_returns(settings) -> None:
    settings.console_enabled = True
    state = create_initial_state(settings=settings)

    run_app(state, read=_reader(["/add Buy milk", "/add Call mom"], KeyboardInterrupt()))

    assert state.writer.closed
    assert _stored_titles(settings) == ["Call mom", "Buy milk"]


def test_eof_ends_session_and_next_start_hydrates(settings) -> None:
    settings.console_enabled = True
    first = create_initial_state(settings=settings)
    run_app(first, read=_reader(["/add Water plants"], EOFError()))

    second = create_initial_state(settings=settings)
    seen: list[str] = []

    def read(_prompt: str) -> str:
        seen.extend(t.title for t in second.task_store.tasks)
        return "/exit"

    run_app(second, read=read)
    assert seen == ["Water plants"]


def test_console_disabled_only_hydrates(settings) -> None:
    state = create_initial_state(settings=settings)
    run_app(state, read=_reader([], AssertionError("console must not run")))
    assert state.task_store.hydrated
    assert state.writer.closed


def test_background_loop_runs_coroutines_and_stops() -> None:
    bg = start_background_loop()

    async def answer() -> int:
        return 42

    assert bg.run(answer(), timeout=5.0) == 42
    bg.stop()
    assert not bg.thread.is_alive()
