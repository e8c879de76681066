from __future__ import annotations

import threading
import time

import pytest

from capl.mocktest import (
    Call,
    MockContext,
    Once,
    RecordingReporter,
    Result,
    compile_paths,
    describe_all,
    one_of,
    path,
    run,
)

from conftest import Journal, noop


def test_run_evaluates_onces_calls_then_result(journal: Journal) -> None:
    (pth,) = compile_paths(
        Once("seed", journal.action("seed")),
        Call("first", journal.action("first")),
        Call("second", journal.action("second")),
        Result("assert", journal.action("assert")),
    )

    run(MockContext(), pth)

    assert journal.entries == ["seed", "first", "second", "assert"]


def test_once_runs_one_time_across_derived_paths(journal: Journal) -> None:
    paths = compile_paths(
        Once("seed", journal.action("seed")),
        one_of(
            path(Call("a", journal.action("a")), Result("r1", journal.action("r1"))),
            path(Call("b", journal.action("b")), Result("r2", journal.action("r2"))),
        ),
    )

    for pth in paths:
        run(MockContext(), pth)

    assert journal.entries == ["seed", "a", "r1", "b", "r2"]
    assert journal.entries.count("seed") == 1
    assert paths[1].onces[0].ran is True


def test_failing_call_aborts_the_rest_of_the_path(journal: Journal) -> None:
    def boom(_: MockContext) -> None:
        raise AssertionError("boom")

    paths = compile_paths(
        one_of(
            path(Call("bad", boom), Result("never", journal.action("never"))),
            path(Call("good", journal.action("good")), Result("ok", journal.action("ok"))),
        ),
    )

    with pytest.raises(AssertionError, match="boom"):
        run(MockContext(), paths[0])
    run(MockContext(), paths[1])

    assert journal.entries == ["good", "ok"]


def test_failing_once_is_not_marked_as_ran(journal: Journal) -> None:
    attempts: list[int] = []

    def flaky(_: MockContext) -> None:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("first attempt fails")

    paths = compile_paths(
        Once("seed", flaky),
        one_of(Result("r1", noop), Result("r2", noop)),
    )

    with pytest.raises(RuntimeError):
        run(MockContext(), paths[0])
    assert paths[0].onces[0].ran is False

    run(MockContext(), paths[1])
    assert len(attempts) == 2
    assert paths[1].onces[0].ran is True


def test_reporter_receives_each_step_label() -> None:
    reporter = RecordingReporter()
    (pth,) = compile_paths(Once("seed", noop), Call("call", noop), Result("result", noop))

    run(MockContext(reporter=reporter), pth)

    assert reporter.steps == ["seed", "call", "result"]


def test_skipped_once_is_not_reported() -> None:
    paths = compile_paths(Once("seed", noop), one_of(Result("r1", noop), Result("r2", noop)))
    reporter = RecordingReporter()

    for pth in paths:
        run(MockContext(reporter=reporter), pth)

    assert reporter.steps == ["seed", "r1", "r2"]


def test_reporter_logs_steps(caplog: pytest.LogCaptureFixture) -> None:
    (pth,) = compile_paths(Call("call", noop), Result("result", noop))

    with caplog.at_level("INFO", logger="capl.mocktest.runner"):
        run(MockContext(), pth)

    assert "STEP: call" in caplog.text
    assert "STEP: result" in caplog.text


def test_describe_omits_once_already_described() -> None:
    paths = compile_paths(
        Once("seed", noop),
        one_of(
            path(Call("a", noop), Result("r1", noop)),
            path(Call("b", noop), Result("r2", noop)),
        ),
    )

    assert describe_all(paths) == ["seed > a > r1", "b > r2"]


def test_describe_is_independent_of_execution() -> None:
    paths = compile_paths(Once("seed", noop), one_of(Result("r1", noop), Result("r2", noop)))

    for pth in paths:
        run(MockContext(), pth)

    assert paths[0].describe() == "seed > r1"


def test_describe_is_stable_across_compiles() -> None:
    def build():
        return (
            Once("seed", noop),
            one_of(Result("r1", noop), Result("r2", noop)),
        )

    assert describe_all(compile_paths(*build())) == describe_all(compile_paths(*build()))


def test_context_handle_is_passed_through() -> None:
    cancel = threading.Event()
    seen: list[object] = []
    (pth,) = compile_paths(Result("result", lambda ctx: seen.append(ctx.context)))

    run(MockContext(context=cancel), pth)

    assert seen == [cancel]


def test_once_runs_at_most_once_under_concurrency() -> None:
    counter: list[int] = []

    def slow_seed(_: MockContext) -> None:
        time.sleep(0.05)
        counter.append(1)

    paths = compile_paths(
        Once("seed", slow_seed),
        one_of(*(Result(f"r{i}", noop) for i in range(8))),
    )
    threads = [threading.Thread(target=run, args=(MockContext(), pth)) for pth in paths]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert counter == [1]
