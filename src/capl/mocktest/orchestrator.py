from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterator

import pytest

from .clients import MockClient, MockClients, MockController
from .config import SuiteConfig
from .context import MockContext
from .dsl.model import Action, Node, Once
from .dsl.planner import compile_paths
from .errors import ConfigurationError, PathFailureError
from .paths import CompiledPath, SharedOnce, describe_all
from .recording import EventRecorder, LogBuffer, capture_logger
from .runner import LoggingReporter, RecordingReporter, StepReporter, run

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PathResult:
    path: CompiledPath
    description: str
    steps: list[str] = field(default_factory=list)
    events: str = ""
    logs: str = ""
    error: BaseException | None = None
    skipped: BaseException | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def passed(self) -> bool:
        return self.error is None and self.skipped is None


@dataclass(slots=True, frozen=True)
class _Hook:
    label: str
    action: Action


class _Batch:
    """The paths of one compile, with the all-hooks scoped to them."""

    def __init__(self, paths: list[CompiledPath], before_all: list[_Hook]) -> None:
        self.paths = tuple(paths)
        self.remaining = list(paths)
        self.before_all = tuple(SharedOnce(Once(hook.label, hook.action)) for hook in before_all)
        self.started = False
        self.closed = False

    def owns(self, path: CompiledPath) -> bool:
        return any(pth is path for pth in self.paths)

    def complete(self, path: CompiledPath) -> bool:
        """Mark a path done. True when it was the last one left."""

        self.started = True
        for index, pth in enumerate(self.remaining):
            if pth is path:
                del self.remaining[index]
                break
        if self.remaining or self.closed:
            return False
        self.closed = True
        return True


class Suite:
    """Compile node trees and run each path against its own fresh mocks.

    Every path gets a new ``MockController``, new mock clients, a new event
    recorder and a new log buffer. The only state shared between paths is
    the ``ran`` flag of once steps. Drivers for hosts sit on top of
    ``run_path``: ``run`` iterates paths itself and ``parametrize`` hands
    them to pytest.

    ``before_all`` and ``after_all`` are scoped to one compile: the first
    path of a compile runs ``before_all`` and the last one runs
    ``after_all``. When a host skips some paths, ``finish`` closes any
    compile that started but never completed.
    """

    def __init__(self, *clients: MockClient, config: SuiteConfig | None = None) -> None:
        if not clients:
            msg = "unable to run tests without clients"
            raise ConfigurationError(msg)

        self._clients = clients
        self._config = config or SuiteConfig()
        self._before_each: list[_Hook] = []
        self._after_each: list[_Hook] = []
        self._before_all: list[_Hook] = []
        self._after_all: list[_Hook] = []
        self._batches: list[_Batch] = []
        self._lock = threading.Lock()
        self._counter = itertools.count()

    @property
    def config(self) -> SuiteConfig:
        return self._config

    @property
    def clients(self) -> tuple[MockClient, ...]:
        return self._clients

    def before_each(self, action: Action) -> Action:
        self._before_each.append(_Hook("BeforeEach", action))
        return action

    def after_each(self, action: Action) -> Action:
        self._after_each.append(_Hook("AfterEach", action))
        return action

    def before_all(self, action: Action) -> Action:
        self._before_all.append(_Hook("BeforeAll", action))
        return action

    def after_all(self, action: Action) -> Action:
        self._after_all.append(_Hook("AfterAll", action))
        return action

    def compile(self, *nodes: Node) -> list[CompiledPath]:
        paths = compile_paths(*nodes)
        if paths:
            with self._lock:
                self._batches.append(_Batch(paths, self._before_all))
        logger.debug("Suite registered %d path(s)", len(paths))
        return paths

    def new_context(
        self,
        *,
        context: Any = None,
        reporter: StepReporter | None = None,
    ) -> MockContext:
        controller = MockController()
        clients = MockClients()
        for client in self._clients:
            clients.build(client, controller)

        buffer = LogBuffer()
        path_logger = capture_logger(
            f"{self._config.logger_name}.path{next(self._counter)}",
            buffer,
            level=self._config.log_level,
            fmt=self._config.log_format,
            parent=logging.getLogger(self._config.logger_name),
        )
        return MockContext(
            clients=clients,
            controller=controller,
            context=context,
            reporter=reporter or LoggingReporter(),
            recorder=EventRecorder(self._config.recorder_buffer_size),
            logger=path_logger,
            log_buffer=buffer,
        )

    def run_path(
        self,
        path: CompiledPath,
        *,
        context: Any = None,
        reporter: StepReporter | None = None,
    ) -> MockContext:
        """Execute one compiled path with suite hooks around it."""

        ctx = self.new_context(context=context, reporter=reporter)
        try:
            self._execute(ctx, path)
        finally:
            self._release(ctx)
        return ctx

    def run(self, *nodes: Node, context: Any = None) -> list[PathResult]:
        """Compile the tree and run every path, collecting one result per path."""

        paths = self.compile(*nodes)
        # Describe up front so labels do not depend on execution order.
        descriptions = describe_all(paths)
        jobs = list(zip(paths, descriptions))
        if self._config.max_workers > 1:
            with ThreadPoolExecutor(max_workers=self._config.max_workers) as pool:
                results = list(pool.map(lambda job: self._run_collecting(*job, context), jobs))
        else:
            results = [self._run_collecting(pth, text, context) for pth, text in jobs]

        failed = sum(1 for result in results if result.failed)
        skipped = sum(1 for result in results if result.skipped is not None)
        logger.info("Ran %d test path(s), %d failed, %d skipped", len(results), failed, skipped)
        if failed and self._config.raise_on_failure:
            raise PathFailureError(results)
        return results

    def parametrize(self, *nodes: Node, argname: str = "mock_path") -> pytest.MarkDecorator:
        """Build a pytest parametrize marker with one test per compiled path.

        Pair it with ``teardown_fixture`` (or call ``finish``) so ``after_all``
        still runs when some of the generated tests are deselected.
        """

        paths = self.compile(*nodes)
        ids = [pth.describe() for pth in paths]
        return pytest.mark.parametrize(argname, paths, ids=ids)

    def teardown_fixture(self, name: str = "mock_suite") -> Any:
        """Build a module-scoped autouse fixture that calls ``finish`` on teardown."""

        @pytest.fixture(scope="module", autouse=True, name=name)
        def suite_teardown() -> Iterator[Suite]:
            yield self
            self.finish()

        return suite_teardown

    def finish(self, *, context: Any = None) -> None:
        """Run ``after_all`` for every compile that started but did not complete."""

        with self._lock:
            pending = [batch for batch in self._batches if batch.started and not batch.closed]
            for batch in pending:
                batch.closed = True
            self._batches = [batch for batch in self._batches if not batch.closed]

        for batch in pending:
            logger.debug("Closing compile with %d unrun path(s)", len(batch.remaining))
            ctx = self.new_context(context=context)
            try:
                for hook in self._after_all:
                    ctx.reporter.step(hook.label)
                    hook.action(ctx)
            finally:
                self._release(ctx)

    def _run_collecting(self, path: CompiledPath, description: str, context: Any) -> PathResult:
        reporter = RecordingReporter()
        result = PathResult(path=path, description=description, steps=reporter.steps)
        ctx = self.new_context(context=context, reporter=reporter)
        try:
            self._execute(ctx, path)
        except (pytest.skip.Exception, pytest.xfail.Exception) as exc:
            logger.debug("Test path %r skipped: %s", description, exc)
            result.skipped = exc
        except (Exception, pytest.fail.Exception) as exc:  # noqa: BLE001 - recorded on the path result
            logger.debug("Test path %r failed: %r", description, exc)
            result.error = exc
        finally:
            result.events = ctx.events()
            result.logs = ctx.logs()
            self._release(ctx)
        return result

    def _execute(self, ctx: MockContext, path: CompiledPath) -> None:
        def evaluate(text: str, action: Action) -> None:
            ctx.reporter.step(text)
            action(ctx)

        batch = self._batch_of(path)
        try:
            if batch is not None:
                for once in batch.before_all:
                    once.invoke(evaluate)
            for hook in self._before_each:
                evaluate(hook.label, hook.action)

            run(ctx, path)

            for hook in self._after_each:
                evaluate(hook.label, hook.action)
        finally:
            if batch is not None and self._complete(batch, path):
                for hook in self._after_all:
                    evaluate(hook.label, hook.action)

        ctx.controller.finish()

    def _batch_of(self, path: CompiledPath) -> _Batch | None:
        with self._lock:
            for batch in self._batches:
                if batch.owns(path):
                    return batch
        return None

    def _complete(self, batch: _Batch, path: CompiledPath) -> bool:
        with self._lock:
            if not batch.complete(path):
                return False
            self._batches.remove(batch)
            return True

    def _release(self, ctx: MockContext) -> None:
        # Flush events that were never consumed and the log buffer.
        if ctx.recorder is not None:
            ctx.recorder.drain()
        if ctx.log_buffer is not None:
            ctx.log_buffer.reset()
        if ctx.logger is not None:
            for handler in list(ctx.logger.handlers):
                ctx.logger.removeHandler(handler)
                handler.close()
