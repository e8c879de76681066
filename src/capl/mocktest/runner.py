from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .context import MockContext
    from .dsl.model import Action
    from .paths import CompiledPath

logger = logging.getLogger(__name__)


class StepReporter(Protocol):
    def step(self, text: str) -> None: ...


class LoggingReporter:
    """Report each step as an INFO record, the way a test runner logs steps."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def step(self, text: str) -> None:
        self._log.info("STEP: %s", text)


class RecordingReporter(LoggingReporter):
    """Log steps and keep them, so a driver can attach them to a result."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        super().__init__(log)
        self.steps: list[str] = []

    def step(self, text: str) -> None:
        self.steps.append(text)
        super().step(text)


def run(ctx: MockContext, path: CompiledPath) -> None:
    """Evaluate the once steps, calls and result of a compiled path, in order.

    An exception raised by any action propagates and aborts the rest of the
    path. Once steps that already ran on an earlier path are skipped.
    """

    def evaluate(text: str, action: Action) -> None:
        ctx.reporter.step(text)
        action(ctx)

    for once in path.onces:
        if not once.invoke(evaluate):
            logger.debug("Skipping once step %r, already ran", once.label)
    for call in path.calls:
        evaluate(call.label, call.action)
    evaluate(path.result.label, path.result.action)
