from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from .clients import MockClients, MockController
from .errors import ConfigurationError
from .recording import EventRecorder, LogBuffer
from .runner import LoggingReporter, StepReporter


@dataclass(slots=True)
class MockContext:
    """Everything the actions of a single test path get to work with.

    ``context`` is an opaque handle supplied by the caller, e.g. a
    ``threading.Event`` for cancellation or a deadline. It is passed through
    untouched.
    """

    clients: MockClients = field(default_factory=MockClients)
    controller: MockController = field(default_factory=MockController)
    context: Any = None
    reporter: StepReporter = field(default_factory=LoggingReporter)
    recorder: EventRecorder | None = None
    logger: logging.Logger | None = None
    log_buffer: LogBuffer | None = None
    _events: str = field(default="", repr=False)

    def events(self) -> str:
        """Drain recorded events and return every event seen on this path so far."""

        if self.recorder is None:
            msg = "no recorder configured on MockContext"
            raise ConfigurationError(msg)
        self._events += "".join(self.recorder.drain())
        return self._events

    def logs(self) -> str:
        if self.logger is None or self.log_buffer is None:
            msg = "no logger configured on MockContext"
            raise ConfigurationError(msg)
        return self.log_buffer.getvalue()

    def wait_for_log(self, match: str | Callable[[str], bool], timeout: float = 5.0) -> str:
        """Wait for log output written by another thread, e.g. a controller worker.

        Returns the captured logs once ``match`` appears. Fails the path with
        an ``AssertionError`` when it does not show up within ``timeout``.
        """

        if self.logger is None or self.log_buffer is None:
            msg = "no logger configured on MockContext"
            raise ConfigurationError(msg)
        if not self.log_buffer.wait_for(match, timeout):
            msg = f"log output did not match {match!r} within {timeout}s"
            raise AssertionError(msg)
        return self.log_buffer.getvalue()
