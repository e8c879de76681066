from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable

from .errors import RecorderOverflowError

DEFAULT_RECORDER_BUFFER_SIZE = 20


class EventRecorder:
    """Bounded in-memory sink for events emitted during a single test path."""

    def __init__(self, maxsize: int = DEFAULT_RECORDER_BUFFER_SIZE) -> None:
        if maxsize <= 0:
            msg = "Recorder buffer size must be positive"
            raise ValueError(msg)
        self._maxsize = maxsize
        self._events: queue.Queue[str] = queue.Queue(maxsize=maxsize)

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def event(self, obj: Any, event_type: str, reason: str, message: str) -> None:
        try:
            self._events.put_nowait(f"{event_type} {reason} {message}")
        except queue.Full as exc:
            msg = f"Event recorder buffer of {self._maxsize} is full, dropping {reason!r}"
            raise RecorderOverflowError(msg) from exc

    def eventf(self, obj: Any, event_type: str, reason: str, message_fmt: str, *args: Any) -> None:
        message = message_fmt % args if args else message_fmt
        self.event(obj, event_type, reason, message)

    def drain(self) -> list[str]:
        drained: list[str] = []
        while True:
            try:
                drained.append(self._events.get_nowait())
            except queue.Empty:
                return drained

    def __len__(self) -> int:
        return self._events.qsize()


class LogBuffer:
    """Thread-safe text sink, usable as the stream of a logging handler."""

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._condition = threading.Condition()

    def write(self, text: str) -> int:
        if not text:
            return 0
        with self._condition:
            self._chunks.append(text)
            self._condition.notify_all()
        return len(text)

    def flush(self) -> None:
        return None

    def getvalue(self) -> str:
        with self._condition:
            return "".join(self._chunks)

    def reset(self) -> None:
        with self._condition:
            self._chunks.clear()

    def wait_for(self, match: str | Callable[[str], bool], timeout: float) -> bool:
        """Block until the captured text contains ``match``, or satisfies it when callable."""

        check = match if callable(match) else (lambda text: match in text)
        with self._condition:
            return self._condition.wait_for(lambda: check("".join(self._chunks)), timeout=timeout)


def capture_logger(
    name: str,
    buffer: LogBuffer,
    *,
    level: int | str = logging.DEBUG,
    fmt: str = "%(levelname)s %(name)s %(message)s",
    parent: logging.Logger | None = None,
) -> logging.Logger:
    """Build a logger that writes to ``buffer`` and still propagates to ``parent``.

    The logger is not registered with the logging manager, so every test
    path can own one without leaking handlers into the global registry.
    """

    logger = logging.Logger(name, level=level)
    handler = logging.StreamHandler(buffer)  # type: ignore[arg-type]
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.parent = parent or logging.getLogger(name.rpartition(".")[0] or name)
    logger.propagate = True
    return logger
