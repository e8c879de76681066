"""Exception hierarchy for the mocktest path framework.

Structural errors in an authored tree surface as ``CompileError`` subclasses
at construction or compile time. Failures inside test actions are ordinary
exceptions raised by the actions themselves and are only wrapped by the
sequential driver.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from .orchestrator import PathResult


class MockTestError(Exception):
    """Base error for the mocktest framework."""


class CompileError(MockTestError, ValueError):
    """Raised when a node tree cannot be turned into test paths."""


class EmptyNodeError(CompileError):
    """Raised when a path or a fork is declared without children."""


class UnresolvedPathError(CompileError):
    """Raised when the node stream ends while paths are still open."""

    def __init__(self, index: int, open_paths: Sequence[str] = ()) -> None:
        self.index = index
        self.open_paths = tuple(open_paths)
        msg = f"unresolved path at index {index}"
        if self.open_paths:
            msg += ": " + ", ".join(repr(text) for text in self.open_paths)
        super().__init__(msg)


class ConfigurationError(MockTestError, RuntimeError):
    """Raised when a suite or context is missing something it needs."""


class RecorderOverflowError(MockTestError, RuntimeError):
    """Raised when more events are recorded than the recorder can hold."""


class DocumentError(MockTestError, ValueError):
    """Raised when a declarative tree document cannot be resolved."""


class PathFailureError(MockTestError, AssertionError):
    """Raised by the sequential driver when one or more paths failed."""

    def __init__(self, results: Sequence[PathResult]) -> None:
        self.results = tuple(results)
        failed = [result for result in self.results if result.failed]
        lines = [f"{len(failed)} of {len(self.results)} test paths failed"]
        for result in failed:
            lines.append(f"  {result.description}: {result.error!r}")
        super().__init__("\n".join(lines))

    @property
    def failures(self) -> tuple[PathResult, ...]:
        return tuple(result for result in self.results if result.failed)
