from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from .dsl.model import Action, Call, Once, Result

SEPARATOR = " > "


class SharedOnce:
    """Runtime state of a ``Once`` node, shared by every path compiled from it.

    One instance exists per authored ``Once`` per compile. ``ran`` governs
    execution and ``described`` governs display; they are independent.
    """

    __slots__ = ("node", "ran", "described", "_lock")

    def __init__(self, node: Once) -> None:
        self.node = node
        self.ran = False
        self.described = False
        self._lock = threading.Lock()

    @property
    def label(self) -> str:
        return self.node.label

    @property
    def action(self) -> Action:
        return self.node.action

    def invoke(self, evaluate: Callable[[str, Action], None]) -> bool:
        """Evaluate the action unless it already ran. Returns True if it ran now."""

        with self._lock:
            if self.ran:
                return False
            evaluate(self.label, self.action)
            self.ran = True
            return True

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"SharedOnce(label={self.label!r}, ran={self.ran}, described={self.described})"


@dataclass(slots=True, frozen=True)
class CompiledPath:
    """One linear trace through a node tree, closed by exactly one result."""

    onces: tuple[SharedOnce, ...]
    calls: tuple[Call, ...]
    result: Result

    def describe(self) -> str:
        text: list[str] = []
        for once in self.onces:
            if not once.described:
                text.append(once.label)
                once.described = True
        text.extend(call.label for call in self.calls)
        text.append(self.result.label)
        return SEPARATOR.join(text)


def describe_all(paths: Iterable[CompiledPath]) -> list[str]:
    return [pth.describe() for pth in paths]
