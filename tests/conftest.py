from __future__ import annotations

from typing import Callable

import pytest

from capl.mocktest import CompiledPath, MockContext


class Journal:
    """Collects the labels of actions in the order they ran."""

    def __init__(self) -> None:
        self.entries: list[str] = []

    def action(self, label: str) -> Callable[[MockContext], None]:
        def record(_: MockContext) -> None:
            self.entries.append(label)

        return record


@pytest.fixture()
def journal() -> Journal:
    return Journal()


def shape(paths: list[CompiledPath]) -> list[tuple[tuple[str, ...], tuple[str, ...], str]]:
    return [
        (
            tuple(once.label for once in pth.onces),
            tuple(call.label for call in pth.calls),
            pth.result.label,
        )
        for pth in paths
    ]


def noop(_: MockContext) -> None:
    return None
