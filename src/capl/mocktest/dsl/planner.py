from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence as Seq

from ..errors import UnresolvedPathError
from ..paths import SEPARATOR, CompiledPath, SharedOnce
from .model import Call, Case, Node, Once, OneOf, Result, Sequence

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class _Draft:
    """An open path. Immutable so forked branches never share state."""

    onces: tuple[SharedOnce, ...] = ()
    calls: tuple[Call, ...] = ()

    def with_call(self, call: Call) -> _Draft:
        return _Draft(onces=self.onces, calls=(*self.calls, call))

    def with_once(self, once: SharedOnce) -> _Draft:
        return _Draft(onces=(*self.onces, once), calls=self.calls)

    def close(self, result: Result) -> CompiledPath:
        return CompiledPath(onces=self.onces, calls=self.calls, result=result)

    def text(self) -> str:
        labels = [once.label for once in self.onces]
        labels.extend(call.label for call in self.calls)
        return SEPARATOR.join(labels)


class PathCompiler:
    """Flatten a node tree into every linear path it declares.

    Paths are committed in depth-first, left-to-right order, which is the
    order an author reads the tree top to bottom. Each compile allocates its
    own ``SharedOnce`` objects, so compiling a tree again starts with fresh
    ``ran``/``described`` state.
    """

    def __init__(self) -> None:
        self._shared: dict[Once, SharedOnce] = {}

    def compile(self, nodes: Seq[Node]) -> list[CompiledPath]:
        if not nodes:
            return []

        self._shared = {}
        staged: list[_Draft] = []
        committed: list[CompiledPath] = []
        for node in nodes:
            staged = self._apply(node, staged, committed)

        if staged:
            raise UnresolvedPathError(len(nodes) - 1, [draft.text() for draft in staged])

        logger.debug(
            "Compiled %d node(s) into %d path(s) with %d shared once step(s)",
            len(nodes),
            len(committed),
            len(self._shared),
        )
        return committed

    def _apply(
        self,
        node: Node,
        staged: list[_Draft],
        committed: list[CompiledPath],
    ) -> list[_Draft]:
        # If there are no open paths, start a new one.
        if not staged:
            staged = [_Draft()]

        if isinstance(node, Call):
            return [draft.with_call(node) for draft in staged]
        if isinstance(node, Once):
            shared = self._share(node)
            return [draft.with_once(shared) for draft in staged]
        if isinstance(node, Result):
            committed.extend(draft.close(node) for draft in staged)
            return []
        if isinstance(node, Case):
            committed.extend(draft.with_call(node.call).close(node.result) for draft in staged)
            return []
        if isinstance(node, Sequence):
            for child in node.nodes:
                staged = self._apply(child, staged, committed)
            return staged
        if isinstance(node, OneOf):
            forked: list[_Draft] = []
            for draft in staged:
                for branch in node.branches:
                    forked.extend(self._apply(branch, [draft], committed))
            return forked
        msg = f"Unsupported node type: {type(node)!r}"
        raise TypeError(msg)

    def _share(self, node: Once) -> SharedOnce:
        shared = self._shared.get(node)
        if shared is None:
            shared = self._shared[node] = SharedOnce(node)
        return shared


def compile_paths(*nodes: Node) -> list[CompiledPath]:
    return PathCompiler().compile(nodes)
