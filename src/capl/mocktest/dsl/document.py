from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from ..config import SuiteConfig
from ..errors import DocumentError
from .model import Action, Call, Case, Node, Once, OneOf, Result, Sequence
from .schema import validate_tree


@dataclass(slots=True)
class TreeDocument:
    nodes: tuple[Node, ...]
    config: SuiteConfig
    name: str | None = None
    description: str | None = None


def load_tree(source: Path | dict[str, Any], actions: Mapping[str, Action]) -> TreeDocument:
    """Build a node tree from a JSON document, resolving actions by name.

    ``once`` entries that share an ``id`` resolve to the same ``Once``
    object, so they behave as one shared step after compiling.
    """

    if isinstance(source, Path):
        data = json.loads(source.read_text(encoding="utf-8"))
    else:
        data = source
    validate_tree(data)

    builder = _TreeBuilder(actions)
    nodes = tuple(builder.node(raw) for raw in data["tree"])
    return TreeDocument(
        nodes=nodes,
        config=SuiteConfig.from_mapping(data.get("meta")),
        name=data.get("name"),
        description=data.get("description"),
    )


class _TreeBuilder:
    def __init__(self, actions: Mapping[str, Action]) -> None:
        self._actions = actions
        self._onces: dict[str, Once] = {}

    def node(self, payload: dict[str, Any]) -> Node:
        kind = payload["type"]
        if kind == "call":
            return Call(payload["label"], self._action(payload["action"]))
        if kind == "result":
            return Result(payload["label"], self._action(payload["action"]))
        if kind == "once":
            return self._once(payload)
        if kind == "case":
            call, result = payload["call"], payload["result"]
            return Case(
                call=Call(call["label"], self._action(call["action"])),
                result=Result(result["label"], self._action(result["action"])),
            )
        if kind == "path":
            return Sequence(*(self.node(raw) for raw in payload["nodes"]))
        if kind == "one_of":
            return OneOf(
                *(Sequence(*(self.node(raw) for raw in branch)) for branch in payload["branches"])
            )
        msg = f"Unsupported node kind: {kind}"
        raise DocumentError(msg)

    def _once(self, payload: dict[str, Any]) -> Once:
        identifier = payload.get("id")
        if identifier is not None and identifier in self._onces:
            return self._onces[identifier]
        once = Once(payload["label"], self._action(payload["action"]))
        if identifier is not None:
            self._onces[identifier] = once
        return once

    def _action(self, name: str) -> Action:
        try:
            return self._actions[name]
        except KeyError:
            msg = f"Unknown action {name!r} in tree document"
            raise DocumentError(msg) from None
