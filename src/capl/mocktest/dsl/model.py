from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Union

from ..errors import EmptyNodeError

if TYPE_CHECKING:
    from ..context import MockContext

Action = Callable[["MockContext"], None]


@dataclass(slots=True, frozen=True)
class Call:
    """A setup step invoked on every path that passes through it."""

    label: str
    action: Action


@dataclass(slots=True, frozen=True)
class Result:
    """A terminal step asserting the effects of the calls before it."""

    label: str
    action: Action


@dataclass(slots=True, frozen=True, eq=False)
class Once:
    """A setup step that runs one time across every path derived from it.

    Hashed by identity: reusing the same object in several places of a tree
    still yields a single shared step once compiled.
    """

    label: str
    action: Action


@dataclass(slots=True, frozen=True)
class Case:
    """A call immediately closed by a result."""

    call: Call
    result: Result


@dataclass(slots=True, frozen=True, init=False)
class Sequence:
    """Nodes applied in order to every open path."""

    nodes: tuple[Node, ...]

    def __init__(self, *nodes: Node) -> None:
        if not nodes:
            msg = "path requires at least one node"
            raise EmptyNodeError(msg)
        object.__setattr__(self, "nodes", tuple(nodes))


@dataclass(slots=True, frozen=True, init=False)
class OneOf:
    """Mutually exclusive branches; each open path forks once per branch."""

    branches: tuple[Sequence, ...]

    def __init__(self, *branches: Node) -> None:
        if not branches:
            msg = "one_of requires at least one branch"
            raise EmptyNodeError(msg)
        object.__setattr__(
            self,
            "branches",
            tuple(b if isinstance(b, Sequence) else Sequence(b) for b in branches),
        )


Node = Union[Call, Result, Once, Case, Sequence, OneOf]


def path(*nodes: Node) -> Sequence:
    return Sequence(*nodes)


def one_of(*branches: Node) -> OneOf:
    return OneOf(*branches)


def case(call: Call, result: Result) -> Case:
    return Case(call=call, result=result)
