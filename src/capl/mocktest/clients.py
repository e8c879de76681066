from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator
from unittest.mock import MagicMock

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class MockClient:
    """Describes a collaborator that every test path gets a fresh mock of."""

    name: str
    spec: type | None = None
    factory: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            msg = f"Mock client name must be an identifier: {self.name!r}"
            raise ValueError(msg)
        if self.spec is not None and self.factory is not None:
            msg = f"Mock client {self.name!r} takes either a spec or a factory, not both"
            raise ValueError(msg)

    def build(self) -> Any:
        if self.factory is not None:
            return self.factory()
        if self.spec is not None:
            return MagicMock(spec=self.spec, name=self.name)
        return MagicMock(name=self.name)


class MockController:
    """Owns the mocks of one test path and checks their expectations at the end."""

    def __init__(self) -> None:
        self._mocks: dict[str, Any] = {}
        self._checks: list[Callable[[], None]] = []
        self._finished = False

    @property
    def mocks(self) -> dict[str, Any]:
        return dict(self._mocks)

    def build(self, client: MockClient) -> Any:
        if self._finished:
            msg = "Mock controller already finished"
            raise ConfigurationError(msg)
        instance = client.build()
        self._mocks[client.name] = instance
        return instance

    def verify(self, check: Callable[[], None]) -> Callable[[], None]:
        """Register a check to run when the path finishes. Usable as a decorator."""

        self._checks.append(check)
        return check

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True

        failures: list[str] = []
        for check in self._checks:
            try:
                check()
            except AssertionError as exc:
                failures.append(str(exc) or repr(exc))
        if failures:
            logger.debug("Mock controller found %d unmet expectation(s)", len(failures))
            raise AssertionError("unmet mock expectations:\n" + "\n".join(failures))


class MockClients:
    """Name-keyed mocks built for a single test path."""

    __slots__ = ("_clients",)

    def __init__(self) -> None:
        self._clients: dict[str, Any] = {}

    def build(self, client: MockClient, controller: MockController) -> Any:
        instance = controller.build(client)
        self._clients[client.name] = instance
        return instance

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except ConfigurationError as exc:
            raise AttributeError(str(exc)) from None

    def __getitem__(self, name: str) -> Any:
        try:
            return self._clients[name]
        except KeyError:
            known = ", ".join(sorted(self._clients)) or "none"
            msg = f"No mock client named {name!r} (configured: {known})"
            raise ConfigurationError(msg) from None

    def __contains__(self, name: object) -> bool:
        return name in self._clients

    def __iter__(self) -> Iterator[str]:
        return iter(self._clients)

    def __len__(self) -> int:
        return len(self._clients)
