from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping

from .recording import DEFAULT_RECORDER_BUFFER_SIZE


@dataclass(slots=True)
class SuiteConfig:
    recorder_buffer_size: int = DEFAULT_RECORDER_BUFFER_SIZE
    logger_name: str = "capl.mocktest"
    log_level: int | str = "DEBUG"
    log_format: str = "%(levelname)s %(name)s %(message)s"
    max_workers: int = 1
    raise_on_failure: bool = True

    def __post_init__(self) -> None:
        if self.recorder_buffer_size <= 0:
            msg = "recorder_buffer_size must be positive"
            raise ValueError(msg)
        if self.max_workers <= 0:
            msg = "max_workers must be positive"
            raise ValueError(msg)
        if isinstance(self.log_level, str):
            self.log_level = self.log_level.upper()
            if not isinstance(logging.getLevelName(self.log_level), int):
                msg = f"Unknown log level: {self.log_level}"
                raise ValueError(msg)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> SuiteConfig:
        if not data:
            return cls()
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown suite config option(s): {', '.join(unknown)}"
            raise ValueError(msg)
        return cls(**dict(data))
