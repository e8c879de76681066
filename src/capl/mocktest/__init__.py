"""Combinators for declaring branching mock test paths, and a runner for them."""

from .clients import MockClient, MockClients, MockController
from .config import SuiteConfig
from .context import MockContext
from .dsl import (
    Call,
    Case,
    Once,
    OneOf,
    Result,
    Sequence,
    TreeDocument,
    case,
    compile_paths,
    load_tree,
    one_of,
    path,
)
from .errors import (
    CompileError,
    ConfigurationError,
    DocumentError,
    EmptyNodeError,
    MockTestError,
    PathFailureError,
    RecorderOverflowError,
    UnresolvedPathError,
)
from .orchestrator import PathResult, Suite
from .paths import CompiledPath, SharedOnce, describe_all
from .recording import EventRecorder, LogBuffer, capture_logger
from .runner import LoggingReporter, RecordingReporter, StepReporter, run

__all__ = [
    "Call",
    "Case",
    "CompileError",
    "CompiledPath",
    "ConfigurationError",
    "DocumentError",
    "EmptyNodeError",
    "EventRecorder",
    "LogBuffer",
    "LoggingReporter",
    "MockClient",
    "MockClients",
    "MockContext",
    "MockController",
    "MockTestError",
    "Once",
    "OneOf",
    "PathFailureError",
    "PathResult",
    "RecorderOverflowError",
    "RecordingReporter",
    "Result",
    "Sequence",
    "SharedOnce",
    "StepReporter",
    "Suite",
    "SuiteConfig",
    "TreeDocument",
    "UnresolvedPathError",
    "capture_logger",
    "case",
    "compile_paths",
    "describe_all",
    "load_tree",
    "one_of",
    "path",
    "run",
]
