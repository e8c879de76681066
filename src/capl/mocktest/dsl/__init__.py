from __future__ import annotations

from .document import TreeDocument, load_tree
from .model import Action, Call, Case, Node, Once, OneOf, Result, Sequence, case, one_of, path
from .planner import PathCompiler, compile_paths
from .schema import TREE_SCHEMA, validate_tree

__all__ = [
    "Action",
    "Call",
    "Case",
    "Node",
    "Once",
    "OneOf",
    "PathCompiler",
    "Result",
    "Sequence",
    "TREE_SCHEMA",
    "TreeDocument",
    "case",
    "compile_paths",
    "load_tree",
    "one_of",
    "path",
    "validate_tree",
]
