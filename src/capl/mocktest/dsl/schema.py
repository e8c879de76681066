from __future__ import annotations

from typing import Any

import jsonschema

TREE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["tree"],
    "properties": {
        "name": {"type": "string"},
        "description": {"type": "string"},
        "meta": {
            "type": "object",
            "properties": {
                "recorder_buffer_size": {"type": "integer", "minimum": 1},
                "logger_name": {"type": "string", "minLength": 1},
                "log_level": {"type": ["string", "integer"]},
                "log_format": {"type": "string"},
                "max_workers": {"type": "integer", "minimum": 1},
                "raise_on_failure": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
        "tree": {"$ref": "#/$defs/nodes"},
    },
    "additionalProperties": False,
    "$defs": {
        "nodes": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/$defs/node"},
        },
        "step": {
            "type": "object",
            "required": ["label", "action"],
            "properties": {
                "label": {"type": "string"},
                "action": {"type": "string", "minLength": 1},
            },
            "additionalProperties": False,
        },
        "node": {
            "oneOf": [
                {
                    "type": "object",
                    "required": ["type", "label", "action"],
                    "properties": {
                        "type": {"enum": ["call", "result"]},
                        "label": {"type": "string"},
                        "action": {"type": "string", "minLength": 1},
                    },
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["type", "label", "action"],
                    "properties": {
                        "type": {"const": "once"},
                        "id": {"type": "string", "minLength": 1},
                        "label": {"type": "string"},
                        "action": {"type": "string", "minLength": 1},
                    },
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["type", "call", "result"],
                    "properties": {
                        "type": {"const": "case"},
                        "call": {"$ref": "#/$defs/step"},
                        "result": {"$ref": "#/$defs/step"},
                    },
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["type", "nodes"],
                    "properties": {
                        "type": {"const": "path"},
                        "nodes": {"$ref": "#/$defs/nodes"},
                    },
                    "additionalProperties": False,
                },
                {
                    "type": "object",
                    "required": ["type", "branches"],
                    "properties": {
                        "type": {"const": "one_of"},
                        "branches": {
                            "type": "array",
                            "minItems": 1,
                            "items": {"$ref": "#/$defs/nodes"},
                        },
                    },
                    "additionalProperties": False,
                },
            ]
        },
    },
}


def validate_tree(payload: dict[str, Any]) -> None:
    jsonschema.validate(instance=payload, schema=TREE_SCHEMA)
