# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
JSON Schema definition for jtlanalyzer configuration files.

A configuration file is a single JSON object; every key is optional and
command-line options take precedence over it.
"""

from typing import Any, Dict

CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "source": {
            "type": "string",
            "minLength": 1
        },
        "target_directory": {
            "type": "string",
            "minLength": 1
        },
        "max_samples": {
            "type": "integer",
            "minimum": 1
        },
        "process_all_files": {
            "type": "boolean"
        },
        "preserve_directories": {
            "type": "boolean"
        },
        "sample_names": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "minItems": 1,
            "uniqueItems": True
        },
        "request_groups": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "pattern"],
                "additionalProperties": False,
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "pattern": {"type": "string", "minLength": 1}
                }
            }
        },
        "percentiles": {
            "type": "array",
            "items": {"type": "number", "minimum": 0, "maximum": 100},
            "uniqueItems": True
        },
        "seed": {
            "type": "integer"
        },
        "writers": {
            "type": "array",
            "items": {"type": "string", "minLength": 1},
            "uniqueItems": True
        },
        "remote_resources": {
            "type": "object",
            "additionalProperties": {"type": "string", "minLength": 1}
        }
    }
}
