# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
jtlanalyzer configuration module.

- ReportConfig: driver settings plus the engine's AnalyzerConfig
- load_config: read and validate a JSON configuration file
"""

from .loader import (
    config_from_dict,
    DEFAULT_TARGET_DIRECTORY,
    load_config,
    ReportConfig,
    validate_config_data,
)
from .schemas import CONFIG_SCHEMA

__all__ = [
    "CONFIG_SCHEMA",
    "config_from_dict",
    "DEFAULT_TARGET_DIRECTORY",
    "load_config",
    "ReportConfig",
    "validate_config_data",
]
