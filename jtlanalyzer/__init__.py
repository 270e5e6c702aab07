# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
jtlanalyzer: streaming aggregation of JMeter result files.

Example:
    >>> from jtlanalyzer import analyze, AnalyzerConfig, GroupRule
    >>> config = AnalyzerConfig(request_groups=(GroupRule("api", "/api/**"),))
    >>> with open("results.jtl") as f:
    ...     result = analyze(f, config)
"""

from jtlanalyzer.analysis import (
    analyze,
    analyze_file,
    AnalyzerConfig,
    GroupRule,
    ResultModel,
)
from jtlanalyzer.exceptions import (
    AnalyzerError,
    ConfigurationError,
    StreamCorruptionError,
    WriterError,
)

__all__ = [
    "analyze",
    "analyze_file",
    "AnalyzerConfig",
    "AnalyzerError",
    "ConfigurationError",
    "GroupRule",
    "ResultModel",
    "StreamCorruptionError",
    "WriterError",
]
