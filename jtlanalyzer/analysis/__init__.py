# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
jtlanalyzer analysis module.

This module provides the streaming sample aggregation engine:
- SampleReader: Decode samples from a JMeter XML result stream
- GroupClassifier: Assign samples to request groups (first match wins)
- BoundedAggregator: Per-group running statistics with bounded memory
- finalize: Freeze the aggregator state into an immutable ResultModel
- analyze: Run the whole pipeline over one stream
"""

from .aggregator import BoundedAggregator
from .classifier import classify, compile_ant_pattern, GroupClassifier
from .config import AnalyzerConfig, build_request_groups
from .engine import analyze, analyze_file
from .models import GroupRule, Sample
from .reader import DEFAULT_SAMPLE_NAMES, parse_sample, SampleReader
from .result import (
    DEFAULT_PERCENTILES,
    finalize,
    GLOBAL_GROUP_NAME,
    GroupResult,
    ResultModel,
)
from .stats import DEFAULT_MAX_SAMPLES, RunningStats

__all__ = [
    # Engine
    "analyze",
    "analyze_file",
    "AnalyzerConfig",
    "build_request_groups",
    # Decoding
    "DEFAULT_SAMPLE_NAMES",
    "parse_sample",
    "Sample",
    "SampleReader",
    # Classification
    "classify",
    "compile_ant_pattern",
    "GroupClassifier",
    "GroupRule",
    # Aggregation
    "BoundedAggregator",
    "DEFAULT_MAX_SAMPLES",
    "RunningStats",
    # Result model
    "DEFAULT_PERCENTILES",
    "finalize",
    "GLOBAL_GROUP_NAME",
    "GroupResult",
    "ResultModel",
]
