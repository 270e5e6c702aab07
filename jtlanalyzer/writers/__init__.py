# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
jtlanalyzer writers module.

Writers consume a finished ResultModel and produce one artifact each
(text, JSON or CSV). run_writers() isolates their failures.
"""

from .base import OutputContext, run_writers, safe_filename, Writer, WriterOutcome
from .placeholders import (
    format_timestamp,
    resolve_remote_resources,
    substitute_placeholders,
)
from .writers import (
    create_writers,
    DEFAULT_WRITER_NAMES,
    DetailsToCsvWriter,
    SummaryJsonFileWriter,
    SummaryTextToFileWriter,
    SummaryTextToStdOutWriter,
    WRITERS,
)

__all__ = [
    # Interface
    "OutputContext",
    "run_writers",
    "safe_filename",
    "Writer",
    "WriterOutcome",
    # Built-in writers
    "create_writers",
    "DEFAULT_WRITER_NAMES",
    "DetailsToCsvWriter",
    "SummaryJsonFileWriter",
    "SummaryTextToFileWriter",
    "SummaryTextToStdOutWriter",
    "WRITERS",
    # Placeholders
    "format_timestamp",
    "resolve_remote_resources",
    "substitute_placeholders",
]
