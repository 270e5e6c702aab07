# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Exception hierarchy for jtlanalyzer.

Malformed individual samples are never raised; they are counted by the
reader and reported in the result model.
"""

from typing import Optional


class AnalyzerError(Exception):
    """Base class for all errors raised by jtlanalyzer."""

    pass


class ConfigurationError(AnalyzerError):
    """Raised before any processing starts when the configuration is unusable."""

    pass


class StreamCorruptionError(AnalyzerError):
    """Raised when a result stream cannot be decoded any further."""

    def __init__(self, source: Optional[str], reason: str) -> None:
        self.source = source or "<stream>"
        self.reason = reason
        super().__init__(f"Cannot read {self.source}: {reason}")


class WriterError(AnalyzerError):
    """Raised by a writer that failed to produce its artifact."""

    pass
