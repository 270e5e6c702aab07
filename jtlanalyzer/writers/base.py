# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Writer interface and fan-out.

A writer consumes a finished ResultModel and produces one artifact. Writers
are independent: run_writers() gives every writer its chance even when an
earlier one failed, and reports one outcome per writer.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional

from jtlanalyzer.analysis.result import ResultModel

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: str) -> str:
    """
    Turn a group name into a file name component.

    Example:
        >>> safe_filename("Checkout / Pay")
        'Checkout_Pay'
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", name).strip("_")
    return cleaned or "unnamed"


@dataclass(frozen=True)
class OutputContext:
    """
    Where and under which name writers store their artifacts.

    Attributes:
        target_directory: Directory receiving all files
        base_name: Input file name without its last extension
        relative_path: Sub-directory (relative to target_directory) used when
            the input's directory structure is preserved
        remote_resources: ``{url_template: filename}`` mapping whose
            time range placeholders are resolved against the result
    """

    target_directory: Path
    base_name: str = "results"
    relative_path: Optional[Path] = None
    remote_resources: Mapping[str, str] = field(default_factory=dict)

    @property
    def output_directory(self) -> Path:
        if self.relative_path is None:
            return self.target_directory
        return self.target_directory / self.relative_path

    def output_path(self, suffix: str) -> Path:
        """Path of an artifact, e.g. ``output_path("-summary.txt")``."""
        return self.output_directory / f"{self.base_name}{suffix}"


class Writer(ABC):
    """Renders a ResultModel into one artifact."""

    # Name used to select the writer from the command line or config file
    name: str = ""

    @abstractmethod
    def render(self, result: ResultModel, context: OutputContext) -> str:
        """
        Produce the artifact.

        Returns:
            Description of the artifact (usually the written path)

        Raises:
            Exception: Any failure; run_writers() isolates it
        """
        pass

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@dataclass(frozen=True)
class WriterOutcome:
    """Result of running one writer."""

    writer: str
    success: bool
    artifact: Optional[str] = None
    error: Optional[str] = None


def run_writers(
    result: ResultModel, writers: Iterable[Writer], context: OutputContext
) -> list[WriterOutcome]:
    """
    Hand the result to every writer.

    A failing writer is logged and recorded; the remaining writers still
    run.

    Returns:
        One WriterOutcome per writer, in the given order
    """
    outcomes = []
    for writer in writers:
        label = writer.name or type(writer).__name__
        try:
            artifact = writer.render(result, context)
        except Exception as e:
            logger.error("Writer %s failed: %s", label, e)
            outcomes.append(WriterOutcome(label, success=False, error=str(e)))
            continue
        logger.debug("Writer %s produced %s", label, artifact)
        outcomes.append(WriterOutcome(label, success=True, artifact=artifact))
    return outcomes
