# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Report driver: locate result files, analyze each one, run the writers.

Each input is analyzed independently. A corrupt or unreadable input is
reported and skipped; the remaining inputs are still processed.
"""

import glob
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from jtlanalyzer.analysis.engine import analyze_file
from jtlanalyzer.analysis.result import ResultModel
from jtlanalyzer.config.loader import ReportConfig
from jtlanalyzer.exceptions import AnalyzerError, ConfigurationError
from jtlanalyzer.writers import (
    create_writers,
    OutputContext,
    run_writers,
    Writer,
    WriterOutcome,
)

logger = logging.getLogger(__name__)

_WILDCARDS = ("*", "?", "[")


@dataclass
class InputOutcome:
    """Result of analyzing one input file."""

    source: Path
    result: Optional[ResultModel] = None
    error: Optional[str] = None
    writer_outcomes: list[WriterOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the input was analyzed and every writer succeeded."""
        return self.error is None and all(o.success for o in self.writer_outcomes)


def pattern_root_dir(pattern: str) -> Path:
    """
    Directory part of a glob pattern before its first wildcard.

    Examples:
        >>> pattern_root_dir("/data/results/**/*.jtl")
        PosixPath('/data/results')
        >>> pattern_root_dir("/data/results/run1.jtl")
        PosixPath('/data/results')
    """
    positions = [pattern.find(w) for w in _WILDCARDS if w in pattern]
    static = pattern[: min(positions)] if positions else pattern
    if "/" not in static:
        return Path(".")
    return Path(static[: static.rfind("/")] or "/")


def find_result_files(pattern: str) -> list[Path]:
    """
    Files matching a glob pattern (``**`` matches nested directories), sorted.
    """
    matches = glob.glob(pattern, recursive=True)
    return sorted(Path(m) for m in matches if Path(m).is_file())


def base_name(file_path: Path) -> str:
    """
    Output base name: the file name without its last extension.

    Example:
        >>> base_name(Path("results.jtl.gz"))
        'results.jtl'
    """
    name = file_path.name
    return name[: name.rfind(".")] if "." in name else name


def output_context(
    file_path: Path, config: ReportConfig, root_dir: Optional[Path] = None
) -> OutputContext:
    """Build the writers' OutputContext for one input file."""
    relative_path = None
    if config.preserve_directories and root_dir is not None:
        try:
            relative_path = file_path.parent.resolve().relative_to(root_dir.resolve())
        except ValueError:
            relative_path = None
    return OutputContext(
        target_directory=Path(config.target_directory),
        base_name=base_name(file_path),
        relative_path=relative_path,
        remote_resources=dict(config.remote_resources),
    )


def select_inputs(config: ReportConfig) -> list[Path]:
    """
    Files to analyze for a configuration.

    Raises:
        ConfigurationError: If no source pattern is set or nothing matches it
    """
    if not config.source:
        raise ConfigurationError("No source pattern configured")

    files = find_result_files(config.source)
    if not files:
        raise ConfigurationError(
            f"No JMeter result file found matching {config.source}"
        )
    if not config.process_all_files:
        files = files[:1]
    return files


def run_report(
    config: ReportConfig,
    writers: Optional[Sequence[Writer]] = None,
    files: Optional[Sequence[Path]] = None,
) -> list[InputOutcome]:
    """
    Analyze the configured inputs and run the writers for each of them.

    Args:
        config: Report configuration
        writers: Writers to run (default: created from ``config.writers``)
        files: Inputs to analyze (default: select_inputs(config))

    Returns:
        One InputOutcome per input, in processing order

    Raises:
        ConfigurationError: Before any input is read, if the configuration
            is unusable
    """
    if writers is None:
        writers = create_writers(config.writers)
    if files is None:
        files = select_inputs(config)
    root_dir = pattern_root_dir(config.source) if config.source else None

    outcomes = []
    for file_path in files:
        logger.info("Analysing '%s'...", file_path.name)
        outcome = InputOutcome(source=file_path)
        try:
            outcome.result = analyze_file(file_path, config.analyzer)
        except (AnalyzerError, OSError) as e:
            logger.error("Analysis of '%s' failed: %s", file_path, e)
            outcome.error = str(e)
            outcomes.append(outcome)
            continue

        context = output_context(file_path, config, root_dir)
        outcome.writer_outcomes = run_writers(outcome.result, writers, context)
        logger.info("Results generated for '%s'.", file_path.name)
        outcomes.append(outcome)
    return outcomes
