# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
CLI implementation for the analyze subcommand.

Provides command-line interface for analyzing JMeter XML result files.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from jtlanalyzer.analysis.config import build_request_groups
from jtlanalyzer.config import load_config, ReportConfig
from jtlanalyzer.exceptions import ConfigurationError
from jtlanalyzer.report import run_report, select_inputs
from jtlanalyzer.writers import create_writers, WRITERS

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s"


def _configure_logging(verbose: bool) -> None:
    """Send log records to stderr; DEBUG with --verbose, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _parse_group_option(expr: str) -> tuple[str, str]:
    """
    Parse a 'NAME=PATTERN' request group option.

    Raises:
        ValueError: If the expression is invalid
    """
    if "=" not in expr:
        raise ValueError(
            f"Invalid request group: '{expr}'. Expected format: 'NAME=PATTERN'"
        )
    name, pattern = expr.split("=", 1)
    name = name.strip()
    pattern = pattern.strip()
    if not name:
        raise ValueError("Request group name cannot be empty")
    if not pattern:
        raise ValueError(f"Request group '{name}' has an empty pattern")
    return name, pattern


@click.command(name="analyze")
@click.argument("source", required=False)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON configuration file; command-line options override its values.",
)
@click.option(
    "--target-dir",
    "-o",
    "target_directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the generated files (default: target/jmeter-analysis).",
)
@click.option(
    "--max-samples",
    type=int,
    default=None,
    help="Samples kept per group before switching to sampling (default: 50000).",
)
@click.option(
    "--group",
    "-g",
    "groups",
    multiple=True,
    help="Request group as 'NAME=PATTERN' (ant-style); first match wins. Repeatable.",
)
@click.option(
    "--sample-name",
    "sample_names",
    multiple=True,
    help="Element name treated as a sample (default: httpSample, sample). Repeatable.",
)
@click.option(
    "--percentile",
    "-p",
    "percentiles",
    type=click.FloatRange(0, 100),
    multiple=True,
    help="Percentile to report (default: 50, 90, 95, 99). Repeatable.",
)
@click.option(
    "--process-all/--first-only",
    "process_all_files",
    default=None,
    help="Analyze every file matching SOURCE, or only the first (default).",
)
@click.option(
    "--preserve-directories/--flat",
    "preserve_directories",
    default=None,
    help="Keep the input directory structure below the target directory.",
)
@click.option(
    "--writer",
    "-w",
    "writers",
    type=click.Choice(list(WRITERS)),
    multiple=True,
    help="Writer to run (default: all). Repeatable.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Verbose logging.",
)
def analyze_command(
    source: Optional[str],
    config_file: Optional[Path],
    target_directory: Optional[Path],
    max_samples: Optional[int],
    groups: tuple[str, ...],
    sample_names: tuple[str, ...],
    percentiles: tuple[float, ...],
    process_all_files: Optional[bool],
    preserve_directories: Optional[bool],
    writers: tuple[str, ...],
    verbose: bool,
) -> None:
    """
    Analyze JMeter XML result files matching SOURCE.

    SOURCE is a glob pattern ('**' matches nested directories). Files may
    be plain, gzip- or Zstd-compressed. Each file is analyzed on its own;
    a broken file is reported and the others are still processed.

    \b
    Examples:
      jtl-analyze analyze results.jtl
      jtl-analyze analyze "target/jmeter/results/*.jtl.gz" --process-all
      jtl-analyze analyze results.jtl -g "api=/api/**" -g "static=/**/*.css"
      jtl-analyze analyze results.jtl -w summary-stdout -p 50 -p 99.9
      jtl-analyze analyze --config analysis.json
    """
    _configure_logging(verbose)

    try:
        report_config = load_config(config_file) if config_file else ReportConfig()
        request_groups = None
        if groups:
            request_groups = build_request_groups(_parse_group_option(g) for g in groups)
        report_config = report_config.with_overrides(
            source=source,
            target_directory=target_directory,
            max_samples=max_samples,
            request_groups=request_groups,
            sample_names=frozenset(sample_names) if sample_names else None,
            percentiles=percentiles or None,
            process_all_files=process_all_files,
            preserve_directories=preserve_directories,
            writers=writers or None,
        )
        writer_instances = create_writers(report_config.writers)
        files = select_inputs(report_config)
    except (ConfigurationError, FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))

    outcomes = run_report(report_config, writer_instances, files)

    failed = 0
    for outcome in outcomes:
        if outcome.error is not None:
            click.echo(f"❌ {outcome.source}: {outcome.error}", err=True)
            failed += 1
            continue
        for writer_outcome in outcome.writer_outcomes:
            if not writer_outcome.success:
                click.echo(
                    f"❌ {outcome.source}: writer {writer_outcome.writer} "
                    f"failed: {writer_outcome.error}",
                    err=True,
                )
        if not outcome.success:
            failed += 1
            continue
        result = outcome.result
        click.echo(
            f"✅ {outcome.source}: {result.sample_count} samples, "
            f"{len(result.groups)} group(s), {result.malformed_count} malformed",
            err=True,
        )

    sys.exit(1 if failed else 0)
