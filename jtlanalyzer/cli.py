# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Command line entry point of jtl-analyze.

Commands:
    analyze  Aggregate JMeter XML result files (plain, .gz or .zst) per
             request group and run the selected writers on each result.
"""

from importlib.metadata import PackageNotFoundError, version

import click
from jtlanalyzer.analysis.cli import analyze_command
from jtlanalyzer.writers import WRITERS

PACKAGE_NAME = "jtlanalyzer"
PROG_NAME = "jtl-analyze"


def _package_version() -> str:
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return "0+unknown"


EPILOG = f"""
\b
Writers: {", ".join(WRITERS)}

\b
Examples:
  jtl-analyze analyze results.jtl
  jtl-analyze analyze "results/**/*.jtl.gz" --process-all --preserve-directories
  jtl-analyze analyze --config analysis.json -w summary-stdout
"""


@click.group(epilog=EPILOG)
@click.version_option(version=_package_version(), prog_name=PROG_NAME)
def main() -> None:
    """Summarize JMeter load test results by request group.

    Response times, error rates, throughput and percentiles are computed in
    one streaming pass with bounded memory per group.
    """


main.add_command(analyze_command)
