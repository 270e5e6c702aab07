# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Built-in writers.

- summary-stdout: text summary echoed to stdout
- summary-text: text summary written to ``<base>-summary.txt``
- summary-json: JSON summary written to ``<base>-summary.json``
- details-csv: ``<base>-summary.csv`` plus one ``<base>-group-<group>.csv`` per group
"""

from pathlib import Path

import click
from jtlanalyzer.analysis.result import ResultModel
from jtlanalyzer.exceptions import ConfigurationError, WriterError
from jtlanalyzer.writers.base import OutputContext, safe_filename, Writer
from jtlanalyzer.writers.formatters import (
    format_group_csv,
    format_summary_csv,
    format_summary_json,
    format_summary_text,
)
from jtlanalyzer.writers.placeholders import resolve_remote_resources


def _write_text(path: Path, content: str) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n", encoding="utf-8")
    return str(path)


class SummaryTextToStdOutWriter(Writer):
    """Echo the text summary to stdout."""

    name = "summary-stdout"

    def render(self, result: ResultModel, context: OutputContext) -> str:
        click.echo(format_summary_text(result))
        return "<stdout>"


class SummaryTextToFileWriter(Writer):
    """Write the text summary to ``<base>-summary.txt``."""

    name = "summary-text"

    def render(self, result: ResultModel, context: OutputContext) -> str:
        return _write_text(context.output_path("-summary.txt"), format_summary_text(result))


class SummaryJsonFileWriter(Writer):
    """Write the machine-readable summary to ``<base>-summary.json``."""

    name = "summary-json"

    def render(self, result: ResultModel, context: OutputContext) -> str:
        resources = resolve_remote_resources(result, context.remote_resources)
        return _write_text(
            context.output_path("-summary.json"), format_summary_json(result, resources)
        )


class DetailsToCsvWriter(Writer):
    """Write a summary CSV and one details CSV per request group."""

    name = "details-csv"

    def render(self, result: ResultModel, context: OutputContext) -> str:
        file_names: dict[str, str] = {}
        for group in result.groups:
            file_name = safe_filename(group.name)
            if file_name in file_names:
                raise WriterError(
                    f"Groups '{file_names[file_name]}' and '{group.name}' "
                    f"map to the same file name '{file_name}'"
                )
            file_names[file_name] = group.name

        summary_path = context.output_path("-summary.csv")
        _write_text(summary_path, format_summary_csv(result))
        for file_name, group in zip(file_names, result.groups):
            group_path = context.output_path(f"-group-{file_name}.csv")
            _write_text(group_path, format_group_csv(group))
        return str(summary_path)


WRITERS: dict[str, type[Writer]] = {
    cls.name: cls
    for cls in (
        SummaryTextToStdOutWriter,
        SummaryTextToFileWriter,
        SummaryJsonFileWriter,
        DetailsToCsvWriter,
    )
}

DEFAULT_WRITER_NAMES = tuple(WRITERS)


def create_writers(names) -> list[Writer]:
    """
    Instantiate writers by name, keeping the given order.

    Raises:
        ConfigurationError: If a name is unknown
    """
    writers = []
    for name in names:
        if name not in WRITERS:
            valid = ", ".join(WRITERS)
            raise ConfigurationError(f"Unknown writer: {name}. Valid writers: {valid}")
        writers.append(WRITERS[name]())
    return writers
