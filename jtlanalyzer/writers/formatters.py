# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Result model formatting utilities for different output formats.

Provides functions to format a ResultModel as a text table, JSON or CSV.
All functions are pure (no side effects) and return strings.
"""

import csv
import io
import json
from typing import Any, Optional

from jtlanalyzer.analysis.result import GroupResult, percentile_label, ResultModel
from tabulate import tabulate

SUMMARY_FIELDS = [
    "group",
    "count",
    "errors",
    "error_rate",
    "mean",
    "std_dev",
    "min",
    "max",
]
TRAILING_FIELDS = ["throughput", "bytes_sent", "bytes_received"]


def format_value(value) -> str:
    """
    Format a value for display.

    Handles special cases:
    - None -> empty string
    - bool -> lowercase "true"/"false"
    - float -> two decimals
    - other -> str()
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def summary_fields(result: ResultModel) -> list[str]:
    """Column names of the summary table, including percentile columns."""
    return (
        SUMMARY_FIELDS
        + [percentile_label(p) for p in result.percentile_levels]
        + TRAILING_FIELDS
    )


def group_row(group: GroupResult) -> dict[str, Any]:
    """Flatten a GroupResult into the summary table's columns."""
    row: dict[str, Any] = {
        "group": group.name,
        "count": group.count,
        "errors": group.error_count,
        "error_rate": group.error_rate * 100,
        "mean": group.mean,
        "std_dev": group.std_dev,
        "min": group.min_elapsed,
        "max": group.max_elapsed,
    }
    for p, value in group.percentiles:
        row[percentile_label(p)] = value
    row["throughput"] = group.throughput
    row["bytes_sent"] = group.bytes_sent
    row["bytes_received"] = group.bytes_received
    return row


def _rows(result: ResultModel) -> list[dict[str, Any]]:
    return [group_row(g) for g in result.groups] + [group_row(result.global_stats)]


def format_time_range(result: ResultModel) -> str:
    """Human-readable stream time range, or "(no samples)"."""
    if result.min_datetime is None or result.max_datetime is None:
        return "(no samples)"
    return (
        f"{result.min_datetime.strftime('%Y-%m-%d %H:%M:%S')} - "
        f"{result.max_datetime.strftime('%Y-%m-%d %H:%M:%S')} UTC"
    )


def format_summary_text(result: ResultModel, show_header: bool = True) -> str:
    """
    Format the result as a plain text summary with an aligned table.

    Args:
        result: Finalized result model
        show_header: Whether to print the overview lines above the table

    Returns:
        Formatted text
    """
    lines = []
    if show_header:
        lines.extend(
            [
                "─" * 50,
                f"Source:      {result.source_name or '(stream)'}",
                f"Time range:  {format_time_range(result)}",
                f"Samples:     {result.sample_count}",
                f"Malformed:   {result.malformed_count}",
                "─" * 50,
            ]
        )

    if not result.groups:
        lines.append("No samples found.")
        return "\n".join(lines)

    fields = summary_fields(result)
    table_data = [[format_value(row.get(f)) for f in fields] for row in _rows(result)]
    headers = [f.upper() for f in fields]
    lines.append(tabulate(table_data, headers=headers, tablefmt="plain"))
    return "\n".join(lines)


def format_summary_json(
    result: ResultModel, resources: Optional[dict[str, str]] = None
) -> str:
    """
    Format the result as pretty-printed JSON.

    Args:
        result: Finalized result model
        resources: Optional resolved remote resource URLs (filename -> URL)

    Returns:
        JSON formatted string
    """
    data = result.to_dict()
    if resources:
        data["resources"] = resources
    return json.dumps(data, indent=2)


def format_summary_csv(result: ResultModel, show_header: bool = True) -> str:
    """
    Format the result as CSV, one row per group followed by the total.

    Args:
        result: Finalized result model
        show_header: Whether to include the header row

    Returns:
        CSV formatted string
    """
    fields = summary_fields(result)
    output = io.StringIO(newline="")
    writer = csv.writer(output)

    if show_header:
        writer.writerow(fields)

    for row in _rows(result):
        writer.writerow([format_value(row.get(f)) for f in fields])

    return output.getvalue().rstrip("\r\n").replace("\r\n", "\n").replace("\r", "")


def format_group_csv(group: GroupResult) -> str:
    """
    Format one group's details as a two-column ``metric,value`` CSV.

    Response codes are listed as ``rc_<code>`` rows after the statistics.
    """
    output = io.StringIO(newline="")
    writer = csv.writer(output)
    writer.writerow(["metric", "value"])
    for key, value in group_row(group).items():
        writer.writerow([key, format_value(value)])
    writer.writerow(["min_timestamp", format_value(group.min_timestamp)])
    writer.writerow(["max_timestamp", format_value(group.max_timestamp)])
    writer.writerow(["compacted", format_value(group.compacted)])
    for code, count in group.response_codes:
        writer.writerow([f"rc_{code}", count])

    return output.getvalue().rstrip("\r\n").replace("\r\n", "\n").replace("\r", "")
