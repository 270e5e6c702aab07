# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Timestamp placeholders for downstream URL templates.

URLs may contain the placeholders ``_FROM_`` and ``_TO_``; they are replaced
by the result's min/max timestamps formatted as URL-encoded basic ISO-8601,
e.g. ``20120116T163600%2B0100``.
"""

from datetime import datetime, timezone, tzinfo
from typing import Mapping, Optional
from urllib.parse import quote

from jtlanalyzer.analysis.result import ResultModel

FROM_PLACEHOLDER = "_FROM_"
TO_PLACEHOLDER = "_TO_"


def format_timestamp(epoch_millis: int, tz: Optional[tzinfo] = None) -> str:
    """
    Format epoch milliseconds as URL-encoded basic ISO-8601.

    Args:
        epoch_millis: Timestamp in epoch milliseconds
        tz: Time zone for the formatted value (default: local time zone)

    Example:
        >>> from datetime import timedelta
        >>> format_timestamp(1326728160000, timezone(timedelta(hours=1)))
        '20120116T163600%2B0100'
    """
    moment = datetime.fromtimestamp(epoch_millis / 1000.0, tz=timezone.utc)
    moment = moment.astimezone(tz) if tz is not None else moment.astimezone()
    return quote(moment.strftime("%Y%m%dT%H%M%S%z"), safe="")


def substitute_placeholders(
    template: str, result: ResultModel, tz: Optional[tzinfo] = None
) -> str:
    """
    Replace ``_FROM_``/``_TO_`` with the result's timestamp bounds.

    A result without samples has no bounds; the template is then returned
    unchanged.
    """
    if result.min_timestamp is None or result.max_timestamp is None:
        return template
    return template.replace(
        FROM_PLACEHOLDER, format_timestamp(result.min_timestamp, tz)
    ).replace(TO_PLACEHOLDER, format_timestamp(result.max_timestamp, tz))


def resolve_remote_resources(
    result: ResultModel,
    resources: Optional[Mapping[str, str]],
    tz: Optional[tzinfo] = None,
) -> dict[str, str]:
    """
    Resolve a ``{url_template: filename}`` mapping into ``{filename: url}``.

    Downloading the resources is left to the caller.
    """
    if not resources:
        return {}
    return {
        filename: substitute_placeholders(url, result, tz)
        for url, filename in resources.items()
    }
