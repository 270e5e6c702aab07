# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Immutable result model built from the aggregator state at end of stream.

The model is made of frozen dataclasses and tuples only, so it can be
handed to any number of writers without copying or locking.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from jtlanalyzer.analysis.aggregator import BoundedAggregator
from jtlanalyzer.analysis.stats import RunningStats

DEFAULT_PERCENTILES: tuple[float, ...] = (50, 90, 95, 99)

# Name of the aggregate covering all groups
GLOBAL_GROUP_NAME = "Total"


def percentile_label(p: float) -> str:
    """
    Column label for a percentile level.

    Example:
        >>> percentile_label(95), percentile_label(99.9)
        ('p95', 'p99.9')
    """
    return f"p{p:g}"


def to_datetime(epoch_millis: Optional[int]) -> Optional[datetime]:
    """Convert epoch milliseconds to an aware UTC datetime."""
    if epoch_millis is None:
        return None
    return datetime.fromtimestamp(epoch_millis / 1000.0, tz=timezone.utc)


@dataclass(frozen=True)
class GroupResult:
    """Finished statistics of one request group (or of all groups)."""

    name: str
    count: int
    success_count: int
    error_count: int
    mean: float
    variance: float
    std_dev: float
    min_elapsed: Optional[int]
    max_elapsed: Optional[int]
    min_timestamp: Optional[int]
    max_timestamp: Optional[int]
    bytes_sent: int
    bytes_received: int
    throughput: float
    percentiles: tuple[tuple[float, Optional[int]], ...] = ()
    response_codes: tuple[tuple[str, int], ...] = ()
    retained_samples: int = 0
    compacted: bool = False

    @property
    def error_rate(self) -> float:
        return self.error_count / self.count if self.count else 0.0

    def percentile(self, p: float) -> Optional[int]:
        """
        Look up a computed percentile.

        Raises:
            KeyError: If p was not among the configured percentiles
        """
        for level, value in self.percentiles:
            if level == p:
                return value
        raise KeyError(f"Percentile {p} was not computed")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for JSON serialization."""
        return {
            "name": self.name,
            "count": self.count,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "error_rate": self.error_rate,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "min": self.min_elapsed,
            "max": self.max_elapsed,
            "percentiles": {percentile_label(p): v for p, v in self.percentiles},
            "throughput": self.throughput,
            "bytes_sent": self.bytes_sent,
            "bytes_received": self.bytes_received,
            "min_timestamp": self.min_timestamp,
            "max_timestamp": self.max_timestamp,
            "response_codes": dict(self.response_codes),
            "compacted": self.compacted,
        }


@dataclass(frozen=True)
class ResultModel:
    """
    Finalized statistics of one analyzed result stream.

    Attributes:
        groups: Per-group results, in order of first appearance
        global_stats: Aggregate over all groups
        min_timestamp: Earliest sample timestamp (epoch ms), None if no samples
        max_timestamp: Latest sample timestamp (epoch ms), None if no samples
        malformed_count: Records skipped because they could not be decoded
        ignored_count: Elements skipped because their tag is not a sample kind
        percentile_levels: Percentiles computed for every group
        source_name: Name of the analyzed input, if known
    """

    groups: tuple[GroupResult, ...]
    global_stats: GroupResult
    min_timestamp: Optional[int]
    max_timestamp: Optional[int]
    malformed_count: int = 0
    ignored_count: int = 0
    percentile_levels: tuple[float, ...] = field(default=DEFAULT_PERCENTILES)
    source_name: Optional[str] = None

    @property
    def group_names(self) -> tuple[str, ...]:
        return tuple(group.name for group in self.groups)

    @property
    def sample_count(self) -> int:
        return self.global_stats.count

    @property
    def min_datetime(self) -> Optional[datetime]:
        return to_datetime(self.min_timestamp)

    @property
    def max_datetime(self) -> Optional[datetime]:
        return to_datetime(self.max_timestamp)

    def group(self, name: str) -> GroupResult:
        """
        Get the result of one group.

        Raises:
            KeyError: If no sample was classified into the group
        """
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary suitable for JSON serialization."""
        return {
            "source": self.source_name,
            "min_timestamp": self.min_timestamp,
            "max_timestamp": self.max_timestamp,
            "min_time": _isoformat(self.min_datetime),
            "max_time": _isoformat(self.max_datetime),
            "malformed_count": self.malformed_count,
            "ignored_count": self.ignored_count,
            "percentile_levels": list(self.percentile_levels),
            "global": self.global_stats.to_dict(),
            "groups": [group.to_dict() for group in self.groups],
        }


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def summarize(
    name: str,
    stats: RunningStats,
    percentiles: Iterable[float] = DEFAULT_PERCENTILES,
    buffer_source: Optional[RunningStats] = None,
) -> GroupResult:
    """
    Freeze one RunningStats into a GroupResult.

    Args:
        name: Group name
        stats: Accumulator providing the scalar fields
        percentiles: Percentile levels to compute
        buffer_source: Accumulator providing the retained buffer for
            percentiles (defaults to ``stats``)

    Returns:
        GroupResult with all derived fields computed
    """
    buffer_source = buffer_source or stats
    computed = buffer_source.percentiles(percentiles)
    # Exact extrema come from the scalar accumulators
    computed = tuple(
        (p, stats.min_elapsed if p == 0 else stats.max_elapsed if p == 100 else v)
        for p, v in computed
    )

    return GroupResult(
        name=name,
        count=stats.count,
        success_count=stats.success_count,
        error_count=stats.error_count,
        mean=stats.mean,
        variance=stats.variance,
        std_dev=stats.std_dev,
        min_elapsed=stats.min_elapsed,
        max_elapsed=stats.max_elapsed,
        min_timestamp=stats.min_timestamp,
        max_timestamp=stats.max_timestamp,
        bytes_sent=stats.bytes_sent,
        bytes_received=stats.bytes_received,
        throughput=stats.throughput(),
        percentiles=computed,
        response_codes=tuple(sorted(stats.response_codes.items())),
        retained_samples=buffer_source.retained_count,
        compacted=stats.count > buffer_source.retained_count,
    )


def finalize(
    aggregator: BoundedAggregator,
    malformed_count: int = 0,
    ignored_count: int = 0,
    source_name: Optional[str] = None,
    percentiles: Iterable[float] = DEFAULT_PERCENTILES,
) -> ResultModel:
    """
    Build the immutable ResultModel from the aggregator state.

    Does not modify the aggregator: calling it twice without adding samples
    in between yields equal models.

    The global aggregate is the union of the per-group accumulators (sums,
    counts and extrema re-derived across groups); its percentiles come from
    the global buffer, never from the groups' derived percentiles.

    Args:
        aggregator: Aggregator that consumed the whole stream
        malformed_count: Records skipped by the reader
        ignored_count: Non-sample elements skipped by the reader
        source_name: Name of the analyzed input
        percentiles: Percentile levels to compute

    Returns:
        Finalized ResultModel
    """
    levels = tuple(percentiles)
    groups = tuple(
        summarize(name, stats, levels) for name, stats in aggregator.groups.items()
    )

    union = RunningStats.union(aggregator.groups.values(), aggregator.max_samples)
    global_stats = summarize(
        GLOBAL_GROUP_NAME, union, levels, buffer_source=aggregator.global_stats
    )

    return ResultModel(
        groups=groups,
        global_stats=global_stats,
        min_timestamp=union.min_timestamp,
        max_timestamp=union.max_timestamp,
        malformed_count=malformed_count,
        ignored_count=ignored_count,
        percentile_levels=levels,
        source_name=source_name,
    )
