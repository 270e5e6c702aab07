# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Running statistics with a bounded sample buffer.

Scalar accumulators (counts, sums, extrema, byte totals) are exact for any
stream length. Percentiles come from a buffer of elapsed times holding at
most ``max_samples`` values:

- while ``count <= max_samples`` every value is kept and percentiles are exact
- past the bound the buffer becomes a uniform reservoir sample (Vitter's
  Algorithm R). The standard error of an estimated p-quantile's rank is about
  ``sqrt(p * (1 - p) / max_samples)``, independent of the stream length.

Percentiles use the nearest-rank definition; p0 and p100 report the exact
minimum and maximum.
"""

import math
import random
from collections import Counter
from fractions import Fraction
from typing import Iterable, Optional, Union

from jtlanalyzer.analysis.models import Sample

DEFAULT_MAX_SAMPLES = 50000


def nearest_rank(sorted_values: list[int], p: float) -> int:
    """
    Nearest-rank percentile of an ascending, non-empty list.

    Args:
        sorted_values: Values sorted ascending
        p: Percentile in [0, 100]

    Returns:
        The smallest value such that at least p% of values are <= it

    Example:
        >>> nearest_rank([15, 20, 35, 40, 50], 40)
        20
    """
    # Decimal value of p, so p=7 over 100 values is rank 7 exactly
    rank = math.ceil(Fraction(str(p)) * len(sorted_values) / 100)
    return sorted_values[min(max(rank, 1), len(sorted_values)) - 1]


class RunningStats:
    """
    Mutable per-group accumulator.

    Example:
        >>> stats = RunningStats(max_samples=1000)
        >>> stats.add(Sample(timestamp=0, elapsed=100, success=True))
        >>> stats.add(Sample(timestamp=5, elapsed=200, success=False))
        >>> stats.mean, stats.error_rate
        (150.0, 0.5)
    """

    def __init__(
        self, max_samples: int = DEFAULT_MAX_SAMPLES, seed: Union[int, str] = 0
    ) -> None:
        """
        Args:
            max_samples: Maximum number of elapsed values kept for percentiles
            seed: Seed of the reservoir RNG (makes compaction reproducible)

        Raises:
            ValueError: If max_samples is not positive
        """
        if max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {max_samples}")

        self.max_samples = max_samples
        self.count = 0
        self.success_count = 0
        self.error_count = 0
        self.elapsed_sum = 0
        self.elapsed_sq_sum = 0
        self.min_elapsed: Optional[int] = None
        self.max_elapsed: Optional[int] = None
        self.min_timestamp: Optional[int] = None
        self.max_timestamp: Optional[int] = None
        self.bytes_sent = 0
        self.bytes_received = 0
        self.response_codes: Counter = Counter()
        self._seed = seed
        self._rng = random.Random(seed)
        self._buffer: list[int] = []

    def add(self, sample: Sample) -> None:
        """Account one sample. Inputs are assumed validated by the reader."""
        self.count += 1
        if sample.success:
            self.success_count += 1
        else:
            self.error_count += 1

        elapsed = sample.elapsed
        self.elapsed_sum += elapsed
        self.elapsed_sq_sum += elapsed * elapsed
        if self.min_elapsed is None or elapsed < self.min_elapsed:
            self.min_elapsed = elapsed
        if self.max_elapsed is None or elapsed > self.max_elapsed:
            self.max_elapsed = elapsed

        if self.min_timestamp is None or sample.timestamp < self.min_timestamp:
            self.min_timestamp = sample.timestamp
        if self.max_timestamp is None or sample.timestamp > self.max_timestamp:
            self.max_timestamp = sample.timestamp

        self.bytes_sent += sample.bytes_sent
        self.bytes_received += sample.bytes_received
        if sample.response_code is not None:
            self.response_codes[sample.response_code] += 1

        self._retain(elapsed)

    def _retain(self, value: int) -> None:
        if self.count <= self.max_samples:
            self._buffer.append(value)
            return
        # Algorithm R: keep the new value with probability max_samples / count
        slot = self._rng.randrange(self.count)
        if slot < self.max_samples:
            self._buffer[slot] = value

    @property
    def retained_count(self) -> int:
        """Number of elapsed values currently held in the buffer."""
        return len(self._buffer)

    @property
    def compacted(self) -> bool:
        """Whether the buffer no longer holds every value seen."""
        return self.count > len(self._buffer)

    @property
    def error_rate(self) -> float:
        return self.error_count / self.count if self.count else 0.0

    @property
    def mean(self) -> float:
        return self.elapsed_sum / self.count if self.count else 0.0

    @property
    def variance(self) -> float:
        """Population variance of elapsed times, computed exactly from the sums."""
        if not self.count:
            return 0.0
        n = self.count
        return (n * self.elapsed_sq_sum - self.elapsed_sum**2) / (n * n)

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    def sorted_values(self) -> list[int]:
        """Sorted copy of the retained buffer; the buffer itself is untouched."""
        return sorted(self._buffer)

    def percentile(self, p: float) -> Optional[int]:
        """
        Nearest-rank percentile of elapsed times.

        Args:
            p: Percentile in [0, 100]

        Returns:
            Elapsed time in milliseconds, or None when no sample was added
        """
        return self.percentiles([p])[0][1]

    def percentiles(self, ps: Iterable[float]) -> tuple[tuple[float, Optional[int]], ...]:
        """Evaluate several percentiles with a single sort of the buffer."""
        ps = tuple(ps)
        for p in ps:
            if not 0 <= p <= 100:
                raise ValueError(f"Percentile must be within [0, 100], got {p}")
        if not self._buffer:
            return tuple((p, None) for p in ps)

        values = self.sorted_values()
        result = []
        for p in ps:
            if p == 0:
                result.append((p, self.min_elapsed))
            elif p == 100:
                result.append((p, self.max_elapsed))
            else:
                result.append((p, nearest_rank(values, p)))
        return tuple(result)

    def throughput(self) -> float:
        """Samples per second over the observed timestamp window."""
        return compute_throughput(self.count, self.min_timestamp, self.max_timestamp)

    @classmethod
    def union(
        cls, parts: Iterable["RunningStats"], max_samples: int = DEFAULT_MAX_SAMPLES
    ) -> "RunningStats":
        """
        Combine the scalar accumulators of several RunningStats.

        The buffer of the result is left empty; use merge() to combine
        buffers as well.
        """
        combined = cls(max_samples=max_samples)
        for part in parts:
            combined.count += part.count
            combined.success_count += part.success_count
            combined.error_count += part.error_count
            combined.elapsed_sum += part.elapsed_sum
            combined.elapsed_sq_sum += part.elapsed_sq_sum
            combined.min_elapsed = _min(combined.min_elapsed, part.min_elapsed)
            combined.max_elapsed = _max(combined.max_elapsed, part.max_elapsed)
            combined.min_timestamp = _min(combined.min_timestamp, part.min_timestamp)
            combined.max_timestamp = _max(combined.max_timestamp, part.max_timestamp)
            combined.bytes_sent += part.bytes_sent
            combined.bytes_received += part.bytes_received
            combined.response_codes.update(part.response_codes)
        return combined

    def merge(self, other: "RunningStats") -> "RunningStats":
        """
        Return a new accumulator covering the samples of both.

        Scalar fields are combined exactly (associative and commutative).
        Buffers are concatenated while the combined count fits the bound;
        otherwise ``max_samples`` values are drawn from the two buffers in
        proportion to the counts they represent.
        """
        merged = RunningStats.union([self, other], max_samples=self.max_samples)
        merged._seed = f"{self._seed}+{other._seed}"
        merged._rng = random.Random(merged._seed)

        if merged.count <= merged.max_samples:
            merged._buffer = self._buffer + other._buffer
            return merged

        rng = merged._rng
        left = list(self._buffer)
        right = list(other._buffer)
        rng.shuffle(left)
        rng.shuffle(right)
        left_weight = self.count
        right_weight = other.count
        buffer = []
        while len(buffer) < merged.max_samples and (left or right):
            take_left = rng.random() * (left_weight + right_weight) < left_weight
            if (take_left and left) or not right:
                buffer.append(left.pop())
                left_weight -= self.count / max(len(self._buffer), 1)
            else:
                buffer.append(right.pop())
                right_weight -= other.count / max(len(other._buffer), 1)
        merged._buffer = buffer
        return merged


def compute_throughput(
    count: int, min_timestamp: Optional[int], max_timestamp: Optional[int]
) -> float:
    """
    Samples per second between two epoch-millisecond timestamps.

    Returns 0.0 when the window is empty (no samples, or all samples share
    one timestamp).

    Example:
        >>> compute_throughput(100, 0, 10_000)
        10.0
    """
    if min_timestamp is None or max_timestamp is None:
        return 0.0
    duration_ms = max_timestamp - min_timestamp
    if duration_ms <= 0:
        return 0.0
    return count / (duration_ms / 1000.0)


def _min(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _max(a: Optional[int], b: Optional[int]) -> Optional[int]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)
