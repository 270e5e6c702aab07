# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Streaming aggregation of samples into per-group running statistics.

Each sample is classified and then accounted in its group's RunningStats
and in the global RunningStats. Memory is bounded by ``max_samples``
retained values per group (plus the same bound for the global buffer),
independent of the number of samples consumed.
"""

import logging
from typing import Iterable, Optional

from jtlanalyzer.analysis.classifier import GroupClassifier
from jtlanalyzer.analysis.models import Sample
from jtlanalyzer.analysis.stats import DEFAULT_MAX_SAMPLES, RunningStats

logger = logging.getLogger(__name__)


class BoundedAggregator:
    """
    Single-pass aggregator with bounded memory per group.

    Groups are created lazily on their first sample, so every group held
    by the aggregator is non-empty.

    Example:
        >>> aggregator = BoundedAggregator(GroupClassifier(), max_samples=100)
        >>> aggregator.add(Sample(0, 120, True, thread_group="Users"))
        'Users'
        >>> aggregator.groups["Users"].count
        1
    """

    def __init__(
        self,
        classifier: Optional[GroupClassifier] = None,
        max_samples: int = DEFAULT_MAX_SAMPLES,
        seed: int = 0,
    ) -> None:
        """
        Args:
            classifier: Group classifier (defaults to thread-group fallback only)
            max_samples: Per-group bound of retained elapsed values
            seed: Base seed for the per-group reservoir RNGs

        Raises:
            ValueError: If max_samples is not positive
        """
        if max_samples <= 0:
            raise ValueError(f"max_samples must be positive, got {max_samples}")

        self.classifier = classifier or GroupClassifier()
        self.max_samples = max_samples
        self.seed = seed
        self.groups: dict[str, RunningStats] = {}
        self.global_stats = RunningStats(max_samples, seed=f"{seed}:*")

    def add(self, sample: Sample) -> str:
        """
        Classify and account one sample.

        Returns:
            The group name the sample was assigned to
        """
        name = self.classifier.classify(sample)
        stats = self.groups.get(name)
        if stats is None:
            # Seed derived from the group name keeps compaction reproducible
            stats = RunningStats(self.max_samples, seed=f"{self.seed}:{name}")
            self.groups[name] = stats
            logger.debug("New request group %r", name)

        stats.add(sample)
        self.global_stats.add(sample)

        if stats.count == self.max_samples + 1:
            logger.debug(
                "Group %r exceeded %d samples, switching to reservoir sampling",
                name,
                self.max_samples,
            )
        return name

    def add_all(self, samples: Iterable[Sample]) -> int:
        """
        Consume an iterable of samples.

        Returns:
            Number of samples consumed
        """
        consumed = 0
        for sample in samples:
            self.add(sample)
            consumed += 1
        return consumed

    @property
    def sample_count(self) -> int:
        return self.global_stats.count
