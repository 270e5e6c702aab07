# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Engine configuration.

AnalyzerConfig is an explicit value passed to analyze(); there is no
process-wide configuration, so several analyses may run side by side with
different settings.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from jtlanalyzer.analysis.models import GroupRule
from jtlanalyzer.analysis.reader import DEFAULT_SAMPLE_NAMES
from jtlanalyzer.analysis.result import DEFAULT_PERCENTILES
from jtlanalyzer.analysis.stats import DEFAULT_MAX_SAMPLES
from jtlanalyzer.exceptions import ConfigurationError


@dataclass(frozen=True)
class AnalyzerConfig:
    """
    Configuration of one analysis run.

    Attributes:
        max_samples: Per-group number of elapsed values kept before the
            buffer switches to reservoir sampling
        request_groups: Ordered grouping rules (first match wins); empty
            means every sample is grouped by its thread group
        sample_names: Element tags treated as samples
        percentiles: Percentile levels reported for every group
        seed: Seed of the reservoir sampling RNG
    """

    max_samples: int = DEFAULT_MAX_SAMPLES
    request_groups: tuple[GroupRule, ...] = ()
    sample_names: frozenset[str] = field(default=DEFAULT_SAMPLE_NAMES)
    percentiles: tuple[float, ...] = DEFAULT_PERCENTILES
    seed: int = 0

    def __post_init__(self) -> None:
        # Normalize sequences so the config stays hashable and immutable
        object.__setattr__(self, "request_groups", tuple(self.request_groups))
        object.__setattr__(self, "sample_names", frozenset(self.sample_names))
        object.__setattr__(self, "percentiles", tuple(self.percentiles))
        self.validate()

    def validate(self) -> None:
        """
        Check the configuration.

        Raises:
            ConfigurationError: If any setting is unusable
        """
        if isinstance(self.max_samples, bool) or not isinstance(self.max_samples, int):
            raise ConfigurationError(
                f"max_samples must be an integer, got {self.max_samples!r}"
            )
        if self.max_samples <= 0:
            raise ConfigurationError(
                f"max_samples must be positive, got {self.max_samples}"
            )
        if not self.sample_names:
            raise ConfigurationError("sample_names must not be empty")
        for rule in self.request_groups:
            if not rule.name or not rule.name.strip():
                raise ConfigurationError(f"Request group has an empty name: {rule!r}")
            if not rule.pattern:
                raise ConfigurationError(
                    f"Request group '{rule.name}' has an empty pattern"
                )
        for p in self.percentiles:
            if not 0 <= p <= 100:
                raise ConfigurationError(f"Percentile must be within [0, 100], got {p}")


def build_request_groups(
    mapping: Optional[Iterable[tuple[str, str]]],
) -> tuple[GroupRule, ...]:
    """
    Build ordered GroupRules from (name, pattern) pairs.

    Example:
        >>> build_request_groups([("api", "/api/**"), ("all", "/**")])
        (GroupRule(name='api', pattern='/api/**'), GroupRule(name='all', pattern='/**'))
    """
    if not mapping:
        return ()
    return tuple(GroupRule(name=name, pattern=pattern) for name, pattern in mapping)
