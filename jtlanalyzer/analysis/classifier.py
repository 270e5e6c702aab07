# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Request group classification.

Samples are assigned to request groups using ordered ant-style patterns.
The first matching rule wins; a sample no rule matches falls back to its
thread group, so every sample always has a group.
"""

import functools
import re
from typing import Callable, Iterable
from urllib.parse import urlsplit

from jtlanalyzer.analysis.models import GroupRule, Sample


def _ant_to_regex(pattern: str) -> str:
    """
    Translate an ant-style pattern into a regular expression.

    - ``?`` matches exactly one character other than ``/``
    - ``*`` matches zero or more characters other than ``/``
    - ``**`` matches zero or more characters including ``/``
    - ``/**/`` also matches a single ``/``; a trailing ``/**`` also matches
      nothing, so ``/api/**`` matches ``/api`` itself

    Args:
        pattern: Ant-style pattern (e.g., "/api/**/users/*")

    Returns:
        Regular expression source (to be matched against the whole string)
    """
    parts = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("/**/", i):
            parts.append("/(?:.*/)?")
            i += 4
        elif pattern.startswith("/**", i) and i + 3 == n:
            parts.append("(?:/.*)?")
            i += 3
        elif i == 0 and pattern.startswith("**/"):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return "".join(parts)


@functools.lru_cache(maxsize=512)
def compile_ant_pattern(pattern: str) -> Callable[[str], bool]:
    """
    Compile an ant-style pattern into a matcher function.

    Args:
        pattern: Ant-style pattern

    Returns:
        Predicate returning True when the whole text matches the pattern

    Raises:
        ValueError: If the pattern is empty

    Examples:
        >>> match = compile_ant_pattern("*/foo/*")
        >>> match("/foo/bar")
        True
        >>> compile_ant_pattern("/api/**")("/api/v1/users")
        True
    """
    if not pattern:
        raise ValueError("Pattern cannot be empty")

    regex = re.compile(_ant_to_regex(pattern), re.DOTALL)
    return lambda text: regex.fullmatch(text) is not None


def _match_candidates(sample: Sample) -> tuple[str, ...]:
    """Texts a rule is matched against: the URL (and its path), else the label."""
    if not sample.url:
        return (sample.label,)
    try:
        parts = urlsplit(sample.url)
    except ValueError:
        return (sample.url,)
    if parts.scheme and parts.netloc:
        return (sample.url, parts.path or "/")
    return (sample.url,)


class GroupClassifier:
    """
    Classifier with precompiled rule matchers.

    Stateless after construction: the same sample always yields the same
    group, regardless of which samples were classified before.

    Example:
        >>> classifier = GroupClassifier([GroupRule("api", "/api/**")])
        >>> classifier.classify(Sample(0, 10, True, url="/api/users"))
        'api'
    """

    def __init__(self, rules: Iterable[GroupRule] = ()) -> None:
        """
        Initialize the classifier.

        Args:
            rules: Rules in evaluation order (the order is kept as given)

        Raises:
            ValueError: If a rule has an empty pattern
        """
        self._rules = tuple(rules)
        self._matchers = [
            (rule.name, compile_ant_pattern(rule.pattern)) for rule in self._rules
        ]

    @property
    def rules(self) -> tuple[GroupRule, ...]:
        return self._rules

    def classify(self, sample: Sample) -> str:
        """Return the group name for a sample."""
        candidates = _match_candidates(sample)
        for name, matcher in self._matchers:
            if any(matcher(text) for text in candidates):
                return name
        return sample.thread_group


def classify(sample: Sample, rules: Iterable[GroupRule]) -> str:
    """
    Classify a single sample against an ordered rule list.

    Convenience wrapper around GroupClassifier; matchers are cached so
    repeated calls with the same patterns do not recompile them.

    Args:
        sample: Decoded sample
        rules: Rules in evaluation order

    Returns:
        Name of the first matching rule, or the sample's thread group
    """
    return GroupClassifier(rules).classify(sample)
