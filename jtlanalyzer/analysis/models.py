# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Input-side data model: decoded samples and grouping rules.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Sample:
    """
    One recorded request execution.

    Attributes:
        timestamp: Start time in epoch milliseconds (JMeter ``ts``)
        elapsed: Duration in milliseconds (JMeter ``t``)
        success: Whether the sampler reported success (JMeter ``s``)
        bytes_sent: Request size in bytes (JMeter ``sby``)
        bytes_received: Response size in bytes (JMeter ``by``)
        label: Sampler label (JMeter ``lb``)
        thread_group: Thread group name derived from ``tn``
        url: Request URL from the ``java.net.URL`` child, if any
        response_code: Response code (JMeter ``rc``), if any
        thread_name: Raw thread name (JMeter ``tn``)
    """

    timestamp: int
    elapsed: int
    success: bool
    bytes_sent: int = 0
    bytes_received: int = 0
    label: str = ""
    thread_group: str = ""
    url: Optional[str] = None
    response_code: Optional[str] = None
    thread_name: str = ""


@dataclass(frozen=True)
class GroupRule:
    """A named ant-style pattern; samples matching it belong to ``name``."""

    name: str
    pattern: str
