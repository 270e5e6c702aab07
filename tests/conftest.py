# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Pytest configuration and shared fixtures for jtlanalyzer tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tests.test_base import results_document, sample_element


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def results_file(temp_dir: Path) -> Path:
    """Create a small JMeter result file with two thread groups."""
    filepath = temp_dir / "results.jtl"
    filepath.write_text(
        results_document(
            [
                sample_element(t="100", ts="1000", tn="Users 1-1", url="/api/users"),
                sample_element(t="200", ts="2000", s="false", tn="Users 1-2", url="/api/users"),
                sample_element(t="50", ts="11000", tn="Admins 2-1", url="/admin"),
            ]
        )
    )
    return filepath


@pytest.fixture
def empty_results_file(temp_dir: Path) -> Path:
    """Create a JMeter result file without samples."""
    filepath = temp_dir / "empty.jtl"
    filepath.write_text(results_document([]))
    return filepath
