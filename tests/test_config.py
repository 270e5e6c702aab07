# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Tests for AnalyzerConfig, ReportConfig and the JSON configuration loader.
"""

import json
import unittest
from pathlib import Path

from jtlanalyzer.analysis import AnalyzerConfig, build_request_groups, GroupRule
from jtlanalyzer.config import (
    config_from_dict,
    DEFAULT_TARGET_DIRECTORY,
    load_config,
    ReportConfig,
    validate_config_data,
)
from jtlanalyzer.exceptions import ConfigurationError
from jtlanalyzer.writers import DEFAULT_WRITER_NAMES
from tests.test_base import BaseAnalyzerTest


class TestAnalyzerConfig(unittest.TestCase):
    """Tests for AnalyzerConfig validation."""

    def test_defaults(self):
        config = AnalyzerConfig()
        self.assertEqual(config.max_samples, 50000)
        self.assertEqual(config.request_groups, ())
        self.assertEqual(config.sample_names, frozenset({"httpSample", "sample"}))
        self.assertEqual(config.percentiles, (50, 90, 95, 99))

    def test_sequences_are_normalized(self):
        """Test that lists are stored as tuples so the config stays hashable."""
        config = AnalyzerConfig(
            request_groups=[GroupRule("a", "/a")], sample_names=["sample"], percentiles=[50]
        )
        self.assertEqual(config.request_groups, (GroupRule("a", "/a"),))
        self.assertEqual(config.percentiles, (50,))
        hash(config)

    def test_invalid_max_samples(self):
        for value in (0, -5, 1.5, True, "10"):
            with self.subTest(value=value):
                with self.assertRaises(ConfigurationError):
                    AnalyzerConfig(max_samples=value)

    def test_empty_sample_names(self):
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig(sample_names=[])

    def test_invalid_rules(self):
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig(request_groups=[GroupRule(" ", "/a")])
        with self.assertRaises(ConfigurationError) as ctx:
            AnalyzerConfig(request_groups=[GroupRule("a", "")])
        self.assertIn("empty pattern", str(ctx.exception))

    def test_invalid_percentile(self):
        with self.assertRaises(ConfigurationError):
            AnalyzerConfig(percentiles=(50, 101))

    def test_build_request_groups(self):
        rules = build_request_groups([("api", "/api/**"), ("all", "/**")])
        self.assertEqual([r.name for r in rules], ["api", "all"])
        self.assertEqual(build_request_groups(None), ())


class TestReportConfig(unittest.TestCase):
    """Tests for ReportConfig overrides."""

    def test_defaults(self):
        config = ReportConfig()
        self.assertIsNone(config.source)
        self.assertEqual(config.target_directory, DEFAULT_TARGET_DIRECTORY)
        self.assertFalse(config.process_all_files)
        self.assertEqual(config.writers, DEFAULT_WRITER_NAMES)

    def test_with_overrides_ignores_none(self):
        """Test that unset options keep the existing values."""
        config = ReportConfig(source="a.jtl", process_all_files=True)
        updated = config.with_overrides(source=None, process_all_files=None, max_samples=None)
        self.assertEqual(updated, config)

    def test_with_overrides_routes_engine_settings(self):
        """Test that engine settings end up in the analyzer config."""
        config = ReportConfig().with_overrides(source="b.jtl", max_samples=10, seed=3)
        self.assertEqual(config.source, "b.jtl")
        self.assertEqual(config.analyzer.max_samples, 10)
        self.assertEqual(config.analyzer.seed, 3)

    def test_with_overrides_validates(self):
        with self.assertRaises(ConfigurationError):
            ReportConfig().with_overrides(max_samples=0)


class TestConfigLoader(BaseAnalyzerTest):
    """Tests for the JSON configuration loader."""

    def write_config(self, data, filename="analysis.json"):
        return self.create_temp_file(filename, json.dumps(data))

    def test_load_full_config(self):
        """Test loading every supported key."""
        path = self.write_config(
            {
                "source": "results/*.jtl",
                "target_directory": "out",
                "max_samples": 1000,
                "process_all_files": True,
                "preserve_directories": True,
                "sample_names": ["httpSample"],
                "request_groups": [
                    {"name": "api", "pattern": "/api/**"},
                    {"name": "static", "pattern": "/**/*.css"},
                ],
                "percentiles": [50, 99.9],
                "seed": 7,
                "writers": ["summary-json"],
                "remote_resources": {"http://grafana/render?from=_FROM_": "dash.png"},
            }
        )
        config = load_config(path)

        self.assertEqual(config.source, "results/*.jtl")
        self.assertEqual(config.target_directory, self.temp_dir / "out")
        self.assertTrue(config.process_all_files)
        self.assertTrue(config.preserve_directories)
        self.assertEqual(config.writers, ("summary-json",))
        self.assertEqual(config.remote_resources, {"http://grafana/render?from=_FROM_": "dash.png"})
        self.assertEqual(config.analyzer.max_samples, 1000)
        self.assertEqual(config.analyzer.sample_names, frozenset({"httpSample"}))
        self.assertEqual(
            config.analyzer.request_groups,
            (GroupRule("api", "/api/**"), GroupRule("static", "/**/*.css")),
        )
        self.assertEqual(config.analyzer.percentiles, (50, 99.9))
        self.assertEqual(config.analyzer.seed, 7)

    def test_empty_config_uses_defaults(self):
        config = load_config(self.write_config({}))
        self.assertEqual(config, ReportConfig())

    def test_absolute_target_directory_kept(self):
        config = config_from_dict({"target_directory": "/tmp/reports"}, base_dir=Path("/x"))
        self.assertEqual(config.target_directory, Path("/tmp/reports"))

    def test_schema_errors_are_reported(self):
        """Test that all schema violations are listed."""
        with self.assertRaises(ConfigurationError) as ctx:
            validate_config_data({"max_samples": 0, "unknown": 1, "percentiles": [150]})
        message = str(ctx.exception)
        self.assertIn("Invalid configuration", message)
        self.assertIn("max_samples", message)
        self.assertIn("percentiles", message)
        self.assertIn("unknown", message)

    def test_rule_without_pattern(self):
        with self.assertRaises(ConfigurationError):
            validate_config_data({"request_groups": [{"name": "api"}]})

    def test_not_an_object(self):
        with self.assertRaises(ConfigurationError):
            validate_config_data(["source"])

    def test_invalid_json(self):
        path = self.create_temp_file("broken.json", "{not json")
        with self.assertRaises(ConfigurationError) as ctx:
            load_config(path)
        self.assertIn("JSON decode error", str(ctx.exception))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_config(self.temp_dir / "missing.json")


if __name__ == "__main__":
    unittest.main()
