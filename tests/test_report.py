# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Tests for the report driver: input selection and per-file processing.
"""

import shutil
import unittest
from pathlib import Path

from jtlanalyzer.config import ReportConfig
from jtlanalyzer.exceptions import ConfigurationError
from jtlanalyzer.report import (
    base_name,
    find_result_files,
    output_context,
    pattern_root_dir,
    run_report,
    select_inputs,
)
from jtlanalyzer.writers import SummaryJsonFileWriter
from tests.test_base import (
    BaseAnalyzerTest,
    SAMPLE_RESULTS_JTL,
    SAMPLE_RESULTS_JTL_GZ,
    TRUNCATED_RESULTS_JTL,
)


class TestPathHelpers(unittest.TestCase):
    """Tests for path helper functions."""

    def test_pattern_root_dir(self):
        self.assertEqual(pattern_root_dir("/data/results/**/*.jtl"), Path("/data/results"))
        self.assertEqual(pattern_root_dir("/data/results/run1.jtl"), Path("/data/results"))
        self.assertEqual(pattern_root_dir("*.jtl"), Path("."))
        self.assertEqual(pattern_root_dir("/*.jtl"), Path("/"))

    def test_base_name(self):
        self.assertEqual(base_name(Path("results.jtl.gz")), "results.jtl")
        self.assertEqual(base_name(Path("results.jtl")), "results")
        self.assertEqual(base_name(Path("results")), "results")


class TestReport(BaseAnalyzerTest):
    """Tests for select_inputs and run_report."""

    def setUp(self):
        super().setUp()
        self.input_dir = self.temp_dir / "input"
        (self.input_dir / "nightly").mkdir(parents=True)
        shutil.copy(SAMPLE_RESULTS_JTL, self.input_dir / "a.jtl")
        shutil.copy(SAMPLE_RESULTS_JTL_GZ, self.input_dir / "nightly" / "b.jtl.gz")
        self.output_dir = self.temp_dir / "output"

    def make_config(self, pattern, **kwargs):
        return ReportConfig(
            source=str(self.input_dir / pattern),
            target_directory=self.output_dir,
            writers=("summary-json",),
            **kwargs,
        )

    def test_find_result_files_recursive(self):
        files = find_result_files(str(self.input_dir / "**" / "*.jtl*"))
        self.assertEqual([f.name for f in files], ["a.jtl", "b.jtl.gz"])

    def test_select_first_file_only(self):
        files = select_inputs(self.make_config("**/*.jtl*"))
        self.assertEqual([f.name for f in files], ["a.jtl"])

    def test_select_all_files(self):
        files = select_inputs(self.make_config("**/*.jtl*", process_all_files=True))
        self.assertEqual(len(files), 2)

    def test_select_without_source(self):
        with self.assertRaises(ConfigurationError):
            select_inputs(ReportConfig())

    def test_select_without_match(self):
        with self.assertRaises(ConfigurationError) as ctx:
            select_inputs(self.make_config("*.csv"))
        self.assertIn("No JMeter result file found", str(ctx.exception))

    def test_output_context_preserves_directories(self):
        config = self.make_config("**/*.jtl*", preserve_directories=True)
        context = output_context(self.input_dir / "nightly" / "b.jtl.gz", config, self.input_dir)
        self.assertEqual(context.relative_path, Path("nightly"))
        self.assertEqual(context.base_name, "b.jtl")
        self.assertEqual(
            context.output_path("-summary.json"),
            self.output_dir / "nightly" / "b.jtl-summary.json",
        )

    def test_run_report_flat(self):
        """Test that all inputs write into the target directory."""
        config = self.make_config("**/*.jtl*", process_all_files=True)
        outcomes = run_report(config)

        self.assertTrue(all(o.success for o in outcomes))
        self.assertTrue((self.output_dir / "a-summary.json").exists())
        self.assertTrue((self.output_dir / "b.jtl-summary.json").exists())
        self.assertEqual(outcomes[0].result.sample_count, 8)

    def test_run_report_preserving_directories(self):
        config = self.make_config(
            "**/*.jtl*", process_all_files=True, preserve_directories=True
        )
        run_report(config, [SummaryJsonFileWriter()])
        self.assertTrue((self.output_dir / "a-summary.json").exists())
        self.assertTrue((self.output_dir / "nightly" / "b.jtl-summary.json").exists())

    def test_broken_input_does_not_stop_others(self):
        """Test that a corrupt file is reported and the next one still processed."""
        shutil.copy(TRUNCATED_RESULTS_JTL, self.input_dir / "0-broken.jtl")
        config = self.make_config("*.jtl", process_all_files=True)
        outcomes = run_report(config)

        self.assertEqual([o.source.name for o in outcomes], ["0-broken.jtl", "a.jtl"])
        self.assertFalse(outcomes[0].success)
        self.assertIsNone(outcomes[0].result)
        self.assertIn("malformed XML", outcomes[0].error)
        self.assertTrue(outcomes[1].success)
        self.assertFalse((self.output_dir / "0-broken-summary.json").exists())

    def test_unknown_writer_fails_before_reading(self):
        config = ReportConfig(source=str(self.input_dir / "*.jtl"), writers=("html",))
        with self.assertRaises(ConfigurationError):
            run_report(config)



def test_run_report_on_results_file(results_file, temp_dir):
    """Test a report run over the fixture file with two thread groups."""
    config = ReportConfig(
        source=str(results_file),
        target_directory=temp_dir / "out",
        writers=("summary-json",),
    )
    outcomes = run_report(config)
    assert len(outcomes) == 1
    result = outcomes[0].result
    assert result.group_names == ("Users", "Admins")
    assert result.group("Users").error_count == 1
    assert result.global_stats.throughput == 0.3
    assert (temp_dir / "out" / "results-summary.json").exists()


def test_run_report_on_empty_results_file(empty_results_file, temp_dir):
    """Test that a file without samples still produces a summary."""
    config = ReportConfig(
        source=str(empty_results_file),
        target_directory=temp_dir / "out",
        writers=("summary-text",),
    )
    outcomes = run_report(config)
    assert outcomes[0].success
    assert outcomes[0].result.sample_count == 0
    summary = (temp_dir / "out" / "empty-summary.txt").read_text()
    assert "No samples found." in summary


if __name__ == "__main__":
    unittest.main()
