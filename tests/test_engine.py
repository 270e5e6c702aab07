# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Integration tests for analyze() and analyze_file().
"""

import gzip
import io
import unittest

from jtlanalyzer import analyze, analyze_file, AnalyzerConfig, GroupRule
from jtlanalyzer.exceptions import StreamCorruptionError
from tests.test_base import (
    BaseAnalyzerTest,
    results_document,
    SAMPLE_RESULTS_COUNT,
    SAMPLE_RESULTS_ERRORS,
    SAMPLE_RESULTS_IGNORED,
    SAMPLE_RESULTS_JTL,
    SAMPLE_RESULTS_JTL_GZ,
    SAMPLE_RESULTS_JTL_ZST,
    SAMPLE_RESULTS_MALFORMED,
    SAMPLE_RESULTS_MAX_TS,
    SAMPLE_RESULTS_MIN_TS,
    sample_element,
    TRUNCATED_RESULTS_JTL,
)

SHOP_RULES = (
    GroupRule("products", "/products/**"),
    GroupRule("static", "/**/*.css"),
)


class TestAnalyze(BaseAnalyzerTest):
    """Tests for analyze function."""

    def test_analyze_example_file(self):
        """Test the global figures of the example file."""
        result = analyze_file(SAMPLE_RESULTS_JTL)
        g = result.global_stats

        self.assertEqual(result.sample_count, SAMPLE_RESULTS_COUNT)
        self.assertEqual(result.malformed_count, SAMPLE_RESULTS_MALFORMED)
        self.assertEqual(result.ignored_count, SAMPLE_RESULTS_IGNORED)
        self.assertEqual(g.error_count, SAMPLE_RESULTS_ERRORS)
        self.assertEqual(result.min_timestamp, SAMPLE_RESULTS_MIN_TS)
        self.assertEqual(result.max_timestamp, SAMPLE_RESULTS_MAX_TS)
        self.assertAlmostEqual(g.throughput, 0.8)
        self.assertEqual(g.bytes_received, 47616)
        self.assertEqual(g.bytes_sent, 3406)
        self.assertEqual(g.min_elapsed, 30)
        self.assertEqual(g.max_elapsed, 400)
        self.assertEqual(g.percentile(50), 120)
        self.assertEqual(g.percentile(90), 400)
        self.assertEqual(dict(g.response_codes), {"200": 6, "302": 1, "500": 1})

    def test_default_grouping_by_thread_group(self):
        """Test that without rules samples are grouped by thread group."""
        result = analyze_file(SAMPLE_RESULTS_JTL)
        self.assertEqual(result.group_names, ("Users", "Buyers"))
        self.assertEqual(result.group("Users").count, 5)
        self.assertEqual(result.group("Buyers").count, 3)
        self.assertEqual(result.group("Users").mean, 114.0)

    def test_request_group_rules(self):
        """Test classification of the example file with URL rules."""
        result = analyze_file(SAMPLE_RESULTS_JTL, AnalyzerConfig(request_groups=SHOP_RULES))
        self.assertEqual(result.group_names, ("Users", "products", "static", "Buyers"))
        products = result.group("products")
        self.assertEqual(products.count, 2)
        self.assertEqual(products.error_count, 1)
        self.assertEqual(products.mean, 165.0)
        self.assertEqual(result.group("static").count, 1)
        self.assertEqual(result.group("Users").count, 2)
        self.assertEqual(result.group("Buyers").count, 3)
        self.assertEqual(sum(g.count for g in result.groups), result.sample_count)

    def test_sample_names_filter(self):
        """Test that only configured element kinds are analyzed."""
        config = AnalyzerConfig(sample_names={"sample"})
        result = analyze_file(SAMPLE_RESULTS_JTL, config)
        self.assertEqual(result.sample_count, 1)
        self.assertEqual(result.group_names, ("Buyers",))

    def test_percentile_levels(self):
        """Test that the configured percentiles are reported."""
        result = analyze_file(SAMPLE_RESULTS_JTL, AnalyzerConfig(percentiles=(0, 75)))
        self.assertEqual(result.percentile_levels, (0, 75))
        self.assertEqual(result.global_stats.percentile(0), 30)
        self.assertEqual(result.global_stats.percentile(75), 250)

    def test_compressed_inputs_match_plain(self):
        """Test that gzip and Zstd inputs give the same result."""
        plain = analyze_file(SAMPLE_RESULTS_JTL).to_dict()
        for path in (SAMPLE_RESULTS_JTL_GZ, SAMPLE_RESULTS_JTL_ZST):
            with self.subTest(path=path.name):
                data = analyze_file(path).to_dict()
                data["source"] = plain["source"]
                self.assertEqual(data, plain)

    def test_independent_configurations(self):
        """Test that analyses with different settings do not interfere."""
        grouped = analyze_file(SAMPLE_RESULTS_JTL, AnalyzerConfig(request_groups=SHOP_RULES))
        plain = analyze_file(SAMPLE_RESULTS_JTL)
        self.assertEqual(len(grouped.groups), 4)
        self.assertEqual(len(plain.groups), 2)

    def test_analyze_stream(self):
        """Test analyzing an in-memory stream."""
        document = results_document(
            [sample_element(t="100", ts="0"), sample_element(t="300", ts="2000", s="false")]
        )
        result = analyze(io.StringIO(document), source_name="memory")
        self.assertEqual(result.source_name, "memory")
        self.assertEqual(result.global_stats.mean, 200.0)
        self.assertEqual(result.global_stats.throughput, 1.0)

    def test_malformed_records_do_not_abort(self):
        """Test that 3 broken records among 1000 good ones are only counted."""
        elements = [sample_element(t="10", ts=str(i)) for i in range(1000)]
        elements.insert(1, sample_element(t="abc"))
        elements.insert(400, sample_element(ts="-5"))
        elements.insert(999, sample_element(s=None))
        result = analyze(io.StringIO(results_document(elements)))

        self.assertEqual(result.sample_count, 1000)
        self.assertEqual(result.malformed_count, 3)
        self.assertEqual(result.group("Users").count, 1000)
        self.assertEqual(result.max_timestamp, 999)

    def test_missing_thread_name_group(self):
        """Test that samples without a thread name form a visibly named group."""
        document = results_document([sample_element(tn=None), sample_element(tn="")])
        result = analyze(io.StringIO(document))
        self.assertEqual(result.group_names, ("(no thread group)",))
        self.assertEqual(result.group("(no thread group)").count, 2)

    def test_empty_results(self):
        """Test that a document without samples gives an empty model."""
        result = analyze(io.StringIO(results_document([])))
        self.assertEqual(result.groups, ())
        self.assertEqual(result.sample_count, 0)

    def test_truncated_file_raises(self):
        """Test that no partial result is returned for a truncated file."""
        with self.assertRaises(StreamCorruptionError):
            analyze_file(TRUNCATED_RESULTS_JTL)

    def test_corrupt_gzip_raises(self):
        """Test that a truncated gzip file is a stream corruption."""
        data = gzip.compress(SAMPLE_RESULTS_JTL.read_bytes())
        path = self.temp_dir / "broken.jtl.gz"
        path.write_bytes(data[: len(data) // 2])
        with self.assertRaises(StreamCorruptionError) as ctx:
            analyze_file(path)
        self.assertIn("broken.jtl.gz", str(ctx.exception))

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            analyze_file(self.temp_dir / "missing.jtl")

    def test_memory_bound_on_large_stream(self):
        """Test that a long stream keeps at most max_samples values per group."""
        elements = [sample_element(t=str(i % 700), ts=str(i)) for i in range(3000)]
        config = AnalyzerConfig(max_samples=100)
        result = analyze(io.StringIO(results_document(elements)), config)
        users = result.group("Users")
        self.assertEqual(users.count, 3000)
        self.assertEqual(users.retained_samples, 100)
        self.assertTrue(users.compacted)
        self.assertEqual(users.max_elapsed, 699)


if __name__ == "__main__":
    unittest.main()
