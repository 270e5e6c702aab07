# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Entry points of the sample aggregation engine.

analyze() runs the whole pipeline over one stream:

    SampleReader -> GroupClassifier -> BoundedAggregator -> finalize()

in a single forward pass, one sample fully processed before the next one is
decoded.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from jtlanalyzer.analysis.aggregator import BoundedAggregator
from jtlanalyzer.analysis.classifier import GroupClassifier
from jtlanalyzer.analysis.config import AnalyzerConfig
from jtlanalyzer.analysis.reader import SampleReader
from jtlanalyzer.analysis.result import finalize, ResultModel
from jtlanalyzer.compression import DECOMPRESSION_ERRORS, open_result_file
from jtlanalyzer.exceptions import StreamCorruptionError

logger = logging.getLogger(__name__)


def analyze(
    stream: Union[TextIO, BinaryIO],
    config: Optional[AnalyzerConfig] = None,
    source_name: Optional[str] = None,
) -> ResultModel:
    """
    Analyze a JMeter XML result stream.

    Args:
        stream: Readable, already decompressed stream of the result document
        config: Analysis settings (defaults to AnalyzerConfig())
        source_name: Name used in messages and stored in the result

    Returns:
        Finalized ResultModel

    Raises:
        StreamCorruptionError: If the stream cannot be decoded any further;
            no partial result is returned in that case

    Example:
        >>> with open("results.jtl") as f:
        ...     result = analyze(f, AnalyzerConfig(max_samples=10000))
        >>> result.global_stats.count
    """
    config = config or AnalyzerConfig()

    reader = SampleReader(stream, config.sample_names, source_name=source_name)
    classifier = GroupClassifier(config.request_groups)
    aggregator = BoundedAggregator(classifier, config.max_samples, seed=config.seed)

    aggregator.add_all(reader.iter_samples())

    if reader.malformed_count:
        logger.warning(
            "Skipped %d malformed sample(s) in %s",
            reader.malformed_count,
            reader.source_name,
        )

    result = finalize(
        aggregator,
        malformed_count=reader.malformed_count,
        ignored_count=reader.ignored_count,
        source_name=reader.source_name,
        percentiles=config.percentiles,
    )
    logger.info(
        "Analyzed %d samples in %d group(s) from %s",
        result.sample_count,
        len(result.groups),
        result.source_name,
    )
    return result


def analyze_file(
    file_path: Union[str, Path], config: Optional[AnalyzerConfig] = None
) -> ResultModel:
    """
    Analyze a result file, plain or compressed (gzip, Zstd).

    Raises:
        FileNotFoundError: If the file does not exist
        StreamCorruptionError: If the file cannot be decoded any further
    """
    file_path = Path(file_path)
    try:
        with open_result_file(file_path) as stream:
            return analyze(stream, config, source_name=str(file_path))
    except DECOMPRESSION_ERRORS as e:
        raise StreamCorruptionError(str(file_path), f"cannot decompress: {e}") from e
