# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Compression utilities for JMeter result files.

Result files may be stored plain, gzip-compressed (``results.jtl.gz``) or
Zstd-compressed (``results.jtl.zst``). The format is detected from the
file's magic number, so the extension does not matter.
"""

import gzip
import io
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO, Union

import zstandard as zstd

# Zstd magic number (little-endian): 0xFD2FB528
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
GZIP_MAGIC = b"\x1f\x8b"

# Raised while reading a truncated or corrupt compressed file
DECOMPRESSION_ERRORS = (EOFError, gzip.BadGzipFile, zstd.ZstdError)


def detect_compression(filepath: Union[str, Path]) -> str:
    """
    Detect compression format of a file.

    Args:
        filepath: Path to the file to check

    Returns:
        Compression type: "zstd", "gzip" or "none"

    Raises:
        FileNotFoundError: If file does not exist
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "rb") as f:
        magic = f.read(4)

    if magic == ZSTD_MAGIC:
        return "zstd"
    if magic[:2] == GZIP_MAGIC:
        return "gzip"
    return "none"


@contextmanager
def open_result_file(
    filepath: Union[str, Path], encoding: str = "utf-8"
) -> Iterator[TextIO]:
    """
    Open a result file, automatically handling compression.

    Args:
        filepath: Path to the result file
        encoding: Text encoding of the (decompressed) content

    Yields:
        Text stream for reading the file contents

    Raises:
        FileNotFoundError: If file does not exist

    Example:
        >>> with open_result_file("results.jtl.gz") as f:
        ...     result = analyze(f)
    """
    filepath = Path(filepath)
    compression = detect_compression(filepath)

    if compression == "zstd":
        dctx = zstd.ZstdDecompressor()
        with open(filepath, "rb") as binary_file:
            with dctx.stream_reader(binary_file, read_across_frames=True) as reader:
                with io.TextIOWrapper(reader, encoding=encoding) as text_stream:
                    yield text_stream
    elif compression == "gzip":
        with gzip.open(filepath, "rt", encoding=encoding) as text_stream:
            yield text_stream
    else:
        with open(filepath, "r", encoding=encoding) as f:
            yield f
