# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Sample reader for JMeter XML result files.

This module provides the SampleReader class for decoding a JMeter XML
result stream (``<testResults>``) into Sample records, one at a time and
in constant memory.

A JMeter sample element looks like::

    <httpSample t="120" ts="1326729360000" s="true" lb="Login"
                rc="200" tn="Users 1-3" by="5120" sby="312">
      <java.net.URL>http://example.com/login</java.net.URL>
    </httpSample>
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import BinaryIO, Iterable, Iterator, Mapping, Optional, TextIO, Union

from jtlanalyzer.analysis.models import Sample
from jtlanalyzer.exceptions import StreamCorruptionError

logger = logging.getLogger(__name__)

HTTPSAMPLE_ELEMENT_NAME = "httpSample"
SAMPLE_ELEMENT_NAME = "sample"
DEFAULT_SAMPLE_NAMES = frozenset({HTTPSAMPLE_ELEMENT_NAME, SAMPLE_ELEMENT_NAME})
URL_ELEMENT_NAME = "java.net.URL"

# Fallback group of samples whose thread name is missing or blank
UNNAMED_THREAD_GROUP = "(no thread group)"

# JMeter thread names look like "<thread group> <group number>-<thread number>"
_THREAD_NUMBER_SUFFIX = re.compile(r"\s+\d+-\d+$")


class MalformedSampleError(ValueError):
    """Raised for a single sample record that cannot be decoded."""

    pass


def thread_group_name(thread_name: str) -> str:
    """
    Derive the thread group from a JMeter thread name.

    Examples:
        >>> thread_group_name("Checkout Users 1-12")
        'Checkout Users'
        >>> thread_group_name("main")
        'main'
    """
    return _THREAD_NUMBER_SUFFIX.sub("", thread_name.strip())


def _parse_int(attrib: Mapping[str, str], key: str, required: bool) -> int:
    raw = attrib.get(key)
    if raw is None or not raw.strip():
        if required:
            raise MalformedSampleError(f"missing required attribute '{key}'")
        return 0
    try:
        value = int(raw.strip())
    except ValueError:
        raise MalformedSampleError(f"attribute '{key}' is not an integer: {raw!r}")
    if value < 0:
        raise MalformedSampleError(f"attribute '{key}' is negative: {value}")
    return value


def _parse_success(attrib: Mapping[str, str]) -> bool:
    raw = attrib.get("s")
    if raw is None:
        raise MalformedSampleError("missing required attribute 's'")
    flag = raw.strip().lower()
    if flag == "true":
        return True
    if flag == "false":
        return False
    raise MalformedSampleError(f"attribute 's' is not a boolean: {raw!r}")


def parse_sample(attrib: Mapping[str, str], url: Optional[str] = None) -> Sample:
    """
    Build a Sample from the attributes of a JMeter sample element.

    Args:
        attrib: Element attributes
        url: Text of the element's ``java.net.URL`` child, if present

    Returns:
        Decoded Sample

    Raises:
        MalformedSampleError: If a required attribute is missing or a
            numeric attribute is invalid or negative
    """
    thread_name = attrib.get("tn", "")
    response_code = attrib.get("rc")
    return Sample(
        timestamp=_parse_int(attrib, "ts", required=True),
        elapsed=_parse_int(attrib, "t", required=True),
        success=_parse_success(attrib),
        bytes_sent=_parse_int(attrib, "sby", required=False),
        bytes_received=_parse_int(attrib, "by", required=False),
        label=attrib.get("lb", ""),
        thread_group=thread_group_name(thread_name) or UNNAMED_THREAD_GROUP,
        url=url or None,
        response_code=response_code or None,
        thread_name=thread_name,
    )


class SampleReader:
    """
    Streaming reader for JMeter XML result streams.

    Samples are produced lazily and the stream is consumed once. Records
    that cannot be decoded are skipped and counted in ``malformed_count``;
    direct children of the root whose tag is not a sample kind are counted
    in ``ignored_count``.

    Example:
        >>> with open("results.jtl") as f:
        ...     reader = SampleReader(f)
        ...     for sample in reader.iter_samples():
        ...         print(sample.label, sample.elapsed)
    """

    def __init__(
        self,
        stream: Union[TextIO, BinaryIO],
        sample_names: Iterable[str] = DEFAULT_SAMPLE_NAMES,
        source_name: Optional[str] = None,
    ) -> None:
        """
        Initialize the SampleReader.

        Args:
            stream: Readable text (or binary) stream positioned at the start
                of the XML document
            sample_names: Element tags emitted as samples
            source_name: Name used in error and log messages
        """
        self._stream = stream
        self.sample_names = frozenset(sample_names)
        stream_name = getattr(stream, "name", None)
        self.source_name = source_name or (str(stream_name) if stream_name else None)
        self.sample_count = 0
        self.malformed_count = 0
        self.ignored_count = 0
        self._consumed = False

    def _ensure_not_consumed(self) -> None:
        """Raise error if the stream has already been consumed."""
        if self._consumed:
            raise RuntimeError(
                "SampleReader stream has already been consumed. "
                "Create a new reader to process again."
            )
        self._consumed = True

    def _decode(self, elem: ET.Element) -> Optional[Sample]:
        url_elem = elem.find(URL_ELEMENT_NAME)
        url = url_elem.text.strip() if url_elem is not None and url_elem.text else None
        try:
            sample = parse_sample(elem.attrib, url)
        except MalformedSampleError as e:
            self.malformed_count += 1
            logger.debug(
                "Skipping malformed <%s> in %s: %s", elem.tag, self.source_name, e
            )
            return None
        self.sample_count += 1
        return sample

    def iter_samples(self) -> Iterator[Sample]:
        """
        Iterate over the samples of the stream.

        Yields:
            Sample: Each decoded sample, in document order (nested
            sub-samples precede their parent)

        Raises:
            StreamCorruptionError: If the XML cannot be parsed any further
            RuntimeError: If the reader was already consumed
        """
        self._ensure_not_consumed()

        root: Optional[ET.Element] = None
        depth = 0
        try:
            for event, elem in ET.iterparse(self._stream, events=("start", "end")):
                if event == "start":
                    if root is None:
                        root = elem
                    depth += 1
                    continue

                depth -= 1
                is_sample = elem.tag in self.sample_names
                if is_sample:
                    sample = self._decode(elem)
                    if sample is not None:
                        yield sample

                if elem is root:
                    continue
                if depth == 1:
                    if not is_sample:
                        self.ignored_count += 1
                    # Drop finished top-level elements so memory stays flat
                    root.clear()
                elif is_sample:
                    elem.clear()
        except ET.ParseError as e:
            line, column = getattr(e, "position", (0, 0))
            raise StreamCorruptionError(
                self.source_name,
                f"malformed XML at line {line}, column {column}",
            ) from e
        except UnicodeDecodeError as e:
            raise StreamCorruptionError(self.source_name, f"undecodable data: {e}") from e
        except ValueError:
            if getattr(self._stream, "closed", False):
                logger.info(
                    "Source %s was closed after %d samples, stopping",
                    self.source_name,
                    self.sample_count,
                )
                return
            raise
