# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Report configuration and its JSON file loader.

ReportConfig bundles the engine settings (AnalyzerConfig) with the settings
of the surrounding driver: which files to read and where writers put their
artifacts.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import jsonschema

from jtlanalyzer.analysis.config import AnalyzerConfig, build_request_groups
from jtlanalyzer.exceptions import ConfigurationError
from jtlanalyzer.writers import DEFAULT_WRITER_NAMES

from .schemas import CONFIG_SCHEMA

DEFAULT_TARGET_DIRECTORY = Path("target") / "jmeter-analysis"


@dataclass(frozen=True)
class ReportConfig:
    """
    Configuration of a report run over one or more result files.

    Attributes:
        source: Glob pattern of the result files (``**`` allowed)
        target_directory: Directory receiving the writers' artifacts
        process_all_files: Analyze every matching file instead of the first
        preserve_directories: Keep the files' directory structure relative
            to the pattern's root below the target directory
        writers: Names of the writers to run, in order
        remote_resources: ``{url_template: filename}`` mapping
        analyzer: Engine settings
    """

    source: Optional[str] = None
    target_directory: Path = DEFAULT_TARGET_DIRECTORY
    process_all_files: bool = False
    preserve_directories: bool = False
    writers: tuple[str, ...] = DEFAULT_WRITER_NAMES
    remote_resources: Mapping[str, str] = field(default_factory=dict)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)

    def with_overrides(self, **overrides: Any) -> "ReportConfig":
        """
        Return a copy with the given settings replaced.

        ``None`` values are ignored so unset command-line options keep the
        file's values. Keys of AnalyzerConfig are applied to ``analyzer``.

        Raises:
            ConfigurationError: If the resulting engine settings are invalid
        """
        analyzer_fields = set(AnalyzerConfig.__dataclass_fields__)
        report_changes = {}
        analyzer_changes = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key in analyzer_fields:
                analyzer_changes[key] = value
            else:
                report_changes[key] = value

        analyzer = self.analyzer
        if analyzer_changes:
            analyzer = replace(analyzer, **analyzer_changes)
        return replace(self, analyzer=analyzer, **report_changes)


def validate_config_data(data: Any, max_errors: int = 10) -> None:
    """
    Validate configuration data against CONFIG_SCHEMA.

    Raises:
        ConfigurationError: With all schema errors (up to max_errors)
    """
    validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
    errors: List[str] = []
    for error in validator.iter_errors(data):
        field_path = ".".join(str(p) for p in error.path) or "<root>"
        errors.append(f"Schema error at '{field_path}': {error.message}")
        if len(errors) >= max_errors:
            break

    if errors:
        raise ConfigurationError("Invalid configuration:\n" + "\n".join(errors))


def config_from_dict(data: Dict[str, Any], base_dir: Optional[Path] = None) -> ReportConfig:
    """
    Build a ReportConfig from parsed configuration data.

    Args:
        data: Parsed JSON object
        base_dir: Directory relative ``target_directory`` values are resolved
            against (the configuration file's directory)

    Raises:
        ConfigurationError: If the data violates the schema or the engine
            settings are invalid
    """
    validate_config_data(data)

    analyzer_kwargs: Dict[str, Any] = {}
    if "max_samples" in data:
        analyzer_kwargs["max_samples"] = data["max_samples"]
    if "sample_names" in data:
        analyzer_kwargs["sample_names"] = frozenset(data["sample_names"])
    if "request_groups" in data:
        analyzer_kwargs["request_groups"] = build_request_groups(
            (group["name"], group["pattern"]) for group in data["request_groups"]
        )
    if "percentiles" in data:
        analyzer_kwargs["percentiles"] = tuple(data["percentiles"])
    if "seed" in data:
        analyzer_kwargs["seed"] = data["seed"]

    report_kwargs: Dict[str, Any] = {"analyzer": AnalyzerConfig(**analyzer_kwargs)}
    if "source" in data:
        report_kwargs["source"] = data["source"]
    if "target_directory" in data:
        target = Path(data["target_directory"])
        if base_dir is not None and not target.is_absolute():
            target = base_dir / target
        report_kwargs["target_directory"] = target
    for key in ("process_all_files", "preserve_directories"):
        if key in data:
            report_kwargs[key] = data[key]
    if "writers" in data:
        report_kwargs["writers"] = tuple(data["writers"])
    if "remote_resources" in data:
        report_kwargs["remote_resources"] = dict(data["remote_resources"])

    return ReportConfig(**report_kwargs)


def load_config(filepath: Union[str, Path]) -> ReportConfig:
    """
    Load and validate a JSON configuration file.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the file is not valid JSON or violates the schema
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    try:
        data = json.loads(filepath.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"{filepath}: JSON decode error at line {e.lineno} - {e.msg}"
        ) from e

    return config_from_dict(data, base_dir=filepath.parent)
