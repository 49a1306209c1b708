# Copyright (c) Syntropy Systems
"""Configuration management for ciplan."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

import yaml

from ciplan.errors import ConfigError
from ciplan.models.plan import ExperimentalFeatures, Platform

DEFAULT_TEST_COMMAND = [
    "{host}",
    "-NoProfile",
    "-File",
    "tools/run-tests.ps1",
    "-Tag",
    "{include}",
    "-ExcludeTag",
    "{exclude}",
    "-OutputFile",
    "{output_file}",
    "{paths}",
]


@dataclass
class CiplanConfig:
    """Configuration for ciplan."""

    # Commit message pattern requesting a full build (case-insensitive)
    feature_tag_pattern: str = r"\[feature\]"

    # Environment variables carrying the pipeline signals
    schedule_variable: str = "BUILD_REASON"
    schedule_value: str = "Schedule"
    force_feature_variable: str = "FORCE_FEATURE"
    commit_variable: str = "BUILD_SOURCEVERSION"
    build_id_variable: str = "BUILD_BUILDID"

    # Build variables written for later stages
    daily_variable: str = "CIPLAN_DAILY_BUILD"
    tests_passed_variable: str = "CIPLAN_TESTS_PASSED"

    # Compiled test host; relative paths resolve against the project root
    test_host: str | None = None

    # Test runner argv template
    test_command: list[str] = field(default_factory=lambda: list(DEFAULT_TEST_COMMAND))
    test_paths: list[str] = field(default_factory=lambda: ["test"])
    results_dir: str = "test-results"
    elevation_prefix: list[str] = field(default_factory=lambda: ["sudo", "-E"])

    experimental_features: ExperimentalFeatures = field(default_factory=dict)
    experimental_features_by_platform: dict[str, ExperimentalFeatures] = field(
        default_factory=dict
    )

    release_tag: str = "v0.0.0"

    # Project root the config was loaded from
    root: Path = field(default_factory=Path.cwd)

    def features_for(self, platform: Platform) -> ExperimentalFeatures:
        """Experimental features for a platform, shared entries first."""
        merged = dict(self.experimental_features)
        merged.update(self.experimental_features_by_platform.get(platform.value, {}))
        return merged

    def compiled_feature_pattern(self) -> re.Pattern[str]:
        """Compile the feature tag pattern.

        Raises re.error if the configured pattern is invalid.
        """
        return re.compile(self.feature_tag_pattern, re.IGNORECASE)

    def test_host_path(self) -> Path | None:
        """Absolute path of the configured test host, if any."""
        if not self.test_host:
            return None
        host = Path(self.test_host).expanduser()
        if not host.is_absolute():
            host = self.root / host
        return host

    def results_path(self) -> Path:
        """Absolute directory for result files and logs."""
        results = Path(self.results_dir).expanduser()
        if not results.is_absolute():
            results = self.root / results
        return results


def find_ciplan_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .ciplan directory by walking up from start_path.

    Returns None if no .ciplan directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        ciplan_dir = current / ".ciplan"
        if ciplan_dir.is_dir():
            return ciplan_dir
        current = current.parent

    # Check root
    ciplan_dir = current / ".ciplan"
    if ciplan_dir.is_dir():
        return ciplan_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global ciplan config directory (~/.ciplan)."""
    return Path.home() / ".ciplan"


def _str_list(value: object, key: str) -> list[str]:
    if not isinstance(value, list) or not all(
        isinstance(item, (str, int, float)) for item in cast("list[object]", value)
    ):
        msg = f"'{key}' must be a list of strings"
        raise ConfigError(msg)
    return [str(item) for item in cast("list[object]", value)]


def _features(value: object, key: str) -> ExperimentalFeatures:
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must map feature names to lists of test files"
        raise ConfigError(msg)
    features: ExperimentalFeatures = {}
    for name, files in cast("dict[object, object]", value).items():
        # A feature listed with no value runs against the full corpus
        files_list = [] if files is None else _str_list(files, f"{key}.{name}")
        features[str(name)] = tuple(files_list)
    return features


def load_config(ciplan_dir: Path | None = None) -> CiplanConfig:
    """Load configuration from .ciplan/config.yaml or defaults.

    Looks for config in:
    1. Provided ciplan_dir
    2. Nearest .ciplan directory walking up
    3. ~/.ciplan/config.yaml
    4. Defaults
    """
    config = CiplanConfig()

    # Find config file
    config_path = None

    if ciplan_dir is None:
        ciplan_dir = find_ciplan_dir()

    if ciplan_dir is not None:
        config_path = ciplan_dir / "config.yaml"
        config.root = ciplan_dir.resolve().parent
    else:
        global_config = get_global_config_dir() / "config.yaml"
        if global_config.exists():
            config_path = global_config

    if config_path is None or not config_path.exists():
        return config

    with config_path.open() as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {config_path}: {e}"
            raise ConfigError(msg) from e

    if raw is None:
        return config
    if not isinstance(raw, dict):
        msg = f"{config_path} must contain a mapping"
        raise ConfigError(msg)
    data = cast("dict[str, object]", raw)

    for key in (
        "feature_tag_pattern",
        "schedule_variable",
        "schedule_value",
        "force_feature_variable",
        "commit_variable",
        "build_id_variable",
        "daily_variable",
        "tests_passed_variable",
        "test_host",
        "results_dir",
        "release_tag",
    ):
        value = data.get(key)
        if isinstance(value, str):
            setattr(config, key, value)

    for key in ("test_command", "test_paths", "elevation_prefix"):
        if key in data and data[key] is not None:
            setattr(config, key, _str_list(data[key], key))

    config.experimental_features = _features(
        data.get("experimental_features"), "experimental_features"
    )

    by_platform = data.get("experimental_features_by_platform")
    if by_platform is not None and not isinstance(by_platform, dict):
        msg = (
            "'experimental_features_by_platform' must map platform names "
            "to features"
        )
        raise ConfigError(msg)
    if by_platform:
        known = {p.value for p in Platform}
        for platform_name, features in cast("dict[str, object]", by_platform).items():
            if platform_name not in known:
                msg = (
                    f"Unknown platform '{platform_name}' in "
                    "experimental_features_by_platform"
                )
                raise ConfigError(msg)
            config.experimental_features_by_platform[platform_name] = _features(
                features, f"experimental_features_by_platform.{platform_name}"
            )

    return config


def default_config_data() -> dict[str, object]:
    """Config written by ``ciplan init``."""
    defaults = CiplanConfig()
    return {
        "feature_tag_pattern": defaults.feature_tag_pattern,
        "schedule_variable": defaults.schedule_variable,
        "schedule_value": defaults.schedule_value,
        "force_feature_variable": defaults.force_feature_variable,
        "commit_variable": defaults.commit_variable,
        "build_id_variable": defaults.build_id_variable,
        "daily_variable": defaults.daily_variable,
        "tests_passed_variable": defaults.tests_passed_variable,
        "test_host": None,
        "test_command": defaults.test_command,
        "test_paths": defaults.test_paths,
        "results_dir": defaults.results_dir,
        "elevation_prefix": defaults.elevation_prefix,
        "experimental_features": {},
        "experimental_features_by_platform": {},
        "release_tag": defaults.release_tag,
    }
