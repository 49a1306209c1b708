# Copyright (c) Syntropy Systems
"""Tests for ciplan configuration."""

from pathlib import Path

import pytest

from ciplan.config import (
    CiplanConfig,
    default_config_data,
    find_ciplan_dir,
    load_config,
)
from ciplan.errors import ConfigError
from ciplan.models.plan import Platform


class TestFindCiplanDir:
    """Tests for locating the .ciplan directory."""

    def test_found_in_parent(self, temp_dir: Path) -> None:
        (temp_dir / ".ciplan").mkdir()
        nested = temp_dir / "a" / "b"
        nested.mkdir(parents=True)

        assert find_ciplan_dir(nested) == (temp_dir / ".ciplan").resolve()

    def test_not_found(self, temp_dir: Path) -> None:
        assert find_ciplan_dir(temp_dir) is None


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_without_file(self, temp_dir: Path) -> None:
        ciplan_dir = temp_dir / ".ciplan"
        ciplan_dir.mkdir()

        config = load_config(ciplan_dir)

        assert config.feature_tag_pattern == r"\[feature\]"
        assert config.daily_variable == "CIPLAN_DAILY_BUILD"
        assert config.test_host is None
        assert config.root == temp_dir.resolve()

    def test_values_from_yaml(self, temp_dir: Path, make_config) -> None:
        make_config(
            temp_dir,
            feature_tag_pattern=r"\[daily\]",
            test_host="bin/pwsh",
            test_paths=["test/powershell"],
            results_dir="out",
            elevation_prefix=[],
            release_tag="v7.5.0-preview.2",
        )

        config = load_config(temp_dir / ".ciplan")

        assert config.feature_tag_pattern == r"\[daily\]"
        assert config.test_host_path() == temp_dir.resolve() / "bin" / "pwsh"
        assert config.test_paths == ["test/powershell"]
        assert config.results_path() == temp_dir.resolve() / "out"
        assert config.elevation_prefix == []
        assert config.release_tag == "v7.5.0-preview.2"

    def test_mistyped_scalar_ignored(self, temp_dir: Path, make_config) -> None:
        """Non-string scalars keep their defaults."""
        make_config(temp_dir, daily_variable=42)

        config = load_config(temp_dir / ".ciplan")

        assert config.daily_variable == "CIPLAN_DAILY_BUILD"

    def test_bad_list_rejected(self, temp_dir: Path, make_config) -> None:
        make_config(temp_dir, test_command="pwsh -c Invoke-Pester")

        with pytest.raises(ConfigError, match="test_command"):
            _ = load_config(temp_dir / ".ciplan")

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        ciplan_dir = temp_dir / ".ciplan"
        ciplan_dir.mkdir()
        (ciplan_dir / "config.yaml").write_text("feature_tag_pattern: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            _ = load_config(ciplan_dir)

    def test_experimental_features(self, temp_dir: Path, make_config) -> None:
        """Features keep their order; a bare entry means the full corpus."""
        make_config(
            temp_dir,
            experimental_features={
                "PSNativeCommandErrorActionPreference": [],
                "PSFeedbackProvider": ["a.tests.ps1", "b.tests.ps1"],
                "PSLoadAssemblyFromNativeCode": None,
            },
        )

        config = load_config(temp_dir / ".ciplan")

        assert list(config.experimental_features) == [
            "PSNativeCommandErrorActionPreference",
            "PSFeedbackProvider",
            "PSLoadAssemblyFromNativeCode",
        ]
        assert config.experimental_features["PSFeedbackProvider"] == (
            "a.tests.ps1",
            "b.tests.ps1",
        )
        assert config.experimental_features["PSLoadAssemblyFromNativeCode"] == ()

    def test_features_by_platform(self, temp_dir: Path, make_config) -> None:
        """Platform entries are added to, and override, shared entries."""
        make_config(
            temp_dir,
            experimental_features={"Shared": [], "Override": ["x.tests.ps1"]},
            experimental_features_by_platform={
                "windows": {"Override": [], "WinOnly": ["w.tests.ps1"]},
            },
        )

        config = load_config(temp_dir / ".ciplan")

        windows = config.features_for(Platform.WINDOWS)
        linux = config.features_for(Platform.LINUX)
        assert windows == {"Shared": (), "Override": (), "WinOnly": ("w.tests.ps1",)}
        assert linux == {"Shared": (), "Override": ("x.tests.ps1",)}

    def test_unknown_platform(self, temp_dir: Path, make_config) -> None:
        make_config(
            temp_dir,
            experimental_features_by_platform={"solaris": {"A": []}},
        )

        with pytest.raises(ConfigError, match="solaris"):
            _ = load_config(temp_dir / ".ciplan")

    def test_features_by_platform_not_a_mapping(
        self, temp_dir: Path, make_config
    ) -> None:
        make_config(temp_dir, experimental_features_by_platform=["windows"])

        with pytest.raises(ConfigError, match="experimental_features_by_platform"):
            _ = load_config(temp_dir / ".ciplan")

    def test_default_config_round_trips(self, temp_dir: Path, make_config) -> None:
        """The config written by init loads back to the defaults."""
        data = default_config_data()
        assert "experimental_features_by_platform" in data

        make_config(temp_dir, **data)
        config = load_config(temp_dir / ".ciplan")

        assert config.experimental_features == {}
        assert config.experimental_features_by_platform == {}
        assert config.test_command == CiplanConfig().test_command


class TestConfigPaths:
    """Tests for path helpers."""

    def test_absolute_test_host(self, temp_dir: Path) -> None:
        config = CiplanConfig(test_host=str(temp_dir / "pwsh"), root=Path("/elsewhere"))

        assert config.test_host_path() == temp_dir / "pwsh"

    def test_no_test_host(self) -> None:
        assert CiplanConfig().test_host_path() is None
