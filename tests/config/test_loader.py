"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from diffpane.config.loader import (
    GLOBAL_CONFIG_PATH,
    _deep_merge,
    _load_yaml,
    load_config,
)
from diffpane.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        """Returns empty dict when file doesn't exist."""
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("view:\n  format: json\n")

        assert _load_yaml(yaml_file) == {"view": {"format": "json"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ConfigError for invalid YAML syntax."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("view:\n  filters:\n    - invalid: [unclosed")

        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_merge(self) -> None:
        """Nested dicts are merged recursively."""
        base = {"view": {"format": "yaml", "word_diff_mode": "char"}}
        override = {"view": {"format": "json"}}
        result = _deep_merge(base, override)
        assert result == {"view": {"format": "json", "word_diff_mode": "char"}}

    def test_override_replaces_non_dict(self) -> None:
        base: dict[str, Any] = {"a": {"nested": 1}}
        override: dict[str, Any] = {"a": "simple"}
        assert _deep_merge(base, override) == {"a": "simple"}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        _deep_merge(base, {"b": 2})
        assert base == {"a": 1}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_default_config_when_no_files(self, tmp_path: Path) -> None:
        with patch("diffpane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.logging.level == "INFO"
        assert config.view.format == "yaml"
        assert config.view.display_mode == "side-by-side"
        assert config.debug.strict_invariants is False

    def test_loads_project_config(self, tmp_path: Path) -> None:
        """Loads config from the .diffpane directory."""
        project_dir = tmp_path / ".diffpane"
        project_dir.mkdir()
        (project_dir / "config.yaml").write_text("view:\n  format: json\n")

        with patch("diffpane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path)

        assert config.view.format == "json"

    def test_project_config_overrides_global(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("view:\n  format: json\n  word_diff_mode: char\n")
        project_dir = tmp_path / ".diffpane"
        project_dir.mkdir()
        (project_dir / "config.yaml").write_text("view:\n  format: yaml\n")

        with patch("diffpane.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path)

        assert config.view.format == "yaml"
        assert config.view.word_diff_mode == "char"

    def test_env_vars_override_yaml(self, tmp_path: Path) -> None:
        project_dir = tmp_path / ".diffpane"
        project_dir.mkdir()
        (project_dir / "config.yaml").write_text("logging:\n  level: INFO\n")

        with (
            patch("diffpane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            patch.dict(os.environ, {"DIFFPANE__LOGGING__LEVEL": "WARNING"}),
        ):
            config = load_config(tmp_path)

        assert config.logging.level == "WARNING"

    def test_kwargs_override_all(self, tmp_path: Path) -> None:
        from diffpane.config.models import DebugConfig

        with patch("diffpane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
            config = load_config(tmp_path, debug=DebugConfig(strict_invariants=True))

        assert config.debug.strict_invariants is True

    def test_raises_config_error_for_invalid_value(self, tmp_path: Path) -> None:
        project_dir = tmp_path / ".diffpane"
        project_dir.mkdir()
        (project_dir / "config.yaml").write_text("view:\n  format: xml\n")

        with (
            patch("diffpane.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"),
            pytest.raises(ConfigError) as exc_info,
        ):
            load_config(tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE


class TestGlobalConfigPath:
    """Tests for GLOBAL_CONFIG_PATH constant."""

    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "diffpane" in str(GLOBAL_CONFIG_PATH)
