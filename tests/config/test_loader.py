"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence and validation
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from uptix.config.loader import _deep_merge, _load_yaml, load_config
from uptix.core.errors import ConfigError


@pytest.fixture(autouse=True)
def no_global_config(tmp_path: Path):
    """Point the global config at a file that does not exist."""
    with patch("uptix.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml"):
        yield


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "uptix.yaml"
        yaml_file.write_text("logging:\n  level: DEBUG\n")

        assert _load_yaml(yaml_file) == {"logging": {"level": "DEBUG"}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("logging: [unclosed\n")

        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    def test_nested_values_are_merged(self) -> None:
        base = {"registry": {"timeout_sec": 30}, "lockfile": {"path": "uptix.lock"}}
        override = {"registry": {"timeout_sec": 5}}

        assert _deep_merge(base, override) == {
            "registry": {"timeout_sec": 5},
            "lockfile": {"path": "uptix.lock"},
        }

    def test_base_is_not_mutated(self) -> None:
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestLoadConfig:
    def test_given_no_files_when_loaded_then_defaults(self, tmp_path: Path) -> None:
        # When
        config = load_config(tmp_path)

        # Then
        assert config.lockfile.path == "uptix.lock"
        assert config.logging.level == "WARNING"
        assert config.github.api_domain == "api.github.com"
        assert config.prefetch.command == "nix-prefetch-git"
        assert config.resolve.max_workers == 1

    def test_given_project_yaml_when_loaded_then_values_applied(self, tmp_path: Path) -> None:
        # Given
        (tmp_path / "uptix.yaml").write_text("resolve:\n  max_workers: 4\nregistry:\n  timeout_sec: 5\n")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.resolve.max_workers == 4
        assert config.registry.timeout_sec == 5

    def test_given_env_var_when_loaded_then_overrides_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Given
        (tmp_path / "uptix.yaml").write_text("lockfile:\n  path: from-yaml.lock\n")
        monkeypatch.setenv("UPTIX__LOCKFILE__PATH", "from-env.lock")

        # When
        config = load_config(tmp_path)

        # Then
        assert config.lockfile.path == "from-env.lock"

    def test_given_kwargs_when_loaded_then_highest_precedence(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("UPTIX__LOGGING__LEVEL", "INFO")

        config = load_config(tmp_path, logging={"level": "ERROR"})

        assert config.logging.level == "ERROR"

    def test_given_invalid_value_when_loaded_then_config_error(self, tmp_path: Path) -> None:
        # Given
        (tmp_path / "uptix.yaml").write_text("resolve:\n  max_workers: 0\n")

        # When / Then
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert "max_workers" in exc_info.value.message

    def test_given_non_positive_timeout_when_loaded_then_config_error(self, tmp_path: Path) -> None:
        (tmp_path / "uptix.yaml").write_text("registry:\n  timeout_sec: -1\n")

        with pytest.raises(ConfigError):
            load_config(tmp_path)
