"""
Tests for evaluator configuration.
"""

import pytest

from csgeval import EvaluatorConfig, load_config, config_from_env
from csgeval.config import RECURSION_DEPTH_ENV


class TestEvaluatorConfig:
    """Test defaults and validation."""

    def test_defaults(self):
        """Defaults are usable as-is."""
        config = EvaluatorConfig()
        assert config.max_recursion_depth == 100
        assert config.warn_unresolved_constructs
        assert config.warn_undefined_variables

    def test_rejects_non_positive(self):
        """The recursion ceiling must be positive."""
        with pytest.raises(ValueError):
            EvaluatorConfig(max_recursion_depth=0)
        with pytest.raises(ValueError):
            EvaluatorConfig(max_recursion_depth=-1)


class TestLoadConfig:
    """Test YAML config files."""

    def test_load(self, tmp_path):
        """Known keys are read from the file."""
        path = tmp_path / "eval.yaml"
        path.write_text("max_recursion_depth: 40\nwarn_unresolved_constructs: false\n")
        config = load_config(path)
        assert config.max_recursion_depth == 40
        assert config.warn_unresolved_constructs is False
        assert config.warn_undefined_variables is True

    def test_empty_file(self, tmp_path):
        """An empty file gives the defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == EvaluatorConfig()

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_unknown_key(self, tmp_path):
        """Unknown keys are rejected."""
        path = tmp_path / "bad.yaml"
        path.write_text("max_depth: 3\n")
        with pytest.raises(ValueError, match="max_depth"):
            load_config(path)

    def test_removed_key_rejected(self, tmp_path):
        """max_errors is no longer a setting."""
        path = tmp_path / "old.yaml"
        path.write_text("max_errors: 5\n")
        with pytest.raises(ValueError, match="max_errors"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        """The document must be a mapping."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(path)


class TestEnvironmentOverride:
    """Test environment overrides."""

    def test_no_override(self, monkeypatch):
        """Without the variable the base config is kept."""
        monkeypatch.delenv(RECURSION_DEPTH_ENV, raising=False)
        base = EvaluatorConfig(warn_undefined_variables=False)
        assert config_from_env(base) is base

    def test_override(self, monkeypatch):
        """The variable replaces the recursion ceiling only."""
        monkeypatch.setenv(RECURSION_DEPTH_ENV, "12")
        config = config_from_env(EvaluatorConfig(warn_undefined_variables=False))
        assert config.max_recursion_depth == 12
        assert config.warn_undefined_variables is False

    def test_invalid_override(self, monkeypatch):
        """Non-numeric and non-positive values are rejected."""
        monkeypatch.setenv(RECURSION_DEPTH_ENV, "deep")
        with pytest.raises(ValueError, match="positive integer"):
            config_from_env()
        monkeypatch.setenv(RECURSION_DEPTH_ENV, "0")
        with pytest.raises(ValueError, match="positive integer"):
            config_from_env()
