"""
Smoke tests for configuration loading and validation.
"""

import os
import pytest

from main import load_config, validate_config


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """A complete valid config passes validation."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    def test_missing_tailer_section(self, valid_config):
        del valid_config["tailer"]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "tailer" in error.lower()

    def test_missing_log_level(self, valid_config):
        del valid_config["log_level"]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error.lower()

    def test_log_path_optional(self, valid_config):
        del valid_config["log_path"]

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_prefix_required_without_filename(self, valid_config):
        valid_config["tailer"]["prefix"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "prefix" in error.lower()

    def test_filename_replaces_prefix(self, valid_config):
        valid_config["tailer"]["prefix"] = ""
        valid_config["tailer"]["filename"] = "/tmp/metrics.out"

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_empty_filename(self, valid_config):
        valid_config["tailer"]["filename"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "filename" in error.lower()

    @pytest.mark.parametrize("interval", [0, -5, "fast", True])
    def test_invalid_poll_interval(self, valid_config, interval):
        valid_config["tailer"]["poll_interval"] = interval

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "poll_interval" in error.lower()

    def test_integer_poll_interval_valid(self, valid_config):
        valid_config["tailer"]["poll_interval"] = 2

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    @pytest.mark.parametrize("size", [0, 2.5, "4"])
    def test_invalid_buffer_size(self, valid_config, size):
        valid_config["tailer"]["buffer_size"] = size

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "buffer_size" in error.lower()

    def test_invalid_restart_flag(self, valid_config):
        valid_config["tailer"]["restart_sequence_on_truncate"] = "yes"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "restart_sequence_on_truncate" in error.lower()

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "INVALID"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error.lower()

    @pytest.mark.parametrize("level", ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    def test_valid_log_levels(self, valid_config, level):
        valid_config["log_level"] = level

        is_valid, error = validate_config(valid_config)

        assert is_valid is True


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_yaml(self, temp_config_dir):
        """Loads default.yaml from config directory."""
        config_path = str(temp_config_dir / "config.yaml")

        config = load_config(config_path)

        assert config["tailer"]["prefix"] == "sinks.file"
        assert config["tailer"]["poll_interval"] == 5.0

    def test_merges_local_overrides(self, temp_config_dir):
        """Local config.yaml overrides default.yaml."""
        (temp_config_dir / "config.yaml").write_text("""
tailer:
  poll_interval: 1.0
log_level: DEBUG
""")

        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["tailer"]["poll_interval"] == 1.0
        assert config["tailer"]["prefix"] == "sinks.file"
        assert config["log_level"] == "DEBUG"

    def test_explicit_config_applied_last(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("tailer:\n  poll_interval: 1.0\n")
        explicit = temp_config_dir / "ci.yaml"
        explicit.write_text("tailer:\n  poll_interval: 0.5\n  prefix: sinks.gc\n")

        config = load_config(str(explicit))

        assert config["tailer"]["poll_interval"] == 0.5
        assert config["tailer"]["prefix"] == "sinks.gc"

    def test_malformed_yaml_exits(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("tailer: [broken\n")

        with pytest.raises(SystemExit):
            load_config(str(temp_config_dir / "config.yaml"))

    def test_shipped_defaults_are_valid(self):
        """config/default.yaml in the repo passes validation."""
        repo_config = os.path.join(os.path.dirname(__file__), "..", "config", "config.yaml")

        config = load_config(repo_config)
        is_valid, error = validate_config(config)

        assert is_valid is True, error
