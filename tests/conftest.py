"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def metrics_file(tmp_path):
    """Path of an empty metrics output file."""
    path = tmp_path / "metrics.out"
    path.write_text("")
    return path


@pytest.fixture
def sinks_config(tmp_path):
    """Create a metrics-sinks.yaml pointing the file sink at tmp_path."""
    config_dir = tmp_path / "sinkconf"
    config_dir.mkdir()

    sinks_yaml = config_dir / "metrics-sinks.yaml"
    sinks_yaml.write_text(f"""
sinks:
  file:
    class: FileSink
    filename: "{(tmp_path / 'metrics.out').as_posix()}"
  broken:
    class: FileSink
sinks.flat.filename: "{(tmp_path / 'flat.out').as_posix()}"
""")

    return sinks_yaml


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
tailer:
  prefix: "sinks.file"
  filename: null
  poll_interval: 5.0
  buffer_size: 4
  restart_sequence_on_truncate: false

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "tailer": {
            "prefix": "sinks.file",
            "filename": None,
            "poll_interval": 5.0,
            "buffer_size": 4,
            "restart_sequence_on_truncate": False,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
