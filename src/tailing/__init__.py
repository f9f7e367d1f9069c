"""
Tailing layer: follows a metrics sink's output file on a background thread.

The tailer resolves the file from a sink prefix (or takes a path directly),
polls it for appended lines and keeps the latest few in a ring buffer that
any thread can read.
"""

from .buffer import BUFFER_SIZE, LineRingBuffer
from .resolver import ConfigurationError, resolve_metrics_file
from .tailer import DEFAULT_POLL_INTERVAL, MetricsFileTailer, create_tailer_from_config

__all__ = [
    "BUFFER_SIZE",
    "LineRingBuffer",
    "ConfigurationError",
    "resolve_metrics_file",
    "DEFAULT_POLL_INTERVAL",
    "MetricsFileTailer",
    "create_tailer_from_config",
]
