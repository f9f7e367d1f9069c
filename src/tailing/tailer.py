"""
Background tailer for a metrics sink's output file.

A ``MetricsFileTailer`` polls a growing, append-only text file on its own
thread and keeps the most recent lines in a small ring buffer. Test code can
then wait for "a new metric line appeared" without parsing the file or
caring about the producer's timing:

    tailer = MetricsFileTailer("sinks.file")
    marker = tailer.get_last_update()
    ...  # do something that emits metrics
    while tailer.get_last_update() == marker:
        time.sleep(0.5)
    line = tailer.get_last()
    tailer.close()
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Dict, List, Optional

from models.config import TailerConfig
from tailing.buffer import BUFFER_SIZE, LineRingBuffer
from tailing.resolver import resolve_metrics_file

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0


class MetricsFileTailer:
    """
    Tails one metrics file and exposes its latest lines to any thread.

    Lifecycle:
        1. Create the instance (the polling thread starts unless
           ``autostart=False``)
        2. Read ``get_last_update()`` / ``get_last()`` from any thread
        3. Call ``close()`` to stop polling; safe to call more than once

    Only the polling thread mutates the read offset, the buffer and the
    freshness marker. Readers never block on file I/O, only briefly on the
    buffer lock.
    """

    def __init__(
        self,
        metrics_prefix: str,
        filename: Optional[str] = None,
        *,
        config_path: Optional[str] = None,
        search_path: Optional[List[str]] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        buffer_size: int = BUFFER_SIZE,
        restart_sequence_on_truncate: bool = False,
        log: Optional[logging.Logger] = None,
        autostart: bool = True,
    ):
        """
        Args:
            metrics_prefix: Sink prefix in the metrics configuration.
            filename: File to tail. When omitted it is resolved from the
                prefix; resolution failures raise ConfigurationError.
            config_path: Explicit metrics configuration file.
            search_path: Directories searched for the metrics configuration.
            poll_interval: Seconds between polls.
            buffer_size: Number of recent lines retained.
            restart_sequence_on_truncate: Restart the buffer's write counter
                when the file is truncated instead of continuing the ring phase.
            log: Logger to use instead of the module logger.
            autostart: Start the polling thread immediately.
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval!r}")

        self.metrics_prefix = metrics_prefix
        self.log = log or logger
        if filename is None:
            filename = resolve_metrics_file(
                metrics_prefix, config_path=config_path, search_path=search_path
            )
        self._filename = filename
        self.poll_interval = poll_interval
        self.restart_sequence_on_truncate = restart_sequence_on_truncate

        self._buffer = LineRingBuffer(buffer_size)
        self._read_offset = 0
        self._start_ns = time.monotonic_ns()
        self._last_update = 0

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

        if autostart:
            self.start()

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def read_offset(self) -> int:
        """Byte offset just past the last complete line consumed."""
        return self._read_offset

    @property
    def is_running(self) -> bool:
        """False once close() has been called."""
        return not self._stop_event.is_set()

    def start(self) -> bool:
        """
        Start the polling thread.

        Returns:
            True if a thread was started, False if one is already running.

        Raises:
            RuntimeError: If the tailer has been closed.
        """
        with self._start_lock:
            if self._stop_event.is_set():
                raise RuntimeError("Cannot start a closed tailer")
            if self._thread is not None:
                return False
            self._thread = threading.Thread(
                target=self.run,
                name=f"metrics-tailer-{self.metrics_prefix}",
                daemon=True,
            )
            self._thread.start()
            return True

    def get_last_update(self) -> int:
        """
        Return a marker that changes each time new lines are committed.

        Only equality is meaningful: compare against a previously observed
        value to learn whether get_last() has something newer.
        """
        return self._last_update

    def get_last(self) -> str:
        """Return the last line seen in the file, or "" if there is none."""
        return self._buffer.latest()

    def get_recent(self) -> List[str]:
        """Return the buffered lines, oldest first."""
        return self._buffer.lines()

    def run(self) -> None:
        """Polling loop; runs on the tailer's own thread until close()."""
        self.log.info(
            f"Tailing {self._filename} every {self.poll_interval}s (prefix '{self.metrics_prefix}')"
        )
        while not self._stop_event.wait(self.poll_interval):
            try:
                self.poll_once()
            except Exception:
                self.log.exception(f"Unexpected error processing metrics file {self._filename}")
        self.log.info(f"Stopped tailing {self._filename}")

    def poll_once(self) -> int:
        """
        Run a single polling cycle.

        Returns:
            Number of lines committed to the buffer in this cycle.
        """
        try:
            length = os.path.getsize(self._filename)
        except FileNotFoundError:
            self.log.debug(f"Metrics file {self._filename} does not exist yet")
            return 0
        except OSError as e:
            self.log.warning(f"Error checking metrics file {self._filename}: {e}")
            return 0

        if length < self._read_offset:
            self.log.info(
                f"Metrics file {self._filename} truncated "
                f"({length} < {self._read_offset} bytes), restarting from the beginning"
            )
            self._read_offset = 0
            self._buffer.reset(restart_sequence=self.restart_sequence_on_truncate)

        if length == self._read_offset:
            return 0

        try:
            lines, offset = self._read_complete_lines(self._read_offset)
        except OSError as e:
            self.log.warning(f"Error reading metrics file {self._filename}: {e}")
            return 0

        if lines:
            self._commit(lines)
        self._read_offset = offset
        return len(lines)

    def _read_complete_lines(self, offset: int):
        """Read newline-terminated lines from offset; returns (lines, new_offset)."""
        lines: List[str] = []
        with open(self._filename, "rb") as f:
            f.seek(offset)
            for raw in f:
                # Unterminated tail: leave it for a later cycle.
                if not raw.endswith(b"\n"):
                    break
                offset += len(raw)
                text = raw[:-1]
                if text.endswith(b"\r"):
                    text = text[:-1]
                lines.append(text.decode("utf-8", errors="replace"))
        return lines, offset

    def _commit(self, lines: List[str]) -> None:
        with self._buffer.lock:
            for line in lines:
                self._buffer.append(line)
            marker = time.monotonic_ns() - self._start_ns
            if marker <= self._last_update:
                marker = self._last_update + 1
            self._last_update = marker

    def close(self) -> None:
        """Signal the polling thread to stop. Does not wait for it."""
        if not self._stop_event.is_set():
            self._stop_event.set()
            self.log.debug(f"Close requested for tailer of {self._filename}")

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the polling thread to exit.

        Returns:
            True if no thread is running any more.
        """
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def __enter__(self) -> "MetricsFileTailer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def create_tailer_from_config(config: Dict[str, Any], **overrides: Any) -> MetricsFileTailer:
    """
    Create a tailer from the application config dictionary.

    Args:
        config: Full config; the ``tailer`` section is used.
        **overrides: Constructor keyword arguments taking precedence.

    Returns:
        A MetricsFileTailer (started unless ``autostart=False`` is passed).
    """
    tailer_cfg = TailerConfig.from_dict(config.get("tailer", {}) or {})
    kwargs: Dict[str, Any] = {
        "filename": tailer_cfg.filename,
        "config_path": tailer_cfg.metrics_config,
        "poll_interval": tailer_cfg.poll_interval,
        "buffer_size": tailer_cfg.buffer_size,
        "restart_sequence_on_truncate": tailer_cfg.restart_sequence_on_truncate,
    }
    kwargs.update(overrides)
    return MetricsFileTailer(tailer_cfg.prefix, **kwargs)
