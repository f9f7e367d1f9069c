"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class TailerConfig:
    """Metrics file tailer configuration."""
    prefix: str = ""
    filename: Optional[str] = None
    metrics_config: Optional[str] = None
    poll_interval: float = 5.0
    buffer_size: int = 4
    restart_sequence_on_truncate: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TailerConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            prefix=d.get("prefix", ""),
            filename=d.get("filename"),
            metrics_config=d.get("metrics_config"),
            poll_interval=float(d.get("poll_interval", 5.0)),
            buffer_size=int(d.get("buffer_size", 4)),
            restart_sequence_on_truncate=bool(d.get("restart_sequence_on_truncate", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "prefix": self.prefix,
            "poll_interval": self.poll_interval,
            "buffer_size": self.buffer_size,
            "restart_sequence_on_truncate": self.restart_sequence_on_truncate,
        }
        if self.filename is not None:
            d["filename"] = self.filename
        if self.metrics_config is not None:
            d["metrics_config"] = self.metrics_config
        return d


@dataclass
class Config:
    """
    Root configuration object.

    Matches the structure of config/default.yaml.
    """
    tailer: TailerConfig = field(default_factory=TailerConfig)
    log_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        return cls(
            tailer=TailerConfig.from_dict(d.get("tailer", {}) or {}),
            log_path=d.get("log_path"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "tailer": self.tailer.to_dict(),
            "log_level": self.log_level,
        }
        if self.log_path is not None:
            d["log_path"] = self.log_path
        return d
