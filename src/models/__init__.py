"""
Typed models for the metrics tailer application.

Use the adapter methods to convert from the YAML config dicts.
"""

from .config import Config, TailerConfig

__all__ = [
    "Config",
    "TailerConfig",
]
