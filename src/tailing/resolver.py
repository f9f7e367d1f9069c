"""
Resolve a metrics sink prefix to the path of the file that sink writes.

Sink definitions live in a YAML file (``metrics-sinks.yaml``) found on a
search path. Nested mappings and dotted keys are interchangeable, so both of
these describe the same sink::

    sinks:
      file:
        filename: /tmp/metrics.out

    sinks.file.filename: /tmp/metrics.out

A prefix such as ``sinks.file`` selects the subset of keys below it; the
subset's ``filename`` is the file to tail.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

METRICS_CONFIG_FILENAME = "metrics-sinks.yaml"

# os.pathsep separated directories searched before the defaults.
CONFIG_PATH_ENV = "METRICS_TAIL_CONFIG_PATH"


class ConfigurationError(RuntimeError):
    """The metrics sink configuration is missing, malformed or incomplete."""


def default_search_path() -> List[str]:
    dirs: List[str] = []
    env_value = os.environ.get(CONFIG_PATH_ENV, "")
    dirs.extend(d for d in env_value.split(os.pathsep) if d)
    dirs.append(os.path.join(os.getcwd(), "config"))
    dirs.append(os.getcwd())
    return dirs


def find_config_file(
    filename: str = METRICS_CONFIG_FILENAME,
    search_path: Optional[List[str]] = None,
) -> Optional[str]:
    """
    Look for ``filename`` in each directory of the search path.

    Returns:
        The first matching path, or None if no directory holds the file.
    """
    for directory in (search_path if search_path is not None else default_search_path()):
        candidate = os.path.join(directory, filename)
        if os.path.isfile(candidate):
            return candidate
    return None


def flatten(data: Dict[str, Any], parent: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into a single dict keyed by dotted paths."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            flat.update(flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat


def load_properties(path: str) -> Dict[str, Any]:
    """
    Load a sink configuration file as flat dotted-key properties.

    Raises:
        ConfigurationError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read metrics configuration '{path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed metrics configuration '{path}': {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Metrics configuration '{path}' must be a mapping, got {type(data).__name__}"
        )
    return flatten(data)


def subset(properties: Dict[str, Any], prefix: str) -> Dict[str, Any]:
    """Return the properties below ``prefix`` with the prefix stripped."""
    if not prefix:
        return dict(properties)
    lead = prefix + "."
    return {key[len(lead):]: value for key, value in properties.items() if key.startswith(lead)}


def resolve_metrics_file(
    prefix: str,
    config_path: Optional[str] = None,
    search_path: Optional[List[str]] = None,
) -> str:
    """
    Resolve the file written by the sink configured under ``prefix``.

    Args:
        prefix: Sink prefix within the metrics configuration.
        config_path: Explicit configuration file; skips the search path.
        search_path: Directories to search instead of the defaults.

    Returns:
        The configured filename.

    Raises:
        ConfigurationError: If no configuration is found, it cannot be
            parsed, or the sink has no filename.
    """
    if config_path is None:
        config_path = find_config_file(METRICS_CONFIG_FILENAME, search_path)
        if config_path is None:
            raise ConfigurationError(
                f"Could not find {METRICS_CONFIG_FILENAME} on the configuration search path"
            )
    elif not os.path.isfile(config_path):
        raise ConfigurationError(f"Metrics configuration '{config_path}' does not exist")

    properties = load_properties(config_path)
    sink = subset(properties, prefix)

    logger.debug(f"Metrics configuration {config_path}, prefix '{prefix}'")
    for key, value in sink.items():
        logger.debug(f"'{key}'='{value}'")

    filename = sink.get("filename")
    if not isinstance(filename, str) or not filename:
        raise ConfigurationError(
            f"No filename configured for metrics sink '{prefix}' in {config_path}"
        )
    return filename
