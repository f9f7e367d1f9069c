"""
Command-line watcher for a metrics sink's output file.

Tails the file configured for a sink prefix (or given directly) and prints
each new latest line as soon as the tailer reports fresh data.

Usage:
    python src/main.py --config config/config.yaml --prefix sinks.file

Arguments:
    --config: Path to configuration file
    --prefix: Sink prefix (overrides tailer.prefix)
    --file: File to tail directly, skipping the sink lookup
    --interval: Poll interval in seconds (overrides tailer.poll_interval)
    --duration: Stop after this many seconds (default: run until Ctrl-C)
"""

import os
import sys
import argparse
import logging
import time
import yaml
from typing import Dict, Any, List, Tuple, Optional

from ops.logging import setup_logging
from tailing import ConfigurationError, create_tailer_from_config


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['tailer', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    tailer = config.get('tailer') or {}
    if not isinstance(tailer, dict):
        return False, "tailer must be a mapping"

    filename = tailer.get('filename')
    if filename is not None and (not isinstance(filename, str) or not filename):
        return False, "tailer.filename must be a non-empty string or null"
    prefix = tailer.get('prefix')
    if filename is None and (not isinstance(prefix, str) or not prefix):
        return False, "tailer.prefix is required when tailer.filename is not set"

    metrics_config = tailer.get('metrics_config')
    if metrics_config is not None and not isinstance(metrics_config, str):
        return False, "tailer.metrics_config must be a string"

    if 'poll_interval' in tailer:
        interval = tailer['poll_interval']
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            return False, "tailer.poll_interval must be a positive number"

    if 'buffer_size' in tailer:
        size = tailer['buffer_size']
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            return False, "tailer.buffer_size must be a positive integer"

    if 'restart_sequence_on_truncate' in tailer:
        if not isinstance(tailer['restart_sequence_on_truncate'], bool):
            return False, "tailer.restart_sequence_on_truncate must be true or false"

    log_path = config.get('log_path')
    if log_path is not None and not isinstance(log_path, str):
        return False, "log_path must be a string"

    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Metrics file tailer')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--prefix', type=str, default=None,
                        help='Metrics sink prefix (overrides tailer.prefix)')
    parser.add_argument('--file', type=str, default=None,
                        help='File to tail directly, skipping the sink lookup')
    parser.add_argument('--interval', type=float, default=None,
                        help='Poll interval in seconds (overrides tailer.poll_interval)')
    parser.add_argument('--duration', type=float, default=None,
                        help='Stop after this many seconds')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function."""
    args = build_arg_parser().parse_args(argv)

    config = load_config(args.config)
    tailer_cfg = config.setdefault('tailer', {}) or {}
    config['tailer'] = tailer_cfg
    if args.prefix is not None:
        tailer_cfg['prefix'] = args.prefix
    if args.file is not None:
        tailer_cfg['filename'] = args.file
    if args.interval is not None:
        tailer_cfg['poll_interval'] = args.interval

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return 1

    setup_logging(config.get('log_path'), config['log_level'])

    try:
        tailer = create_tailer_from_config(config)
    except ConfigurationError as e:
        logging.error(f"Could not resolve metrics file: {e}")
        return 1

    logging.info(f"Watching {tailer.filename}")
    deadline = time.time() + args.duration if args.duration is not None else None
    check_interval = min(tailer.poll_interval / 4, 1.0)
    seen = tailer.get_last_update()
    try:
        while deadline is None or time.time() < deadline:
            marker = tailer.get_last_update()
            if marker != seen:
                seen = marker
                print(tailer.get_last(), flush=True)
            time.sleep(check_interval)
    except KeyboardInterrupt:
        logging.info("Interrupted, shutting down")
    finally:
        tailer.close()
        tailer.join(timeout=tailer.poll_interval)

    return 0


if __name__ == "__main__":
    sys.exit(main())
