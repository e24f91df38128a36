#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import yaml

from .exit_codes import ConfigError

logger = logging.getLogger("commitlog")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_dir() -> Path:
    return Path.home() / '.commitlog'


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. COMMITLOG_CONFIG environment variable
    2. ~/.commitlog/ directory
    """
    if 'COMMITLOG_CONFIG' in os.environ:
        path = Path(os.environ['COMMITLOG_CONFIG'])
        if path.exists():
            return path

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    suffix = config_path.suffix.lower()
    try:
        if suffix == '.toml':
            with open(config_path, 'rb') as f:
                return tomllib.load(f)
        if suffix in ('.yaml', '.yml'):
            with open(config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        with open(config_path, 'r') as f:
            return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e


def load_config() -> Dict[str, Any]:
    """Load configuration from file.

    Defaults, merged with the config file, then environment overrides.

    Raises:
        ConfigError: If the config file exists but cannot be parsed
    """
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        file_config = _read_config_file(config_path)
        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        config = merge_configs(config, file_config)
        logger.debug(f"Loaded config from {config_path}")

    return apply_env_overrides(config)


def save_config(config: Dict[str, Any], config_path: Optional[Path] = None) -> Path:
    """Save configuration to file.

    Returns:
        The path written

    Raises:
        ConfigError: For a TOML target (tomllib is read-only)
    """
    config_path = Path(config_path) if config_path else get_config_path()
    suffix = config_path.suffix.lower()

    if suffix == '.toml':
        raise ConfigError(f"Cannot write TOML config {config_path}; use .json or .yaml")

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        if suffix in ('.yaml', '.yml'):
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "git": {
            "executable": "git",
            "timeout_seconds": 0,  # 0 = no timeout
            "max_concurrent_diffs": 0  # 0 = unbounded
        },
        "log": {
            "default_end_ref": "HEAD",
            "include": [],
            "include_diff": False
        },
        "output": {
            "pretty": False
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        }
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: COMMITLOG_SECTION_KEY
    For example: COMMITLOG_GIT_EXECUTABLE=/usr/local/bin/git
    """
    env_prefix = "COMMITLOG_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == 'COMMITLOG_CONFIG':
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if not matched_key:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                # Path conflict: env var is longer than the config path
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def configure_logging(config: Dict[str, Any], level: Optional[str] = None) -> None:
    """Send commitlog's log records to stderr.

    Args:
        config: Loaded configuration
        level: Overrides the configured level (e.g. from --verbose)
    """
    logging_config = config.get('logging', {})
    level = (level or logging_config.get('level', 'WARNING')).upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(logging_config.get('format', '%(levelname)s: %(message)s')))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
