#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("vcsorigin")


def setup_logging(config=None):
    """Configure stderr logging from the 'logging' config section."""
    section = (config or get_default_config()).get("logging", {})
    level_name = str(section.get("level", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=section.get("format", "%(levelname)s: %(message)s"),
        handlers=[
            logging.StreamHandler(sys.stderr)  # Keep stdout clean for data
        ],
        force=True
    )


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. VCSORIGIN_CONFIG environment variable
    2. ~/.vcsorigin/ directory
    """
    # Check for environment variable override
    if 'VCSORIGIN_CONFIG' in os.environ:
        path = Path(os.environ['VCSORIGIN_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.vcsorigin'
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def read_config_file(config_path):
    """Read a JSON, TOML or YAML configuration file into a dict."""
    suffix = Path(config_path).suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            file_config = read_config_file(config_path)
            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    # Create directory if it doesn't exist
    config_path.parent.mkdir(parents=True, exist_ok=True)

    if config_path.suffix.lower() == '.toml':
        logger.warning("TOML config is read-only. Saving as JSON instead.")
        config_path = config_path.with_suffix('.json')

    if config_path.suffix.lower() in ['.yaml', '.yml']:
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    else:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "cache_dir": "~/.cache/vcsorigin",  # Git mirrors live here
            "git_timeout_seconds": 0            # 0 = no timeout
        },
        "authoring": {
            "default_author": "vcsorigin <noreply@vcsorigin.invalid>",
            "mode": "pass_thru",                # pass_thru | overwrite | allowed
            "allowed": [],                      # Email globs for 'allowed'
            "strict": False
        },
        "folder": {
            "author": "Folder Origin <noreply@vcsorigin.invalid>",
            "message": "Import of folder snapshot"
        },
        "origins": {},                          # name -> {"type": ..., "url"/"path": ...}
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
    Environment variables follow the pattern: VCSORIGIN_SECTION_KEY
    For example: VCSORIGIN_AUTHORING_STRICT=true
    """
    env_prefix = "VCSORIGIN_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "VCSORIGIN_CONFIG":
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

            # At the end of the env var: this is the key to set
            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                # Env var is longer but the config value is not a section
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config
