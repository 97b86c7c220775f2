"""Configuration management for drivegate.

Handles loading and saving YAML configuration from ~/.config/drivegate/,
with environment variable overrides applied on top.
"""

import os
import copy
import yaml
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    env_path = os.getenv("DRIVEGATE_CONFIG_DIR")
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "drivegate"


def get_config_file_path() -> Path:
    """
    Get the path to the config file, respecting the DRIVEGATE_CONFIG_FILE env var.
    """
    env_path = os.getenv("DRIVEGATE_CONFIG_FILE")
    if env_path:
        return Path(env_path)
    return get_config_dir() / "config.yaml"


DEFAULT_CONFIG = {
    "auth": {
        "client_id": None,
        "client_secret": None,
        "redirect_uri": None,
        "refresh_token": None,
        "token_file": None,
    },
    "storage": {
        "image_dir": "img",
        "upload_dir": "uploads",
    },
    "retry": {
        "max_attempts": 3,
        "base_delay": 0.5,
        "max_delay": 8.0,
    },
    "server": {
        "host": "127.0.0.1",
        "port": 3000,
    },
}

# Environment variable -> (dot-separated key, converter)
ENV_OVERRIDES = {
    "DRIVEGATE_CLIENT_ID": ("auth.client_id", str),
    "DRIVEGATE_CLIENT_SECRET": ("auth.client_secret", str),
    "DRIVEGATE_REDIRECT_URI": ("auth.redirect_uri", str),
    "DRIVEGATE_REFRESH_TOKEN": ("auth.refresh_token", str),
    "DRIVEGATE_TOKEN_FILE": ("auth.token_file", str),
    "DRIVEGATE_IMAGE_DIR": ("storage.image_dir", str),
    "DRIVEGATE_UPLOAD_DIR": ("storage.upload_dir", str),
    "DRIVEGATE_HOST": ("server.host", str),
    "DRIVEGATE_PORT": ("server.port", int),
}


def _defaults() -> dict:
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(apply_env: bool = True) -> dict:
    """Load the drivegate configuration from the config file.

    Args:
        apply_env: If True, DRIVEGATE_* environment variables override file values.
    """
    config_file = get_config_file_path()
    config = _defaults()

    if not config_file.exists():
        logger.debug(f"Config file not found at {config_file}, using default config.")
    else:
        try:
            with open(config_file, 'r') as f:
                loaded = yaml.safe_load(f)
            if loaded is not None:
                config = _deep_merge(config, loaded)
        except yaml.YAMLError as e:
            logger.error(f"Error loading config file {config_file}: {e}")
            config = _defaults()

    if apply_env:
        _apply_env_overrides(config)
    return config


def save_config(config_data: dict):
    """Save the drivegate configuration to the config file."""
    config_file = get_config_file_path()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(config_file, 'w') as f:
            yaml.safe_dump(config_data, f, default_flow_style=False)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Error saving config file {config_file}: {e}")
        raise


def get_config_value(key: str, default: Any = None, config_data: dict = None) -> Any:
    """Retrieve a configuration value using a dot-separated key."""
    if config_data is None:
        config_data = load_config()
    value = config_data
    for k in key.split('.'):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value


def set_config_value(key: str, value: Any):
    """Set a configuration value using a dot-separated key and save.

    Environment overrides are not written back to the file.
    """
    config_data = load_config(apply_env=False)
    _set_nested(config_data, key, value)
    save_config(config_data)


def _set_nested(config_data: dict, key: str, value: Any):
    keys = key.split('.')
    current_level = config_data
    for i, k in enumerate(keys):
        if i == len(keys) - 1:
            current_level[k] = value
        else:
            if k not in current_level or not isinstance(current_level[k], dict):
                current_level[k] = {}
            current_level = current_level[k]


def _apply_env_overrides(config_data: dict):
    for env_name, (key, convert) in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        try:
            _set_nested(config_data, key, convert(raw))
        except ValueError:
            logger.warning(f"Ignoring {env_name}={raw!r}: not a valid value for {key}")


def _deep_merge(base: dict, new: dict) -> dict:
    """Recursively merge dictionary `new` into `base`.

    An empty section in the file (`auth:` with nothing under it) keeps the defaults.
    """
    for k, v in new.items():
        if v is None and isinstance(base.get(k), dict):
            continue
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            base[k] = _deep_merge(base[k], v)
        else:
            base[k] = v
    return base
