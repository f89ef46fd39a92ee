"""Configuration management for outlook-cli.

Handles loading and saving YAML configuration from ~/.config/outlook-cli/.
The config file holds the OAuth client credentials, so it and the token
cache are written owner-only.
"""

import os
import copy
import yaml
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DIR_MODE = 0o700
FILE_MODE = 0o600


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    env_path = os.getenv("OUTLOOK_CLI_CONFIG_DIR")
    if env_path:
        return Path(env_path)
    return Path.home() / ".config" / "outlook-cli"


def get_config_file_path() -> Path:
    """
    Get the path to the config file, respecting the OUTLOOK_CLI_CONFIG_FILE env var.
    """
    env_path = os.getenv("OUTLOOK_CLI_CONFIG_FILE")
    if env_path:
        return Path(env_path)
    return get_config_dir() / "config.yaml"


def get_token_cache_path() -> Path:
    """Get the path of the serialized MSAL token cache."""
    return get_config_dir() / "token_cache.json"


DEFAULT_CONFIG = {
    "client": {
        "id": None,
        "secret": None,
        "tenant": "common",
    }
}


def ensure_config_dir() -> Path:
    """Create the config directory (owner-only) if it does not exist."""
    config_dir = get_config_dir()
    if not config_dir.exists():
        config_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(config_dir, DIR_MODE)
    return config_dir


def write_secure(path: Path, content: str):
    """Write ``content`` to ``path`` with mode 0600, truncating any previous file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    with os.fdopen(fd, 'w') as f:
        f.write(content)
    # O_CREAT only applies the mode to new files
    os.chmod(path, FILE_MODE)


def load_config() -> dict:
    """Load the outlook-cli configuration from the config file."""
    config_file = get_config_file_path()
    if not config_file.exists():
        logger.debug(f"Config file not found at {config_file}, using default config.")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
            if config is None:
                return copy.deepcopy(DEFAULT_CONFIG)
            if not isinstance(config, dict):
                logger.error(f"Config file {config_file} is not a mapping, using default config.")
                return copy.deepcopy(DEFAULT_CONFIG)
            return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), config)
    except yaml.YAMLError as e:
        logger.error(f"Error loading config file {config_file}: {e}")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config_data: dict):
    """Save the outlook-cli configuration to the config file."""
    config_file = get_config_file_path()
    if config_file.parent == get_config_dir():
        ensure_config_dir()
    write_secure(config_file, yaml.safe_dump(config_data, default_flow_style=False))
    logger.debug(f"Configuration saved to {config_file}")


def get_config_value(key: str, default: Any = None) -> Any:
    """Retrieve a configuration value using a dot-separated key."""
    config_data = load_config()
    keys = key.split('.')
    value = config_data
    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value


def set_config_value(key: str, value: Any):
    """Set a configuration value using a dot-separated key and save."""
    config_data = load_config()
    keys = key.split('.')
    current_level = config_data
    for i, k in enumerate(keys):
        if i == len(keys) - 1:
            current_level[k] = value
        else:
            if k not in current_level or not isinstance(current_level[k], dict):
                current_level[k] = {}
            current_level = current_level[k]
    save_config(config_data)


def save_client_credentials(client_id: str, client_secret: str = None, tenant: str = "common"):
    """Store the OAuth client registration used by ``outlook login``."""
    config_data = load_config()
    config_data["client"] = {
        "id": client_id,
        "secret": client_secret,
        "tenant": tenant or "common",
    }
    save_config(config_data)


def get_client_settings() -> dict:
    """
    Resolve the OAuth client settings.

    Environment variables OUTLOOK_CLIENT_ID, OUTLOOK_CLIENT_SECRET and
    OUTLOOK_TENANT take precedence over the config file.

    Returns:
        Dict with 'client_id', 'client_secret' and 'tenant'. The id and
        secret may be None when nothing is configured.
    """
    client = load_config().get("client")
    if not isinstance(client, dict):
        client = {}
    return {
        "client_id": os.getenv("OUTLOOK_CLIENT_ID") or client.get("id"),
        "client_secret": os.getenv("OUTLOOK_CLIENT_SECRET") or client.get("secret"),
        "tenant": os.getenv("OUTLOOK_TENANT") or client.get("tenant") or "common",
    }


def _deep_merge(base: dict, new: dict) -> dict:
    """Recursively merge dictionary `new` into `base`."""
    for k, v in new.items():
        if k in base and isinstance(base[k], dict) and isinstance(v, dict):
            base[k] = _deep_merge(base[k], v)
        else:
            base[k] = v
    return base
