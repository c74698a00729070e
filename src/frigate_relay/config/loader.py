"""
Configuration loading - file discovery, environment fallbacks, validation.

Config files are YAML (JSON files load too, JSON being a YAML subset).
Environment variables fill in values the file leaves out, for backwards
compatibility with .env based deployments.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..utils.constants import (
    ENV_CONFIG_PATH,
    ENV_FRIGATE_API_URL,
    ENV_TELEGRAM_BOT_TOKEN,
    ENV_WEBHOOK_URL,
)
from .schemas import Config, validate_config_pydantic

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMES = ("config.yaml", "config.yml", "config.json")

# config key -> environment variable used when the key is missing
ENV_FALLBACKS = {
    "telegram_bot_token": ENV_TELEGRAM_BOT_TOKEN,
    "frigate_api_url": ENV_FRIGATE_API_URL,
    "webhook_url": ENV_WEBHOOK_URL,
}


class ConfigError(Exception):
    """Raised when configuration cannot be found, parsed or validated."""


def find_config_file(config_path: str | None = None) -> Path:
    """
    Find config file in standard locations.

    Search order:
    1. Specified path (if provided)
    2. $CONFIG_PATH
    3. Current directory (config.yaml, config.yml, config.json)
    4. ~/.config/frigate-relay/config.yaml

    Raises:
        ConfigError: If no config file is found
    """
    explicit = config_path or os.environ.get(ENV_CONFIG_PATH)
    if explicit:
        specified = Path(explicit)
        if specified.exists():
            return specified
        raise ConfigError(f"Specified config file not found: {explicit}")

    search_paths = [Path.cwd() / name for name in DEFAULT_CONFIG_NAMES]
    search_paths.append(Path.home() / ".config" / "frigate-relay" / "config.yaml")

    for path in search_paths:
        if path.exists():
            logger.info(f"Using config: {path}")
            return path

    locations = ", ".join(str(p) for p in search_paths)
    raise ConfigError(
        f"No config file found (searched: {locations}). "
        "Create one based on config.example.yaml"
    )


def apply_env_fallbacks(config: dict, environ: dict[str, str] | None = None) -> dict:
    """
    Fill missing config values from environment variables.

    Values present in the file always win.

    Args:
        config: Raw configuration dictionary
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Configuration with fallbacks applied
    """
    environ = os.environ if environ is None else environ

    for key, env_name in ENV_FALLBACKS.items():
        if config.get(key):
            continue
        value = environ.get(env_name)
        if value:
            logger.info(f"Using {key} from environment: {env_name}")
            config[key] = value

    return config


def parse_config(raw: dict | None, environ: dict[str, str] | None = None) -> Config:
    """
    Apply environment fallbacks and validate a raw config dictionary.

    Raises:
        ConfigError: If validation fails
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")

    raw = apply_env_fallbacks(dict(raw), environ)

    # Required values get a plain message instead of a pydantic dump
    if not raw.get("telegram_bot_token"):
        raise ConfigError("Missing telegram_bot_token in config")
    if not raw.get("frigate_api_url"):
        raise ConfigError("Missing frigate_api_url in config")
    if not raw.get("groups"):
        raise ConfigError("No groups defined in config")

    try:
        return validate_config_pydantic(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration:\n{e}") from e


def load_config(
    config_path: str | None = None, environ: dict[str, str] | None = None
) -> Config:
    """
    Load and validate the configuration file.

    Args:
        config_path: Optional explicit path to the config file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated Config

    Raises:
        ConfigError: If config cannot be found, parsed or validated
    """
    config_file = find_config_file(config_path)

    try:
        with open(config_file, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file {config_file}: {e}") from e

    config = parse_config(raw, environ)
    logger.info(f"Configuration loaded from {config_file}")
    return config
