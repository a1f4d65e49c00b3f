"""
Configuration for gmail-filters.

Loads configuration from a YAML file and environment variables with
precedence: CLI flags > GMAIL_FILTERS_* env > config file > defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Default config file locations (checked in order)
DEFAULT_CONFIG_PATHS = [
    Path("~/.config/gmail_filters/config.yaml").expanduser(),
    Path("~/.gmail_filters.yaml").expanduser(),
    Path("gmail_filters.yaml"),
]

DEFAULT_SCOPES = [
    "https://www.googleapis.com/auth/gmail.settings.basic",
    "https://www.googleapis.com/auth/gmail.labels",
]


@dataclass
class GmailConfig:
    """Gmail API settings."""
    user_id: str = "me"
    scopes: List[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))
    credentials_file: str = "~/.config/gmail_filters/credentials.json"
    token_file: str = "~/.config/gmail_filters/token.json"


@dataclass
class Config:
    """Main configuration container."""
    log_level: str = "INFO"
    dry_run: bool = False
    filters_file: str = "filters.yaml"

    gmail: GmailConfig = field(default_factory=GmailConfig)


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load configuration from a YAML file."""
    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: top level is not a mapping")
        return {}

    logger.info(f"Loaded config from {path}")
    return data


def find_config_file() -> Optional[Path]:
    """Find the first existing config file."""
    # Check environment variable first
    env_path = os.getenv("GMAIL_FILTERS_CONFIG")
    if env_path:
        path = Path(env_path).expanduser()
        if path.exists():
            return path

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return path

    return None


def load_config(
    config_path: Optional[Path] = None,
    env_prefix: str = "GMAIL_FILTERS_",
) -> Config:
    """
    Load configuration with proper precedence.

    Priority (highest to lowest):
    1. Environment variables (GMAIL_FILTERS_*)
    2. Config file
    3. Defaults

    Args:
        config_path: Explicit config file path (optional)
        env_prefix: Prefix for environment variables

    Returns:
        Populated Config object
    """
    config = Config()

    if config_path is None:
        config_path = find_config_file()

    if config_path:
        _apply_yaml_config(config, load_yaml_config(Path(config_path).expanduser()))

    _apply_env_config(config, env_prefix)

    return config


# (env suffix, section, attribute); section None means the top-level Config.
_ENV_OVERRIDES = [
    ("LOG_LEVEL", None, "log_level"),
    ("FILE", None, "filters_file"),
    ("USER_ID", "gmail", "user_id"),
    ("CREDENTIALS_FILE", "gmail", "credentials_file"),
    ("TOKEN_FILE", "gmail", "token_file"),
]

_TRUE_VALUES = ("1", "true", "yes")


def _apply_yaml_config(config: Config, data: Dict[str, Any]) -> None:
    """Copy known keys from a parsed config file onto config."""
    for key in ("log_level", "filters_file"):
        if key in data:
            setattr(config, key, str(data[key]))
    if "dry_run" in data:
        config.dry_run = bool(data["dry_run"])

    gmail = data.get("gmail")
    if not isinstance(gmail, dict):
        return
    for key in ("user_id", "credentials_file", "token_file"):
        if key in gmail:
            setattr(config.gmail, key, str(gmail[key]))
    if "scopes" in gmail:
        config.gmail.scopes = [str(scope) for scope in gmail["scopes"]]


def _apply_env_config(config: Config, prefix: str) -> None:
    """Override config from {prefix}* environment variables that are set."""
    for suffix, section, attr in _ENV_OVERRIDES:
        value = os.getenv(prefix + suffix)
        if value:
            setattr(getattr(config, section) if section else config, attr, value)

    dry_run = os.getenv(prefix + "DRY_RUN")
    if dry_run:
        config.dry_run = dry_run.lower() in _TRUE_VALUES


def create_sample_config(path: Optional[Path] = None) -> str:
    """
    Generate a sample configuration file.

    Args:
        path: Optional path to write the config file

    Returns:
        Sample YAML configuration string
    """
    sample = '''# gmail-filters configuration
# Place this file at ~/.config/gmail_filters/config.yaml

# Logging level (DEBUG, INFO, WARNING, ERROR)
log_level: INFO

# Print what would change without calling the Gmail API for writes
dry_run: false

# Filters file used by apply/export/sync when --file is not given
filters_file: filters.yaml

gmail:
  user_id: me
  credentials_file: ~/.config/gmail_filters/credentials.json
  token_file: ~/.config/gmail_filters/token.json
  # scopes:
  #   - "https://www.googleapis.com/auth/gmail.settings.basic"
  #   - "https://www.googleapis.com/auth/gmail.labels"
'''

    if path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(sample)
        logger.info(f"Created sample config at {path}")

    return sample
