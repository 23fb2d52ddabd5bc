"""Configuration loading for deployer.

This module reads the YAML file holding the GitHub credentials and the
quiet-mode default. The result is a plain dictionary that is loaded once
at startup and handed explicitly to the sync and client objects.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from typing_extensions import TypedDict

logger = logging.getLogger(__name__)

DEFAULT_OWNER = "Juris-M"
DEFAULT_REPO = "assets"
DEFAULT_CONFIG_PATH = Path("~/.config/deployer/config.yaml")
CONFIG_ENV_VAR = "DEPLOYER_CONFIG"


class DeployerConfig(TypedDict):
    """Runtime configuration.

    Holds the credentials used against GitHub and the fixed owner/repo
    pair whose releases are synchronized.
    """

    access: Optional[str]
    username: Optional[str]
    password: Optional[str]
    quiet: bool
    owner: str
    repo: str
    timeout: Optional[int]


def default_config_path() -> Path:
    """Return the config path from the environment or the per-user default."""
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def default_config() -> DeployerConfig:
    """Build a configuration from defaults and the environment.

    The token is taken from ``GITHUB_TOKEN`` when set.
    """
    return {
        "access": os.getenv("GITHUB_TOKEN"),
        "username": None,
        "password": None,
        "quiet": False,
        "owner": DEFAULT_OWNER,
        "repo": DEFAULT_REPO,
        "timeout": None,
    }


def load_config(config_path: Path) -> DeployerConfig:
    """Load and validate configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Parsed and validated configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML is malformed
        ValueError: If the config structure is invalid

    Example:
        >>> config = load_config(Path("~/.config/deployer/config.yaml").expanduser())
        >>> print(config["repo"])
        assets
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML configuration: {e}") from e

    # An empty file is a valid, all-defaults configuration
    if data is None:
        data = {}

    return validate_config(data)


def validate_config(data: object) -> DeployerConfig:
    """Validate raw configuration data and fill in defaults.

    Args:
        data: Raw configuration data, usually parsed YAML

    Returns:
        Validated configuration

    Raises:
        ValueError: If the configuration structure is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a dictionary")

    config = default_config()

    for field in ("access", "username", "password"):
        value = data.get(field)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"'{field}' must be a string")
        if value is not None:
            config[field] = value

    if ("username" in data) != ("password" in data):
        raise ValueError("'username' and 'password' must be given together")

    quiet = data.get("quiet", False)
    if not isinstance(quiet, bool):
        raise ValueError("'quiet' must be a boolean")
    config["quiet"] = quiet

    for field in ("owner", "repo"):
        value = data.get(field, config[field])
        if not isinstance(value, str) or not value or "/" in value:
            raise ValueError(f"'{field}' must be a non-empty name without '/'")
        config[field] = value

    timeout = data.get("timeout")
    # bool is an int subclass
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0):
        raise ValueError("'timeout' must be a positive integer")
    config["timeout"] = timeout

    if not config["access"] and not config["username"]:
        logger.warning("No GitHub credentials configured, requests are unauthenticated")

    return config
