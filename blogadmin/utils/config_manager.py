"""
Client Configuration Persistence
================================

This module loads and saves the connection settings of the blog admin
client. Only installation preferences are stored (server URL, timeout,
worker count, moderation defaults); the session token and any loaded data
are never written to disk.

Key Responsibilities:
---------------------
- File-System Persistence: JSON file in the user's home directory
  (``~/.blogadmin_config.json``).
- Environment Overrides: ``BLOGADMIN_API_URL`` and ``BLOGADMIN_TIMEOUT``
  win over the file, so a deployment can point at another backend without
  editing it.
- Security Logging: saved and loaded values are logged through
  ``log_config``, which masks sensitive fields.

Author: Blog Admin Project
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from blogadmin.core import config
from blogadmin.utils.logger import log_config, setup_logging

CONFIG_PATH = Path.home() / ".blogadmin_config.json"

ENV_API_URL = "BLOGADMIN_API_URL"
ENV_TIMEOUT = "BLOGADMIN_TIMEOUT"


@dataclass
class ClientConfig:
    """
    Connection settings for the admin client.

    Attributes:
        base_url: API root including the ``/api`` prefix
        timeout: Connect/read timeout in seconds
        max_workers: Size of the background worker pool
        default_ban_reason: Reason sent when the operator gives none
        default_ban_duration_hours: Ban length used when none is given
        log_level: Console log level name (e.g. "INFO")
    """
    base_url: str = config.DEFAULT_BASE_URL
    timeout: float = config.NETWORK_TIMEOUT_SECONDS
    max_workers: int = config.MAX_WORKERS
    default_ban_reason: str = config.DEFAULT_BAN_REASON
    default_ban_duration_hours: int = config.DEFAULT_BAN_DURATION_HOURS
    log_level: str = "INFO"

    @property
    def console_level(self) -> int:
        """Numeric level for ``log_level``; unknown names fall back to INFO."""
        level = logging.getLevelName(str(self.log_level).upper())
        return level if isinstance(level, int) else logging.INFO


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """
    Build a ClientConfig from the JSON file and the environment.

    Unknown keys in the file are ignored; a corrupted file is logged and the
    defaults are used.

    Args:
        path: Config file location (defaults to ``CONFIG_PATH``)
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path is not None else CONFIG_PATH
    client_config = ClientConfig()

    if path.exists():
        try:
            logger.info(f"Loading configuration from {path}")
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            log_config("Loaded Configuration", data, logger)

            known = {f.name for f in fields(ClientConfig)}
            for key, value in data.items():
                if key in known:
                    setattr(client_config, key, value)
                else:
                    logger.debug(f"Ignoring unknown configuration key: {key}")
        except ValueError as e:
            logger.error(f"Configuration file is corrupted: {e}", exc_info=True)
        except OSError as e:
            logger.error(f"Failed to read configuration: {e}", exc_info=True)
    else:
        logger.info(f"No existing configuration file found at {path}")

    env_url = os.environ.get(ENV_API_URL)
    if env_url:
        client_config.base_url = env_url
        logger.debug(f"Base URL overridden from {ENV_API_URL}")

    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            client_config.timeout = float(env_timeout)
        except ValueError:
            logger.warning(f"Ignoring invalid {ENV_TIMEOUT} value: {env_timeout!r}")

    return client_config


def save_config(client_config: ClientConfig, path: Optional[Path] = None):
    """
    Write the configuration as pretty-printed JSON.

    Args:
        client_config: Settings to persist
        path: Config file location (defaults to ``CONFIG_PATH``)
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path is not None else CONFIG_PATH

    data = asdict(client_config)
    log_config("Saving Configuration", data, logger)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Configuration saved successfully to {path}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}", exc_info=True)


def init_logging(client_config: ClientConfig, log_dir: Optional[Path] = None) -> Path:
    """
    Set up application logging with the configured console level.

    Args:
        client_config: Settings whose ``log_level`` drives the console handler
        log_dir: Directory for the log file (defaults to ``<project>/logs``)

    Returns:
        Path of the log file
    """
    return setup_logging(console_level=client_config.console_level, log_dir=log_dir)
