"""Configuration file loading and CLI precedence rules.

Extracted from the entrypoint to keep it slim. The config file supplies
defaults (repositories, mode, HTTP tunables); CLI arguments always win.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from constants import Constants

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The configuration file is missing or invalid."""


@dataclass
class RunConfig:
    """Effective settings for one CLI invocation."""
    repositories: List[str] = field(default_factory=list)
    mode: str = "full"
    units: List[str] = field(default_factory=list)
    log_level: Optional[str] = None


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML/JSON configuration file into a dict.

    Raises:
        ConfigError: the file does not exist, can't be parsed or is not a mapping.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return data


def apply_http_overrides(config: Dict[str, Any]) -> None:
    """Apply the ``http`` section of the config to the Constants tunables."""
    http = config.get("http") or {}
    if not isinstance(http, dict):
        raise ConfigError("'http' must be a mapping")
    try:
        if http.get("timeout") is not None:
            Constants.REQUEST_TIMEOUT = float(http["timeout"])
        if http.get("retries") is not None:
            Constants.HTTP_RETRY_MAX = max(1, int(http["retries"]))
        if http.get("cache_ttl") is not None:
            Constants.HTTP_CACHE_TTL_SEC = int(http["cache_ttl"])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid http setting: {e}") from e


def build_run_config(args) -> RunConfig:
    """Merge the config file named by ``args.CONFIG`` with the CLI arguments."""
    config = load_config_file(getattr(args, "CONFIG", None))
    apply_http_overrides(config)

    repositories = list(getattr(args, "REPOSITORIES", None) or [])
    if not repositories:
        configured = config.get("repositories") or []
        if not isinstance(configured, list):
            raise ConfigError("'repositories' must be a list")
        repositories = [str(r) for r in configured]

    mode = getattr(args, "MODE", None) or config.get("mode") or "full"
    mode = str(mode).lower()
    if mode not in Constants.MODES:
        raise ConfigError(f"Unknown mode '{mode}', expected one of {Constants.MODES}")

    log_level = getattr(args, "LOG_LEVEL", None) or config.get("loglevel")
    logger.debug("Effective configuration: mode=%s repositories=%s", mode, repositories)
    return RunConfig(
        repositories=repositories,
        mode=mode,
        units=list(getattr(args, "UNITS", None) or []),
        log_level=str(log_level).upper() if log_level else None,
    )
