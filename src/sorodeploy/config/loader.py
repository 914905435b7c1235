"""Utilities for loading sorodeploy configuration."""
from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import AppConfig

DEFAULT_CONFIG_PATH = Path("config/sorodeploy.yaml")
CONFIG_ENV_VAR = "SORODEPLOY_CONFIG"

logger = logging.getLogger(__name__)


def load_config(config_path: Path | None = None, *, base_dir: Path | None = None) -> AppConfig:
    """Load the configuration file, falling back to built-in defaults.

    An explicit path (argument or ``SORODEPLOY_CONFIG``) must exist. The default
    location, resolved against ``base_dir`` when given, is optional; when it is
    absent the defaults are returned.
    """
    explicit = config_path or (Path(os.environ[CONFIG_ENV_VAR]) if os.environ.get(CONFIG_ENV_VAR) else None)
    path = explicit or (base_dir / DEFAULT_CONFIG_PATH if base_dir is not None else DEFAULT_CONFIG_PATH)
    if not path.exists():
        if explicit is not None:
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)
        logger.debug("No configuration at %s, using defaults", path)
        return AppConfig()

    try:
        payload = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration root in {path} must be a mapping")

    try:
        return AppConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{exc}") from exc
