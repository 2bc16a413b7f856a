"""Config loader for YAML configuration files."""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from klarity.config.models import AssistantConfig, LoggingConfig
from klarity.core.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "KLARITY_CONFIG"
LOG_LEVEL_ENV_VAR = "KLARITY_LOG_LEVEL"


class ConfigLoader:
    """Load AssistantConfig from YAML files."""

    @staticmethod
    def load(path: Path | str) -> AssistantConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to klarity.yaml, or a directory containing it

        Returns:
            Parsed AssistantConfig instance

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        config_path = Path(path)
        if config_path.is_dir():
            config_path = config_path / "klarity.yaml"

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                data: dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

        try:
            return AssistantConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e


def load_config(path: Path | str | None = None) -> AssistantConfig:
    """Resolve configuration from an explicit path, the environment or defaults.

    Reads ``.env`` first, so ``KLARITY_CONFIG`` and ``KLARITY_LOG_LEVEL`` may
    be set there.
    """
    load_dotenv()

    path = path or os.environ.get(CONFIG_ENV_VAR)
    if path:
        config = ConfigLoader.load(path)
    else:
        logger.debug("No config file given, using defaults")
        config = AssistantConfig()

    level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if level:
        try:
            logging_config = LoggingConfig.model_validate(
                {**config.logging.model_dump(), "level": level.upper()}
            )
            config = config.model_copy(update={"logging": logging_config})
        except ValidationError as e:
            raise ConfigError(f"Invalid {LOG_LEVEL_ENV_VAR}: {level}") from e
    return config
