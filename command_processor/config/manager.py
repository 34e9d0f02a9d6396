"""Configuration management for the command processor."""
from __future__ import annotations

import json
import logging
import os
import threading
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from command_processor.config.schemas import (
    AppConfig,
    LoggingConfig,
    ProcessorConfig,
    RegistryConfig,
)
from command_processor.domain.base.exceptions import ConfigurationError

T = TypeVar("T")
logger = logging.getLogger(__name__)

ENV_PREFIX = "CMDPROC_"

_SECTION_TYPES: Dict[Type, str] = {
    LoggingConfig: "logging",
    RegistryConfig: "registry",
    ProcessorConfig: "processor",
}


class ConfigurationManager:
    """
    Loads and validates application configuration.

    Sources, lowest precedence first:
    - built-in defaults (the schema defaults)
    - a JSON configuration file, or a dictionary passed in directly
    - environment variables named ``CMDPROC_<SECTION>__<FIELD>``

    Environment values are parsed as JSON when possible, so
    ``CMDPROC_REGISTRY__DISCOVERY_PACKAGES='["app.handlers"]'`` yields a list
    and ``CMDPROC_PROCESSOR__LOG_BACKGROUND_FAULTS=false`` a boolean.
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        config_data: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._config_file = config_file
        self._config_data = config_data
        self._environ = environ if environ is not None else os.environ
        self._lock = threading.RLock()
        self._app_config: Optional[AppConfig] = None

    @property
    def app_config(self) -> AppConfig:
        """Lazy load application configuration."""
        if self._app_config is None:
            with self._lock:
                if self._app_config is None:
                    self._app_config = self._load_app_config()
        return self._app_config

    def _load_app_config(self) -> AppConfig:
        if self._config_data is not None:
            config_data = json.loads(json.dumps(self._config_data))
        elif self._config_file:
            config_data = self._load_from_file(self._config_file)
        else:
            config_data = {}

        config_data = self._apply_environment_overrides(config_data)

        try:
            app_config = AppConfig.model_validate(config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", e.errors()) from e

        logger.debug("Configuration loaded")
        return app_config

    def _load_from_file(self, path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigurationError(f"Configuration file not found: {path}")
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Configuration file {path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {path} must contain a JSON object")
        return data

    def _apply_environment_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        for key, raw_value in self._environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            path = key[len(ENV_PREFIX):].lower().split("__")
            if len(path) != 2 or not all(path):
                logger.debug(f"Ignoring malformed configuration variable {key}")
                continue
            section, field = path
            try:
                value = json.loads(raw_value)
            except json.JSONDecodeError:
                value = raw_value
            config_data.setdefault(section, {})[field] = value
        return config_data

    def get_typed(self, config_type: Type[T]) -> T:
        """Get a typed configuration section."""
        if config_type is AppConfig:
            return self.app_config
        if config_type not in _SECTION_TYPES:
            raise ValueError(f"Unknown configuration type: {config_type.__name__}")
        return getattr(self.app_config, _SECTION_TYPES[config_type])

    def reload(self) -> None:
        """Reload configuration from sources on next access."""
        with self._lock:
            self._app_config = None
