"""Configuration schemas package."""

from .app_schema import AppConfig
from .logging_schema import LoggingConfig
from .processor_schema import ProcessorConfig
from .registry_schema import RegistrationPolicy, RegistryConfig

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "ProcessorConfig",
    "RegistrationPolicy",
    "RegistryConfig",
]
