"""Configuration package."""

from .schemas import (
    AppConfig,
    LoggingConfig,
    ProcessorConfig,
    RegistrationPolicy,
    RegistryConfig,
)

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "ProcessorConfig",
    "RegistrationPolicy",
    "RegistryConfig",
]
