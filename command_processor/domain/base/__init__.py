"""Domain base package."""

from .command import Command
from .exceptions import (
    CommandProcessorError,
    ConfigurationError,
    DuplicateRegistrationError,
    HandlerNotFoundError,
    HandlerResolutionError,
    InvalidRegistrationError,
    RegistryNotInitializedError,
)
from .ports import ObjectResolverPort

__all__ = [
    "Command",
    "CommandProcessorError",
    "ConfigurationError",
    "DuplicateRegistrationError",
    "HandlerNotFoundError",
    "HandlerResolutionError",
    "InvalidRegistrationError",
    "ObjectResolverPort",
    "RegistryNotInitializedError",
]
