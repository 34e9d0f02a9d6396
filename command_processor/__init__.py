"""Simple Command Processor - Root Package.

In-process command dispatch: callers build a command, submit it to a
processor, and the processor routes it to exactly one registered handler
built through a dependency injection container.

Key Components:
    - domain: commands, resolver port and error taxonomy
    - application: handler contract and @command_handler decorator
    - infrastructure: DI container, command registry, processor, logging
    - config: pydantic configuration schemas and manager

Usage:
    >>> container = DIContainer()
    >>> registry = CommandRegistry(container)
    >>> registry.register(CreateUserCommand, CreateUserHandler)
    >>> processor = CommandProcessor(registry)
    >>> await processor.send_and_await(CreateUserCommand(name="jane"))
"""

from ._version import __version__
from .application.decorators import command_handler
from .application.interfaces import CommandHandler, CommandProcessorPort
from .bootstrap import create_processor
from .domain.base import (
    Command,
    CommandProcessorError,
    ConfigurationError,
    DuplicateRegistrationError,
    HandlerNotFoundError,
    HandlerResolutionError,
    InvalidRegistrationError,
    ObjectResolverPort,
    RegistryNotInitializedError,
)
from .infrastructure.command_processor import CommandProcessor
from .infrastructure.di import DIContainer, DependencyResolutionError
from .infrastructure.registry import (
    CommandRegistry,
    HandlerDiscoveryService,
    get_registry,
    initialize,
    reset_registry,
)

__all__ = [
    "__version__",
    "Command",
    "CommandHandler",
    "CommandProcessor",
    "CommandProcessorError",
    "CommandProcessorPort",
    "CommandRegistry",
    "ConfigurationError",
    "DIContainer",
    "DependencyResolutionError",
    "DuplicateRegistrationError",
    "HandlerDiscoveryService",
    "HandlerNotFoundError",
    "HandlerResolutionError",
    "InvalidRegistrationError",
    "ObjectResolverPort",
    "RegistryNotInitializedError",
    "command_handler",
    "create_processor",
    "get_registry",
    "initialize",
    "reset_registry",
]
