"""Command to handler binding table."""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from command_processor.application.decorators import get_handled_command_type
from command_processor.application.interfaces.command_handler import CommandHandler
from command_processor.config.schemas.registry_schema import RegistrationPolicy, RegistryConfig
from command_processor.domain.base.command import Command
from command_processor.domain.base.exceptions import (
    DuplicateRegistrationError,
    HandlerNotFoundError,
    HandlerResolutionError,
    InvalidRegistrationError,
    RegistryNotInitializedError,
)
from command_processor.domain.base.ports import ObjectResolverPort
from command_processor.infrastructure.logging.logger import get_logger

TCommand = TypeVar("TCommand", bound=Command)
HandlerFactory = Callable[[ObjectResolverPort], Any]

logger = get_logger(__name__)


@dataclass(frozen=True)
class HandlerBinding:
    """Binding of one command type to a handler type or a handler factory."""
    command_type: Type
    handler_type: Optional[Type] = None
    factory: Optional[HandlerFactory] = None

    @property
    def target(self) -> Any:
        """What the binding produces handlers from."""
        return self.handler_type if self.handler_type is not None else self.factory

    @property
    def target_name(self) -> str:
        target = self.target
        return getattr(target, "__qualname__", repr(target))


class CommandRegistry:
    """
    Maps command types to handler types and builds handler instances.

    Each registry owns its own binding table. Handler instances are built by
    the resolver the registry was created with, so handlers receive their
    constructor dependencies from it. The table is guarded by a lock, which
    makes concurrent registration and resolution safe; the resolver itself is
    called outside the lock.

    Lookup is by exact command type. A subclass of a registered command has
    no handler unless it is registered itself, or unless
    ``RegistryConfig.resolve_base_commands`` is enabled.

    Registrations are logged at debug level only. Errors are always raised
    to the caller, never logged in their place.
    """

    def __init__(self, resolver: ObjectResolverPort, config: Optional[RegistryConfig] = None):
        """
        Initialize the registry.

        Args:
            resolver: Object resolver used to instantiate handlers
            config: Registry configuration (re-registration policy, base command lookup)
        """
        self._resolver = resolver
        self._config = config or RegistryConfig()
        self._bindings: Dict[Type, HandlerBinding] = {}
        self._lock = threading.RLock()

    @property
    def resolver(self) -> ObjectResolverPort:
        """Object resolver used to instantiate handlers."""
        return self._resolver

    @property
    def registration_policy(self) -> RegistrationPolicy:
        return self._config.registration_policy

    def register(self, command_type: Type[TCommand],
                 handler_type: Type[CommandHandler[TCommand]]) -> None:
        """
        Bind a command type to a handler type.

        Args:
            command_type: Command class
            handler_type: Handler class, built through the resolver on each resolution

        Raises:
            InvalidRegistrationError: If either argument is not a class
            DuplicateRegistrationError: If the command is already bound and the
                policy is ``error``
        """
        self._check_command_type(command_type)
        if not isinstance(handler_type, type):
            raise InvalidRegistrationError(
                f"Handler for {command_type.__name__} must be a class, got {handler_type!r}"
            )
        self._bind(HandlerBinding(command_type, handler_type=handler_type))

    def register_factory(self, command_type: Type[TCommand], factory: HandlerFactory) -> None:
        """
        Bind a command type to a handler factory.

        Args:
            command_type: Command class
            factory: Callable receiving the resolver and returning a handler
        """
        self._check_command_type(command_type)
        if not callable(factory):
            raise InvalidRegistrationError(
                f"Factory for {command_type.__name__} must be callable, got {factory!r}"
            )
        self._bind(HandlerBinding(command_type, factory=factory))

    def register_handler(self, handler_type: Type[CommandHandler]) -> Type:
        """
        Register a handler class marked with @command_handler.

        Returns:
            The command type the handler was bound to
        """
        command_type = get_handled_command_type(handler_type)
        if command_type is None:
            raise InvalidRegistrationError(
                f"{getattr(handler_type, '__name__', handler_type)!s} is not marked with @command_handler"
            )
        self.register(command_type, handler_type)
        return command_type

    @staticmethod
    def _check_command_type(command_type: Any) -> None:
        if not isinstance(command_type, type):
            raise InvalidRegistrationError(f"Command type must be a class, got {command_type!r}")

    def _bind(self, binding: HandlerBinding) -> None:
        command_type = binding.command_type
        with self._lock:
            existing = self._bindings.get(command_type)
            if existing is not None and existing != binding:
                policy = self._config.registration_policy
                if policy == RegistrationPolicy.KEEP_FIRST:
                    logger.debug(
                        f"Ignoring registration of {binding.target_name} for "
                        f"{command_type.__name__}: already bound to {existing.target_name}"
                    )
                    return
                if policy == RegistrationPolicy.ERROR:
                    raise DuplicateRegistrationError(command_type, existing.target, binding.target)
            self._bindings[command_type] = binding
        logger.debug(f"Registered command handler: {command_type.__name__} -> {binding.target_name}")

    def _find_binding(self, command_type: Type) -> Optional[HandlerBinding]:
        with self._lock:
            binding = self._bindings.get(command_type)
            if binding is not None or not isinstance(command_type, type):
                return binding
            if not self._config.resolve_base_commands:
                return None
            # Fall back to the closest registered base command
            for base in command_type.__mro__[1:]:
                if base is object:
                    break
                binding = self._bindings.get(base)
                if binding is not None:
                    return binding
            return None

    def resolve_handler(self, command_type: Type[TCommand]) -> CommandHandler[TCommand]:
        """
        Build the handler bound to a command type.

        Args:
            command_type: Command class to resolve a handler for

        Returns:
            A fresh handler instance (subject to the resolver's lifetime policy)

        Raises:
            HandlerNotFoundError: If no handler is bound to the command type
            HandlerResolutionError: If the resolver cannot build the handler
        """
        binding = self._find_binding(command_type)
        if binding is None:
            raise HandlerNotFoundError(command_type)

        try:
            if binding.handler_type is not None:
                handler = self._resolver.get(binding.handler_type)
            else:
                handler = binding.factory(self._resolver)
        except Exception as e:
            raise HandlerResolutionError(command_type, binding.target, str(e), e) from e

        if not callable(getattr(handler, "handle", None)):
            raise HandlerResolutionError(
                command_type, binding.target, f"{type(handler).__name__} has no callable 'handle'"
            )
        return handler

    def has_handler(self, command_type: Type) -> bool:
        """Check if a handler is bound to the command type."""
        return self._find_binding(command_type) is not None

    def get_handler_type(self, command_type: Type) -> Optional[Type]:
        """Handler type bound to the command type, or None."""
        binding = self._find_binding(command_type)
        return binding.handler_type if binding is not None else None

    def get_registered_commands(self) -> List[Type]:
        """Command types with a binding."""
        with self._lock:
            return list(self._bindings)

    def unregister(self, command_type: Type) -> bool:
        """Remove the binding for a command type."""
        with self._lock:
            if command_type in self._bindings:
                del self._bindings[command_type]
                logger.debug(f"Unregistered command handler for {command_type.__name__}")
                return True
            return False

    def clear(self) -> None:
        """Clear all bindings."""
        with self._lock:
            self._bindings.clear()
        logger.info("Command registry cleared")

    def get_stats(self) -> Dict[str, Any]:
        """Get registry statistics."""
        with self._lock:
            return {
                "command_handlers": len(self._bindings),
                "factory_bindings": sum(1 for b in self._bindings.values() if b.factory is not None),
                "registration_policy": self._config.registration_policy.value,
            }


_registry: Optional[CommandRegistry] = None
_registry_lock = threading.Lock()


def initialize(resolver: ObjectResolverPort, config: Optional[RegistryConfig] = None) -> CommandRegistry:
    """
    Create the process-wide registry bound to ``resolver``.

    Calling it again replaces the process-wide registry. Handles obtained
    earlier keep working against their own binding table.
    """
    global _registry
    registry = CommandRegistry(resolver, config)
    with _registry_lock:
        _registry = registry
    logger.debug("Process-wide command registry initialized")
    return registry


def get_registry() -> CommandRegistry:
    """Return the process-wide registry."""
    with _registry_lock:
        if _registry is None:
            raise RegistryNotInitializedError()
        return _registry


def reset_registry() -> None:
    """Drop the process-wide registry."""
    global _registry
    with _registry_lock:
        _registry = None
