"""Error taxonomy for command registration and dispatch."""
from typing import Any, Optional


def _type_name(obj: Any) -> str:
    """Readable name for a type (or anything else)."""
    if isinstance(obj, type):
        return f"{obj.__module__}.{obj.__qualname__}"
    return repr(obj)


class CommandProcessorError(Exception):
    """Base exception for all command processor errors."""
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class HandlerNotFoundError(CommandProcessorError):
    """Raised when no handler is registered for a command type."""
    def __init__(self, command_type: Any):
        super().__init__(
            f"Cannot find the registered handler for {_type_name(command_type)}",
            {"command_type": command_type},
        )
        self.command_type = command_type


class HandlerResolutionError(CommandProcessorError):
    """Raised when the resolver fails to build the bound handler."""
    def __init__(self, command_type: Any, handler_type: Any, reason: str,
                 cause: Optional[BaseException] = None):
        super().__init__(
            f"Failed to resolve handler {_type_name(handler_type)} "
            f"for {_type_name(command_type)}: {reason}",
            {"command_type": command_type, "handler_type": handler_type},
        )
        self.command_type = command_type
        self.handler_type = handler_type
        self.cause = cause


class InvalidRegistrationError(CommandProcessorError):
    """Raised when a registration call receives something other than a class."""
    pass


class DuplicateRegistrationError(CommandProcessorError):
    """Raised when a command type is registered twice under the 'error' policy."""
    def __init__(self, command_type: Any, existing: Any, attempted: Any):
        super().__init__(
            f"Command {_type_name(command_type)} is already bound to "
            f"{_type_name(existing)}; refusing to bind {_type_name(attempted)}",
            {"command_type": command_type, "existing": existing, "attempted": attempted},
        )
        self.command_type = command_type


class RegistryNotInitializedError(CommandProcessorError):
    """Raised when the process-wide registry is used before initialize()."""
    def __init__(self):
        super().__init__(
            "Command registry has not been initialized; call initialize(resolver) first"
        )


class ConfigurationError(CommandProcessorError):
    """Raised when configuration cannot be loaded or validated."""
    pass
