"""
Handler registration decorators.

Marking a handler class records which command type it handles. The mark
does not register the handler anywhere; a registry picks it up through
``CommandRegistry.register_handler`` or handler discovery.
"""
from typing import Any, Optional, Type, TypeVar

from command_processor.application.interfaces.command_handler import CommandHandler
from command_processor.domain.base.command import Command

TCommand = TypeVar("TCommand", bound=Command)
TCommandHandler = TypeVar("TCommandHandler", bound=CommandHandler)


def command_handler(command_type: Type[TCommand]):
    """
    Mark a class as the handler for ``command_type``.

    Usage:
        @command_handler(CreateUserCommand)
        class CreateUserHandler(CommandHandler[CreateUserCommand]):
            ...

    Args:
        command_type: The command type this handler processes

    Returns:
        Decorated handler class
    """
    def decorator(handler_class: Type[TCommandHandler]) -> Type[TCommandHandler]:
        handler_class._command_type = command_type
        handler_class._is_command_handler = True
        return handler_class

    return decorator


def is_command_handler(obj: Any) -> bool:
    """Check whether ``obj`` is a class marked with @command_handler."""
    # vars() so that subclasses of a marked handler are not picked up twice
    return isinstance(obj, type) and vars(obj).get("_is_command_handler", False)


def get_handled_command_type(handler_class: Type) -> Optional[Type[Command]]:
    """Command type recorded by @command_handler, or None."""
    if not is_command_handler(handler_class):
        return None
    return handler_class._command_type
