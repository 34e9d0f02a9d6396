"""Command handler contract."""
from abc import ABC, abstractmethod
from typing import Awaitable, Generic, Optional, TypeVar

from command_processor.domain.base.command import Command

TCommand = TypeVar("TCommand", bound=Command)


class CommandHandler(ABC, Generic[TCommand]):
    """
    Base class for command handlers.

    A handler performs the work for exactly one command type. ``handle`` may
    be declared ``async``; results are written onto the command and failures
    are raised.

    Usage:
        @command_handler(CreateUserCommand)
        class CreateUserHandler(CommandHandler[CreateUserCommand]):
            def __init__(self, users: UserRepository):
                self.users = users

            async def handle(self, command: CreateUserCommand) -> None:
                command.user_id = await self.users.add(command.name)
    """

    @abstractmethod
    def handle(self, command: TCommand) -> Optional[Awaitable[None]]:
        """
        Handle a command.

        Args:
            command: Command to handle
        """
