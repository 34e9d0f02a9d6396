"""Command processor port."""
import asyncio
from typing import Optional, Protocol

from command_processor.domain.base.command import Command


class CommandProcessorPort(Protocol):
    """Protocol for submitting commands to their handler."""

    def send(self, command: Command) -> Optional[asyncio.Task]:
        """Submit a command without waiting for an asynchronous handler."""
        ...

    async def send_and_await(self, command: Command) -> None:
        """Submit a command and wait until its handler has completed."""
        ...
