"""
Command processor.

The processor is the dispatch entry point: it looks up the handler bound
to a command's type, builds it through the registry's resolver and invokes
it. There is exactly one handler per command and no middleware.

Two submission styles are offered:

- ``send`` resolves the handler synchronously, so a missing or unbuildable
  handler is reported to the caller immediately. An ``async`` handler is
  scheduled on the running event loop and the task is returned without
  waiting for it. Faults raised by such a background handler are logged at
  error level and stay available on the returned task. Without a running
  loop the handler is run to completion before ``send`` returns.
- ``send_and_await`` waits until the handler has finished, so results
  written onto the command are visible and every fault propagates. Prefer it
  whenever the caller needs the result.

Dispatch and timing records are emitted at debug level only. The single
error-level record is the one for a failed background handler, and it is
written in addition to keeping the fault on the task. No error is
suppressed: every lookup, resolution and handler fault still reaches the
caller or the returned task.
"""
import asyncio
import inspect
import time
from functools import partial
from typing import Any, Awaitable, List, Optional, Set

from command_processor.application.interfaces.command_handler import CommandHandler
from command_processor.config.schemas.processor_schema import ProcessorConfig
from command_processor.domain.base.command import Command
from command_processor.infrastructure.logging.logger import get_logger
from command_processor.infrastructure.registry.command_registry import CommandRegistry, get_registry

logger = get_logger(__name__)


async def _wait_for(awaitable: Awaitable[Any]) -> None:
    await awaitable


class CommandProcessor:
    """Submits commands to the handler registered for their type."""

    def __init__(self, registry: Optional[CommandRegistry] = None,
                 config: Optional[ProcessorConfig] = None):
        """
        Initialize the processor.

        Args:
            registry: Registry to dispatch through. When omitted the
                process-wide registry is looked up on every submission.
            config: Processor configuration
        """
        self._registry = registry
        self._config = config or ProcessorConfig()
        self._pending: Set[asyncio.Future] = set()

    @property
    def registry(self) -> CommandRegistry:
        """Registry used for handler lookup."""
        return self._registry if self._registry is not None else get_registry()

    def _resolve(self, command: Command) -> CommandHandler:
        if command is None:
            raise ValueError("Command cannot be None")
        return self.registry.resolve_handler(type(command))

    def send(self, command: Command) -> Optional[asyncio.Future]:
        """
        Submit a command without waiting for an asynchronous handler.

        Args:
            command: Command to handle

        Returns:
            The scheduled task when an async handler was started on a running
            event loop, otherwise None (the handler has already finished).

        Raises:
            HandlerNotFoundError: If no handler is registered for the command type
            HandlerResolutionError: If the handler cannot be built
            Exception: Faults of handlers that ran to completion inside ``send``
        """
        handler = self._resolve(command)
        command_type = type(command).__name__
        logger.debug(f"Sending command: {command_type}")

        result = handler.handle(command)
        if not inspect.isawaitable(result):
            return None

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_wait_for(result))
            return None

        task = asyncio.ensure_future(result)
        self._pending.add(task)
        task.add_done_callback(partial(self._on_background_done, command_type))
        return task

    def _on_background_done(self, command_type: str, task: asyncio.Future) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.debug(f"Background handler for {command_type} was cancelled")
            return
        if not self._config.log_background_faults:
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Background handler for {command_type} failed: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )

    async def send_and_await(self, command: Command) -> None:
        """
        Submit a command and wait until its handler has completed.

        Args:
            command: Command to handle

        Raises:
            HandlerNotFoundError: If no handler is registered for the command type
            HandlerResolutionError: If the handler cannot be built
            Exception: Any fault raised by the handler
        """
        handler = self._resolve(command)
        command_type = type(command).__name__
        logger.debug(f"Executing command: {command_type}")

        start_time = time.time()
        try:
            result = handler.handle(command)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.debug(f"Command {command_type} failed after {time.time() - start_time:.3f}s: {e}")
            raise
        logger.debug(f"Command {command_type} completed in {time.time() - start_time:.3f}s")

    def execute(self, command: Command) -> None:
        """
        Submit a command from synchronous code and block until it is handled.

        Must not be called while an event loop is running in this thread.
        """
        asyncio.run(self.send_and_await(command))

    def pending_tasks(self) -> List[asyncio.Future]:
        """Background handler tasks that have not finished yet."""
        return list(self._pending)

    async def wait_for_pending(self) -> None:
        """Wait for all background handler tasks started by ``send``."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
