"""Tests for the command processor."""

import asyncio
import logging
from typing import List, Optional

import pytest

from command_processor.application.interfaces.command_handler import CommandHandler
from command_processor.config.schemas import ProcessorConfig
from command_processor.domain.base.command import Command
from command_processor.domain.base.exceptions import (
    HandlerNotFoundError,
    HandlerResolutionError,
    RegistryNotInitializedError,
)
from command_processor.infrastructure.command_processor import CommandProcessor
from command_processor.infrastructure.di.container import DIContainer
from command_processor.infrastructure.registry.command_registry import (
    CommandRegistry,
    initialize,
)


class EchoCommand(Command):
    message: str
    result: Optional[str] = None


class SlowEchoCommand(EchoCommand):
    pass


class FailingCommand(Command):
    pass


class UnhandledCommand(Command):
    pass


class EchoHandler(CommandHandler[EchoCommand]):
    def handle(self, command: EchoCommand) -> None:
        command.result = command.message


class SlowEchoHandler(CommandHandler[SlowEchoCommand]):
    async def handle(self, command: SlowEchoCommand) -> None:
        await asyncio.sleep(0.01)
        command.result = command.message


class HandlerFault(Exception):
    pass


class FailingHandler(CommandHandler[FailingCommand]):
    async def handle(self, command: FailingCommand) -> None:
        await asyncio.sleep(0)
        raise HandlerFault("handler blew up")


class SyncFailingHandler(CommandHandler[FailingCommand]):
    def handle(self, command: FailingCommand) -> None:
        raise HandlerFault("sync handler blew up")


class Unbuildable:
    def __init__(self, value: int):
        self.value = value


class UnbuildableHandler(CommandHandler[UnhandledCommand]):
    def __init__(self, dependency: Unbuildable):
        self.dependency = dependency

    async def handle(self, command: UnhandledCommand) -> None:
        pass


class TestSendAndAwait:
    """Test awaited dispatch."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = CommandRegistry(DIContainer())
        self.registry.register(EchoCommand, EchoHandler)
        self.registry.register(SlowEchoCommand, SlowEchoHandler)
        self.registry.register(FailingCommand, FailingHandler)
        self.processor = CommandProcessor(self.registry)

    def test_result_visible_after_async_handler(self):
        command = SlowEchoCommand(message="Test")

        asyncio.run(self.processor.send_and_await(command))

        assert command.result == "Test"

    def test_sync_handler(self):
        command = EchoCommand(message="Test")

        asyncio.run(self.processor.send_and_await(command))

        assert command.result == "Test"

    def test_dispatch_logs_at_debug_only(self, caplog):
        with caplog.at_level(logging.DEBUG):
            asyncio.run(self.processor.send_and_await(SlowEchoCommand(message="Test")))
            self.processor.send(EchoCommand(message="Test"))

        assert "Executing command: SlowEchoCommand" in caplog.text
        assert "Sending command: EchoCommand" in caplog.text
        assert all(r.levelno == logging.DEBUG for r in caplog.records)

    def test_handler_fault_propagates(self):
        with pytest.raises(HandlerFault, match="handler blew up"):
            asyncio.run(self.processor.send_and_await(FailingCommand()))

    def test_missing_handler_propagates(self):
        with pytest.raises(HandlerNotFoundError):
            asyncio.run(self.processor.send_and_await(UnhandledCommand()))

    def test_resolution_failure_propagates(self):
        self.registry.register(UnhandledCommand, UnbuildableHandler)

        with pytest.raises(HandlerResolutionError):
            asyncio.run(self.processor.send_and_await(UnhandledCommand()))

    def test_none_command_rejected(self):
        with pytest.raises(ValueError, match="cannot be None"):
            asyncio.run(self.processor.send_and_await(None))

    def test_execute_blocks_until_handled(self):
        command = SlowEchoCommand(message="blocking")

        self.processor.execute(command)

        assert command.result == "blocking"

    def test_execute_propagates_fault(self):
        with pytest.raises(HandlerFault):
            self.processor.execute(FailingCommand())


class TestSend:
    """Test fire-and-forget dispatch."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = CommandRegistry(DIContainer())
        self.registry.register(EchoCommand, EchoHandler)
        self.registry.register(SlowEchoCommand, SlowEchoHandler)
        self.registry.register(FailingCommand, FailingHandler)
        self.processor = CommandProcessor(self.registry)

    def test_sync_handler_runs_inline(self):
        command = EchoCommand(message="Test")

        assert self.processor.send(command) is None
        assert command.result == "Test"

    def test_async_handler_without_running_loop_completes(self):
        command = SlowEchoCommand(message="Test")

        assert self.processor.send(command) is None
        assert command.result == "Test"

    def test_async_handler_inside_loop_returns_task(self):
        command = SlowEchoCommand(message="Test")

        async def scenario():
            task = self.processor.send(command)
            assert isinstance(task, asyncio.Future)
            assert command.result is None
            assert self.processor.pending_tasks() == [task]
            await task
            return task

        asyncio.run(scenario())

        assert command.result == "Test"
        assert self.processor.pending_tasks() == []

    def test_missing_handler_fails_synchronously_inside_loop(self):
        async def scenario():
            with pytest.raises(HandlerNotFoundError):
                self.processor.send(UnhandledCommand())
            assert self.processor.pending_tasks() == []

        asyncio.run(scenario())

    def test_resolution_failure_fails_synchronously_inside_loop(self):
        self.registry.register(UnhandledCommand, UnbuildableHandler)

        async def scenario():
            with pytest.raises(HandlerResolutionError):
                self.processor.send(UnhandledCommand())
            assert self.processor.pending_tasks() == []

        asyncio.run(scenario())

    def test_resolution_failure_fails_synchronously_without_loop(self):
        self.registry.register(UnhandledCommand, UnbuildableHandler)

        with pytest.raises(HandlerResolutionError) as exc_info:
            self.processor.send(UnhandledCommand())
        assert exc_info.value.handler_type is UnbuildableHandler
        assert self.processor.pending_tasks() == []

    def test_sync_handler_fault_propagates(self):
        self.registry.register(FailingCommand, SyncFailingHandler)

        with pytest.raises(HandlerFault):
            self.processor.send(FailingCommand())

    def test_async_fault_without_loop_propagates(self):
        with pytest.raises(HandlerFault):
            self.processor.send(FailingCommand())

    def test_background_fault_is_logged_and_kept_on_task(self, caplog):
        async def scenario():
            task = self.processor.send(FailingCommand())
            await self.processor.wait_for_pending()
            return task

        with caplog.at_level(logging.ERROR):
            task = asyncio.run(scenario())

        assert isinstance(task.exception(), HandlerFault)
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert errors
        assert "Background handler for FailingCommand failed" in caplog.text

    def test_background_fault_logging_can_be_disabled(self, caplog):
        processor = CommandProcessor(self.registry, ProcessorConfig(log_background_faults=False))

        async def scenario():
            task = processor.send(FailingCommand())
            with pytest.raises(HandlerFault):
                await task

        with caplog.at_level(logging.ERROR):
            asyncio.run(scenario())

        assert "Background handler for FailingCommand failed" not in caplog.text

    def test_wait_for_pending_drains_all_tasks(self):
        commands: List[SlowEchoCommand] = [SlowEchoCommand(message=str(i)) for i in range(10)]

        async def scenario():
            for command in commands:
                self.processor.send(command)
            await self.processor.wait_for_pending()

        asyncio.run(scenario())

        assert [c.result for c in commands] == [str(i) for i in range(10)]
        assert self.processor.pending_tasks() == []


class TestProcessWideRegistryDispatch:
    """Test processors created without an explicit registry."""

    def test_uses_initialized_registry(self):
        registry = initialize(DIContainer())
        registry.register(EchoCommand, EchoHandler)
        processor = CommandProcessor()
        command = EchoCommand(message="global")

        processor.send(command)

        assert processor.registry is registry
        assert command.result == "global"

    def test_looks_up_registry_on_each_submission(self):
        processor = CommandProcessor()
        first = initialize(DIContainer())
        first.register(EchoCommand, EchoHandler)
        processor.send(EchoCommand(message="a"))

        initialize(DIContainer())

        with pytest.raises(HandlerNotFoundError):
            processor.send(EchoCommand(message="b"))

    def test_fails_without_registry(self):
        with pytest.raises(RegistryNotInitializedError):
            CommandProcessor().send(EchoCommand(message="nowhere"))
