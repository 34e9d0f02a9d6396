"""End-to-end command dispatch through the process-wide registry."""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import pytest

from command_processor import (
    Command,
    CommandHandler,
    CommandProcessor,
    DIContainer,
    HandlerNotFoundError,
    command_handler,
    create_processor,
    get_registry,
    initialize,
)
from command_processor.config.schemas import AppConfig, RegistryConfig


class SimpleCommand(Command):
    message: str
    result: Optional[str] = None


class SimpleCommandHandler(CommandHandler[SimpleCommand]):
    async def handle(self, command: SimpleCommand) -> None:
        command.result = command.message


class FormatMessage(ABC):
    @abstractmethod
    def format(self, age: int, sex: str) -> str:
        ...


class MessageFormatter(FormatMessage):
    def format(self, age: int, sex: str) -> str:
        return f"Jane is {age} old {sex}"


class ComplexCommand(Command):
    age: int
    sex: str
    message: Optional[str] = None


class ComplexCommandHandler(CommandHandler[ComplexCommand]):
    def __init__(self, message_formatter: FormatMessage):
        self._message_formatter = message_formatter

    async def handle(self, command: ComplexCommand) -> None:
        command.message = self._message_formatter.format(command.age, command.sex)


@command_handler(SimpleCommand)
class MarkedSimpleCommandHandler(CommandHandler[SimpleCommand]):
    def handle(self, command: SimpleCommand) -> None:
        command.result = command.message[::-1]


class TestCommandDispatch:
    """Dispatch scenarios using initialize() and a processor without an explicit registry."""

    def test_simple_command_without_dependencies(self):
        registry = initialize(DIContainer())
        registry.register(SimpleCommand, SimpleCommandHandler)
        command = SimpleCommand(message="Test")
        processor = CommandProcessor()

        asyncio.run(processor.send_and_await(command))

        assert command.result == "Test"

    def test_simple_command_with_send(self):
        registry = initialize(DIContainer())
        registry.register(SimpleCommand, SimpleCommandHandler)
        command = SimpleCommand(message="Test")

        CommandProcessor().send(command)

        assert command.result == "Test"

    def test_command_with_dependencies(self):
        container = DIContainer()
        container.register_type(FormatMessage, MessageFormatter)
        registry = initialize(container)
        registry.register(ComplexCommand, ComplexCommandHandler)
        command = ComplexCommand(age=10, sex="Female")
        expected = MessageFormatter().format(10, "Female")

        asyncio.run(CommandProcessor().send_and_await(command))

        assert command.message == expected
        assert command.message == "Jane is 10 old Female"

    def test_unregistered_command(self):
        initialize(DIContainer())

        with pytest.raises(HandlerNotFoundError):
            CommandProcessor().send(ComplexCommand(age=1, sex="Male"))


class TestBootstrap:
    """Test create_processor wiring."""

    def test_create_processor_initializes_process_wide_registry(self):
        container = DIContainer()
        container.register_type(FormatMessage, MessageFormatter)

        processor = create_processor(AppConfig(), container, configure_logging=False)
        processor.registry.register(ComplexCommand, ComplexCommandHandler)
        command = ComplexCommand(age=10, sex="Female")
        processor.execute(command)

        assert processor.registry is get_registry()
        assert processor.registry.resolver is container
        assert container.get(DIContainer) is container
        assert command.message == "Jane is 10 old Female"

    def test_create_processor_runs_discovery(self):
        config = AppConfig(registry=RegistryConfig(discovery_packages=[__name__]))

        processor = create_processor(config, configure_logging=False)
        command = SimpleCommand(message="abc")
        processor.send(command)

        assert processor.registry.get_handler_type(SimpleCommand) is MarkedSimpleCommandHandler
        assert command.result == "cba"
