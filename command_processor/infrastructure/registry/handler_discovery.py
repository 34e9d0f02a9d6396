"""
Handler discovery.

Imports every module of a package so that classes marked with
@command_handler can be found, then registers them with a registry.
"""
import importlib
import inspect
import pkgutil
import time
from types import ModuleType
from typing import Iterable, List, Type

from command_processor.application.decorators import is_command_handler
from command_processor.infrastructure.logging.logger import get_logger
from command_processor.infrastructure.registry.command_registry import CommandRegistry

logger = get_logger(__name__)


class HandlerDiscoveryService:
    """Discovers @command_handler classes and registers them with a registry."""

    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    def discover(self, base_package: str) -> int:
        """
        Discover all handlers under a package and register them.

        Args:
            base_package: Dotted name of the package to scan

        Returns:
            Number of handlers registered
        """
        logger.info(f"Starting handler discovery in package: {base_package}")
        start_time = time.time()

        handlers = self.find_handlers(self._import_modules(base_package))
        for handler_class in handlers:
            command_type = self.registry.register_handler(handler_class)
            logger.debug(f"Registered discovered handler: {handler_class.__name__} for {command_type.__name__}")

        logger.info(
            f"Handler discovery complete: {len(handlers)} handlers in {base_package} "
            f"(took {time.time() - start_time:.3f}s)"
        )
        return len(handlers)

    def discover_all(self, packages: Iterable[str]) -> int:
        """Discover handlers in several packages."""
        return sum(self.discover(package) for package in packages)

    @staticmethod
    def _import_modules(base_package: str) -> List[ModuleType]:
        package = importlib.import_module(base_package)
        modules = [package]
        # Plain modules have no __path__ and nothing further to walk
        for module_info in pkgutil.walk_packages(getattr(package, "__path__", []), f"{base_package}."):
            modules.append(importlib.import_module(module_info.name))
            logger.debug(f"Imported module: {module_info.name}")
        return modules

    @staticmethod
    def find_handlers(modules: Iterable[ModuleType]) -> List[Type]:
        """Marked handler classes defined in the given modules, without duplicates."""
        found: List[Type] = []
        for module in modules:
            for _, obj in inspect.getmembers(module, is_command_handler):
                # Skip re-exports; only count the defining module
                if obj.__module__ == module.__name__ and obj not in found:
                    found.append(obj)
        return found
