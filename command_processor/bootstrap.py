"""Application bootstrap - wires logging, resolver, registry and processor."""

from __future__ import annotations

from typing import Optional

from command_processor.config.manager import ConfigurationManager
from command_processor.config.schemas import AppConfig
from command_processor.domain.base.ports import ObjectResolverPort
from command_processor.infrastructure.command_processor import CommandProcessor
from command_processor.infrastructure.di.container import DIContainer
from command_processor.infrastructure.logging.logger import get_logger, setup_logging
from command_processor.infrastructure.registry import command_registry
from command_processor.infrastructure.registry.handler_discovery import HandlerDiscoveryService


def create_processor(
    config: Optional[AppConfig] = None,
    resolver: Optional[ObjectResolverPort] = None,
    configure_logging: bool = True,
) -> CommandProcessor:
    """
    Build a ready-to-use command processor.

    Initializes the process-wide registry with ``resolver`` (a new
    DIContainer when omitted), registers the resolver with itself when it is
    a DIContainer, runs handler discovery over the configured packages and
    returns a processor bound to that registry.

    Args:
        config: Application configuration; loaded from the environment when omitted
        resolver: Object resolver used to build handlers
        configure_logging: Apply the logging configuration

    Returns:
        Configured command processor
    """
    if config is None:
        config = ConfigurationManager().app_config

    if configure_logging:
        setup_logging(config.logging)
    logger = get_logger(__name__)

    if resolver is None:
        resolver = DIContainer()
    if isinstance(resolver, DIContainer) and not resolver.is_registered(DIContainer):
        resolver.register_instance(DIContainer, resolver)

    registry = command_registry.initialize(resolver, config.registry)

    if config.registry.discovery_packages:
        HandlerDiscoveryService(registry).discover_all(config.registry.discovery_packages)

    processor = CommandProcessor(registry, config.processor)
    logger.info(
        f"Command processor ready with {registry.get_stats()['command_handlers']} registered handlers"
    )
    return processor
