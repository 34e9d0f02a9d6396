"""Command registry package."""
from .command_registry import (
    CommandRegistry,
    HandlerBinding,
    get_registry,
    initialize,
    reset_registry,
)
from .handler_discovery import HandlerDiscoveryService

__all__ = [
    'CommandRegistry',
    'HandlerBinding',
    'HandlerDiscoveryService',
    'get_registry',
    'initialize',
    'reset_registry',
]
