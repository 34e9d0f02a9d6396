"""Application interfaces."""

from .command_handler import CommandHandler
from .command_processor import CommandProcessorPort

__all__ = ["CommandHandler", "CommandProcessorPort"]
