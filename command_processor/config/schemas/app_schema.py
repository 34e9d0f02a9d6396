"""Main application configuration schema."""
from pydantic import BaseModel, Field

from .logging_schema import LoggingConfig
from .processor_schema import ProcessorConfig
from .registry_schema import RegistryConfig


class AppConfig(BaseModel):
    """Application configuration."""

    logging: LoggingConfig = Field(default_factory=lambda: LoggingConfig())
    registry: RegistryConfig = Field(default_factory=lambda: RegistryConfig())
    processor: ProcessorConfig = Field(default_factory=lambda: ProcessorConfig())
