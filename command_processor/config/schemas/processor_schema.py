"""Command processor configuration schema."""
from pydantic import BaseModel, ConfigDict, Field


class ProcessorConfig(BaseModel):
    """Command processor configuration."""
    model_config = ConfigDict(extra="forbid")

    log_background_faults: bool = Field(
        True, description="Log faults raised by fire-and-forget handlers"
    )
