"""Command registry configuration schema."""
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class RegistrationPolicy(str, Enum):
    """What happens when a command type is registered a second time."""
    REPLACE = "replace"
    KEEP_FIRST = "keep_first"
    ERROR = "error"


class RegistryConfig(BaseModel):
    """Command registry configuration."""
    model_config = ConfigDict(extra="forbid")

    registration_policy: RegistrationPolicy = Field(
        RegistrationPolicy.REPLACE,
        description="Re-registration policy (replace, keep_first, error)",
    )
    discovery_packages: List[str] = Field(
        default_factory=list,
        description="Packages scanned for @command_handler classes at bootstrap",
    )
    resolve_base_commands: bool = Field(
        False,
        description="Resolve an unbound command through the binding of its closest registered base command",
    )
