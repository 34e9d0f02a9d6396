"""Base command model."""
import uuid
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Command(BaseModel):
    """
    Base class for all commands.

    Commands carry the intent of the caller and are handed to exactly one
    handler. Unlike response DTOs they are not frozen: handlers write their
    results back onto the command they receive.

    Every result field a handler writes must be declared on the command
    subclass, usually as ``Optional[...] = None``. Assigning an undeclared
    attribute raises pydantic's ``ValueError`` (``object has no field``).
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=False,
    )

    command_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return the command as a snake_case dictionary."""
        return self.model_dump()

    @classmethod
    def command_name(cls) -> str:
        """Qualified name used in log records and error messages."""
        return f"{cls.__module__}.{cls.__qualname__}"
