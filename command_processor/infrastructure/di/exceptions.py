"""Dependency injection errors."""
from typing import Any, List, Optional, Type

from command_processor.domain.base.exceptions import CommandProcessorError


def _name(cls: Any) -> str:
    return cls.__name__ if hasattr(cls, "__name__") else str(cls)


class DependencyResolutionError(CommandProcessorError):
    """Base class for failures while building an object graph."""
    def __init__(
        self,
        dependency_type: Any,
        message: str,
        parent_type: Optional[Type] = None,
        parameter_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        if parent_type is not None:
            message = f"{message} (required by {_name(parent_type)}"
            message += f" parameter '{parameter_name}')" if parameter_name else ")"
        super().__init__(message, {"dependency_type": dependency_type})
        self.dependency_type = dependency_type
        self.parent_type = parent_type
        self.parameter_name = parameter_name
        self.cause = cause


class UnregisteredDependencyError(DependencyResolutionError):
    """Raised when a type is neither registered nor constructible."""
    def __init__(self, dependency_type: Any, parent_type: Optional[Type] = None,
                 parameter_name: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(
            dependency_type,
            f"No registration found for {_name(dependency_type)}",
            parent_type,
            parameter_name,
            cause,
        )


class UntypedParameterError(DependencyResolutionError):
    """Raised when a constructor parameter has no annotation and no default."""
    def __init__(self, dependency_type: Type, parameter_name: str):
        super().__init__(
            dependency_type,
            f"Cannot resolve untyped parameter '{parameter_name}' of {_name(dependency_type)}",
        )
        self.parameter_name = parameter_name


class CircularDependencyError(DependencyResolutionError):
    """Raised when a type depends on itself, directly or transitively."""
    def __init__(self, chain: List[Type]):
        super().__init__(
            chain[-1],
            "Circular dependency detected: " + " -> ".join(_name(c) for c in chain),
        )
        self.chain = chain


class InstantiationError(DependencyResolutionError):
    """Raised when a constructor fails with resolved dependencies."""
    def __init__(self, dependency_type: Type, message: str, cause: Optional[BaseException] = None):
        super().__init__(dependency_type, message, cause=cause)


class FactoryError(DependencyResolutionError):
    """Raised when a registered factory function fails."""
    def __init__(self, dependency_type: Type, message: str, cause: Optional[BaseException] = None):
        super().__init__(dependency_type, message, cause=cause)
