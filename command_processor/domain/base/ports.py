"""Ports the dispatch core depends on."""
from typing import Protocol, Type, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ObjectResolverPort(Protocol):
    """
    Object construction capability (a dependency injection container).

    Given a type, returns an instance of it, resolving the instance's own
    constructor dependencies. Failures are raised as-is.
    """

    def get(self, cls: Type[T]) -> T:
        """Return an instance of ``cls``."""
        ...
