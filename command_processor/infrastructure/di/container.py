"""
Dependency Injection Container implementation.

The container is the object resolver the command registry uses to build
handler instances. It resolves constructor dependencies recursively from
constructor type hints, so handlers only declare what they need.
"""
import inspect
import threading
import time
from contextlib import contextmanager
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
    get_type_hints,
)

from command_processor.infrastructure.di.exceptions import (
    CircularDependencyError,
    DependencyResolutionError,
    FactoryError,
    InstantiationError,
    UnregisteredDependencyError,
    UntypedParameterError,
)
from command_processor.infrastructure.logging.logger import get_logger

T = TypeVar('T')
logger = get_logger(__name__)

_PRIMITIVE_TYPES = {str, int, float, bool, bytes, type(None)}


@contextmanager
def timed_operation(operation_name: str) -> Iterator[None]:
    """Context manager to time and log an operation."""
    start_time = time.time()
    try:
        yield
    finally:
        elapsed_time = time.time() - start_time
        logger.debug(f"{operation_name} completed in {elapsed_time:.4f}s")


def _class_name(cls: Any) -> str:
    return cls.__name__ if hasattr(cls, '__name__') else str(cls)


def _unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Return (inner type, is_optional) for Optional[X] annotations."""
    if get_origin(annotation) is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1 and len(get_args(annotation)) == 2:
            return args[0], True
    return annotation, False


class DIContainer:
    """
    Dependency injection container.

    Lookup order for ``get(cls)``:
    1. pre-registered instances
    2. singletons (built once, lazily)
    3. factories (called on every resolution)
    4. interface to implementation mappings (transient)
    5. direct construction of ``cls`` from its constructor type hints

    Resolution is thread safe; singleton creation happens at most once.
    """

    def __init__(self):
        """Initialize an empty container."""
        self._instances: Dict[Type, Any] = {}
        self._singleton_types: Dict[Type, Union[Type, Callable[..., Any]]] = {}
        self._singleton_instances: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable[..., Any]] = {}
        self._type_mappings: Dict[Type, Type] = {}
        self._lock = threading.RLock()
        # Per-thread stack of the chains that led into running factories
        self._resolution_stack = threading.local()

    def is_registered(self, cls: Type) -> bool:
        """
        Check if a type is registered with the container.

        Args:
            cls: Class type to check

        Returns:
            True if the type is registered, False otherwise
        """
        with self._lock:
            return (
                cls in self._instances or
                cls in self._singleton_types or
                cls in self._singleton_instances or
                cls in self._factories or
                cls in self._type_mappings
            )

    def register_singleton(self, cls: Type[T], instance_or_factory: Any = None) -> None:
        """
        Register a singleton type.

        Args:
            cls: Class type to register
            instance_or_factory: Optional implementation class, pre-created
                instance, or factory function receiving the container
        """
        with self._lock:
            self._forget(cls)
            if instance_or_factory is None:
                self._singleton_types[cls] = cls
                logger.debug(f"Registered singleton type {_class_name(cls)}")
            elif isinstance(instance_or_factory, type) or callable(instance_or_factory):
                self._singleton_types[cls] = instance_or_factory
                logger.debug(f"Registered lazy singleton for {_class_name(cls)}")
            else:
                self._singleton_instances[cls] = instance_or_factory
                logger.debug(f"Registered pre-created singleton for {_class_name(cls)}")

    def register_factory(self, cls: Type[T], factory: Callable[..., T]) -> None:
        """
        Register a factory function for a type.

        Args:
            cls: Class type to register
            factory: Factory function receiving the container
        """
        with self._lock:
            self._forget(cls)
            self._factories[cls] = factory
        logger.debug(f"Registered factory for {_class_name(cls)}")

    def register_instance(self, cls: Type[T], instance: T) -> None:
        """
        Register a specific instance for a type.

        Args:
            cls: Class type to register
            instance: Instance to use
        """
        with self._lock:
            self._forget(cls)
            self._instances[cls] = instance
        logger.debug(f"Registered instance for {_class_name(cls)}")

    def register_type(self, interface_type: Type[T], implementation_type: Type[T],
                      singleton: bool = False) -> None:
        """
        Register an interface to implementation mapping.

        Args:
            interface_type: Type requested by consumers
            implementation_type: Concrete type to construct
            singleton: Build the implementation once and reuse it
        """
        if singleton:
            self.register_singleton(interface_type, implementation_type)
            return
        with self._lock:
            self._forget(interface_type)
            self._type_mappings[interface_type] = implementation_type
        logger.debug(
            f"Registered type mapping: {_class_name(interface_type)} -> {_class_name(implementation_type)}"
        )

    def _forget(self, cls: Type) -> None:
        self._instances.pop(cls, None)
        self._singleton_types.pop(cls, None)
        self._singleton_instances.pop(cls, None)
        self._factories.pop(cls, None)
        self._type_mappings.pop(cls, None)

    def get(self, cls: Type[T], parent_type: Optional[Type] = None,
            parameter_name: Optional[str] = None,
            dependency_chain: Optional[Tuple[Type, ...]] = None) -> T:
        """
        Get an instance of the specified type.

        Args:
            cls: Class type to get
            parent_type: Optional parent type that requires this dependency
            parameter_name: Optional parameter name in the parent type
            dependency_chain: Types currently being resolved, outermost first.
                Defaults to the chain of the factory running on this thread.

        Returns:
            Instance of the requested type

        Raises:
            DependencyResolutionError: If the dependency cannot be resolved
        """
        class_name = _class_name(cls)

        if dependency_chain is None:
            dependency_chain = self._factory_chain()

        if cls in dependency_chain:
            raise CircularDependencyError(list(dependency_chain) + [cls])

        new_chain = dependency_chain + (cls,)

        logger.debug(f"Resolving dependency: {class_name}" +
                     (f" for {parent_type.__name__}" if parent_type else "") +
                     (f" parameter '{parameter_name}'" if parameter_name else ""))

        with timed_operation(f"Resolve {class_name}"):
            with self._lock:
                if cls in self._instances:
                    return cast(T, self._instances[cls])
                if cls in self._singleton_instances:
                    return cast(T, self._singleton_instances[cls])
                singleton_source = self._singleton_types.get(cls)
                factory = self._factories.get(cls)
                implementation = self._type_mappings.get(cls)

            if singleton_source is not None:
                return cast(T, self._get_singleton(cls, singleton_source, new_chain))

            if factory is not None:
                return cast(T, self._call_factory(cls, factory, new_chain))

            if implementation is not None:
                return cast(T, self._create_instance(implementation, new_chain))

            if not self._is_constructible(cls):
                raise UnregisteredDependencyError(cls, parent_type, parameter_name)

            logger.debug(f"No registration found for {class_name}, attempting direct creation")
            return self._create_instance(cls, new_chain)

    def _get_singleton(self, cls: Type, source: Any, chain: Tuple[Type, ...]) -> Any:
        with self._lock:
            # Another thread may have finished building it
            if cls in self._singleton_instances:
                return self._singleton_instances[cls]
            if isinstance(source, type):
                instance = self._create_instance(source, chain)
            else:
                instance = self._call_factory(cls, source, chain)
            self._singleton_instances[cls] = instance
            logger.debug(f"Singleton instance created for {_class_name(cls)}")
            return instance

    def _factory_chain(self) -> Tuple[Type, ...]:
        """Chain of the innermost factory running on this thread, if any."""
        chains = getattr(self._resolution_stack, 'chains', None)
        return chains[-1] if chains else ()

    def _call_factory(self, cls: Type, factory: Callable[..., Any],
                      chain: Tuple[Type, ...]) -> Any:
        """
        Call a factory with the resolution chain that led to it.

        Factories call ``get`` without a chain, so the chain is kept on a
        per-thread stack for the duration of the call. A factory that ends up
        requesting its own type raises CircularDependencyError.
        """
        chains = getattr(self._resolution_stack, 'chains', None)
        if chains is None:
            chains = []
            self._resolution_stack.chains = chains
        chains.append(chain)
        try:
            return factory(self)
        except DependencyResolutionError:
            raise
        except Exception as e:
            logger.error(f"Factory failed to create instance of {_class_name(cls)}: {str(e)}")
            raise FactoryError(cls, f"Factory function failed: {str(e)}", e) from e
        finally:
            chains.pop()

    @staticmethod
    def _is_constructible(cls: Any) -> bool:
        if not isinstance(cls, type):
            return False
        if cls in _PRIMITIVE_TYPES:
            return False
        if inspect.isabstract(cls) or getattr(cls, '_is_protocol', False):
            return False
        return True

    def _create_instance(self, cls: Type[T], dependency_chain: Tuple[Type, ...]) -> T:
        """
        Create an instance of the specified type with dependencies.

        Args:
            cls: Class type to create
            dependency_chain: Types currently being resolved

        Returns:
            Created instance

        Raises:
            DependencyResolutionError: If dependencies cannot be resolved
        """
        class_name = _class_name(cls)

        try:
            signature = inspect.signature(cls.__init__)
        except (ValueError, TypeError) as e:
            raise InstantiationError(cls, f"Failed to get constructor signature: {str(e)}", cause=e) from e

        try:
            hints = get_type_hints(cls.__init__)
        except Exception as e:
            logger.debug(f"Could not evaluate type hints for {class_name}: {e}")
            hints = {}

        kwargs: Dict[str, Any] = {}
        params = list(signature.parameters.values())[1:]
        for param in params:
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            has_default = param.default is not inspect.Parameter.empty
            annotation = hints.get(param.name, param.annotation)

            if annotation is inspect.Parameter.empty or isinstance(annotation, str):
                if has_default:
                    continue
                raise UntypedParameterError(cls, param.name)

            dependency_type, optional = _unwrap_optional(annotation)

            if dependency_type in _PRIMITIVE_TYPES and not self.is_registered(dependency_type):
                if has_default:
                    continue
                if optional:
                    kwargs[param.name] = None
                    continue
                raise UnregisteredDependencyError(dependency_type, cls, param.name)

            try:
                kwargs[param.name] = self.get(dependency_type, cls, param.name, dependency_chain)
            except UnregisteredDependencyError as e:
                if e.dependency_type is not dependency_type:
                    raise
                if has_default:
                    continue
                if optional:
                    kwargs[param.name] = None
                    continue
                raise

        try:
            instance = cls(**kwargs)
        except Exception as e:
            logger.error(f"Failed to instantiate {class_name} with resolved dependencies: {str(e)}")
            raise InstantiationError(cls, f"Failed to instantiate {class_name}: {str(e)}", cause=e) from e

        logger.debug(f"Successfully created instance of {class_name}")
        return instance

    def clear(self) -> None:
        """Clear all registrations."""
        with self._lock:
            self._instances.clear()
            self._singleton_types.clear()
            self._singleton_instances.clear()
            self._factories.clear()
            self._type_mappings.clear()
        logger.debug("Cleared all registrations")
