from __future__ import annotations

from typing import Any


class IoCError(Exception):
    """Represent a base class for all tinyioc-specific failures.

    Catch this type when you want to handle any container error path without
    matching each concrete exception class individually.
    """


class InvalidArgumentError(IoCError, ValueError):
    """Signal a missing or empty required argument.

    Raised by ``Container.resolve`` when the requested type is ``None`` and by
    the registration APIs when a source/target type, registration name,
    instance, or factory is missing or unusable.
    """


class IncompatibleTypeError(IoCError, TypeError):
    """Signal a type mapping whose target cannot stand in for its source.

    Raised by ``Container.register_type`` when the target type is neither a
    subclass of the source type nor an implementation of the source's generic
    definition. This is a configuration error: it is reported at registration
    time, before any resolution is attempted.

    Typical fixes include inheriting from (or registering as a virtual
    subclass of) the source type, or mapping to a different implementation.
    """

    def __init__(self, source: Any, target: Any) -> None:
        self.source = source
        self.target = target
        super().__init__(f"Type {target!r} is not assignable to {source!r}.")


class CircularDependencyError(IoCError):
    """Signal that a type is reachable from itself through constructor dependencies.

    Raised by ``Container.resolve`` at the point where the cycle is detected.
    ``chain`` holds the in-flight types from the outermost request down to the
    repeated type.

    Typical fixes include breaking the cycle with a factory registration or
    moving the shared state into a third type both sides depend on.
    """

    def __init__(self, chain: list[Any]) -> None:
        self.chain = chain
        formatted = " -> ".join(_format_type(item) for item in chain)
        super().__init__(f"Circular dependency detected: {formatted}.")


class DuplicateNameError(IoCError):
    """Signal a named instance registered twice under the same name.

    Raised by ``Container.register_instance``. Named instances are unique per
    container; pick a different name or reuse the already registered object.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"An instance named '{name}' is already registered.")


def _format_type(value: Any) -> str:
    if isinstance(value, type):
        return value.__qualname__
    return repr(value)
