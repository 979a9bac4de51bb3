from __future__ import annotations

import inspect
import types
from typing import Any, TypeGuard, get_origin


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_type_key(candidate: object) -> bool:
    """Return true when candidate can be used as a registration or resolution key.

    Runtime classes and subscripted generic aliases over a runtime class
    (``list[int]``, ``Box[T]``) qualify; ``typing`` special forms do not.

    Args:
        candidate: Value being checked.

    """
    return is_runtime_class(candidate) or is_runtime_class(get_origin(candidate))


def is_protocol_class(candidate: type[Any]) -> bool:
    return bool(getattr(candidate, "_is_protocol", False))


def is_abstraction(candidate: object) -> bool:
    """Return true when candidate cannot be instantiated directly.

    Abstract base classes with unimplemented abstract methods, ``typing.Protocol``
    classes, and anything that is not a (possibly subscripted) runtime class
    are abstractions.

    Args:
        candidate: Resolved type, possibly a generic alias.

    """
    origin = get_origin(candidate) or candidate
    if origin is Any or not is_runtime_class(origin):
        return True
    return inspect.isabstract(origin) or is_protocol_class(origin)


__all__ = ["is_abstraction", "is_protocol_class", "is_runtime_class", "is_type_key"]
