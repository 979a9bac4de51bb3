from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tinyioc._internal.generics import (
    generic_definition,
    is_assignable,
    is_closed_generic,
    is_open_generic,
    normalize_key,
    specialize,
)
from tinyioc._internal.type_checks import is_type_key
from tinyioc.exceptions import DuplicateNameError, IncompatibleTypeError, InvalidArgumentError

logger = logging.getLogger(__name__)

Factory = Callable[[Any], Any]


class TypeRegistry:
    """Hold the four mapping tables a container resolves against.

    Tables are replaced wholesale on every write (copy-on-write) while the
    write lock is held, so readers never lock and always observe a complete
    table.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._types: dict[Any, Any] = {}
        self._named_types: dict[tuple[str, Any], Any] = {}
        self._named_instances: dict[str, Any] = {}
        self._factories: dict[Any, Factory] = {}

    @dataclass(frozen=True, slots=True)
    class Snapshot:
        """A rollback snapshot of all registry tables."""

        types: dict[Any, Any]
        named_types: dict[tuple[str, Any], Any]
        named_instances: dict[str, Any]
        factories: dict[Any, Factory]

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def snapshot(self) -> Snapshot:
        """Capture current registry state for rollback."""
        return self.Snapshot(
            types=self._types,
            named_types=self._named_types,
            named_instances=self._named_instances,
            factories=self._factories,
        )

    def restore(self, snapshot: Snapshot) -> None:
        """Restore registry state from a previous snapshot.

        Args:
            snapshot: Tables captured by ``snapshot``.

        """
        with self._lock:
            self._types = snapshot.types
            self._named_types = snapshot.named_types
            self._named_instances = snapshot.named_instances
            self._factories = snapshot.factories

    def register_type(self, source: Any, target: Any) -> None:
        """Map ``source`` to ``target`` unless ``source`` is already mapped.

        Args:
            source: Requested key. Open keys (``Box`` or ``Box[T]``) map every
                closed specialization that has no mapping of its own.
            target: Type to instantiate for ``source``.

        Raises:
            InvalidArgumentError: If either argument is not a type.
            IncompatibleTypeError: If ``target`` is not assignable to ``source``.

        """
        _require_type(source, argument="source")
        _require_type(target, argument="target")
        if not is_assignable(source, target):
            raise IncompatibleTypeError(source, target)

        key = normalize_key(source)
        with self._lock:
            if key in self._types:
                logger.debug(
                    "Mapping for %r already registered as %r, ignoring %r",
                    key,
                    self._types[key],
                    target,
                )
                return
            self._types = {**self._types, key: target}
        logger.debug("Registered type mapping %r -> %r", key, target)

    def register_named_type(self, name: str, source: Any, target: Any) -> None:
        """Map ``(name, source)`` to ``target``.

        Named mappings are trusted overrides: unlike ``register_type`` no
        assignability check is performed. A later registration under the same
        name and source replaces the earlier one.

        Args:
            name: Registration name.
            source: Requested key.
            target: Type to instantiate for ``(name, source)``.

        Raises:
            InvalidArgumentError: If ``name`` is blank or either type is missing.

        """
        _require_name(name)
        _require_type(source, argument="source")
        _require_type(target, argument="target")
        key = (name, normalize_key(source))
        with self._lock:
            self._named_types = {**self._named_types, key: target}
        logger.debug("Registered named type mapping %r -> %r", key, target)

    def register_instance(self, instance: Any, name: str) -> None:
        """Store a pre-built instance under a unique name.

        Args:
            instance: Object returned for every resolution of ``name``.
            name: Unique registration name.

        Raises:
            InvalidArgumentError: If ``instance`` is ``None`` or ``name`` is blank.
            DuplicateNameError: If ``name`` is already registered.

        """
        if instance is None:
            msg = "Named instance must not be None."
            raise InvalidArgumentError(msg)
        _require_name(name)
        with self._lock:
            if name in self._named_instances:
                raise DuplicateNameError(name)
            self._named_instances = {**self._named_instances, name: instance}
        logger.debug("Registered named instance %r of type %s", name, type(instance).__qualname__)

    def register_factory(self, source: Any, factory: Factory) -> None:
        """Route every resolution of ``source`` through ``factory``.

        Args:
            source: Requested key. An open key also routes its closed
                specializations.
            factory: Callable receiving the requested type and returning the
                instance.

        Raises:
            InvalidArgumentError: If ``source`` is not a type or ``factory`` is
                not callable.

        """
        _require_type(source, argument="source")
        if not callable(factory):
            msg = f"Factory for {source!r} must be callable, got {factory!r}."
            raise InvalidArgumentError(msg)
        key = normalize_key(source)
        with self._lock:
            self._factories = {**self._factories, key: factory}
        logger.debug("Registered factory %r for %r", factory, key)

    def lookup(self, source: Any) -> Any:
        """Return the type to instantiate for ``source``.

        Direct mappings win. A closed generic request without a direct mapping
        falls back to its generic definition's mapping, specialized with the
        request's arguments when the mapped target is itself open. Without any
        mapping ``source`` resolves to itself.

        Args:
            source: Requested key.

        Returns:
            The mapped, possibly specialized, target or ``source`` itself.

        """
        key = normalize_key(source)
        types = self._types
        if key in types:
            return types[key]
        if is_closed_generic(key):
            definition = generic_definition(key)
            if definition in types:
                target = types[definition]
                if is_open_generic(target):
                    return specialize(target, key)
                return target
        return source

    def find_factory(self, source: Any) -> Factory | None:
        key = normalize_key(source)
        factories = self._factories
        factory = factories.get(key)
        if factory is None and is_closed_generic(key):
            factory = factories.get(generic_definition(key))
        return factory

    def find_named_type(self, name: str, source: Any) -> Any | None:
        key = normalize_key(source)
        named_types = self._named_types
        target = named_types.get((name, key))
        if target is None and is_closed_generic(key):
            target = named_types.get((name, generic_definition(key)))
        return target

    def has_named_instance(self, name: str) -> bool:
        return name in self._named_instances

    def find_named_instance(self, name: str) -> Any | None:
        return self._named_instances.get(name)


def _require_type(value: Any, *, argument: str) -> None:
    if value is None:
        msg = f"Argument '{argument}' must not be None."
        raise InvalidArgumentError(msg)
    if not is_type_key(value):
        msg = f"Argument '{argument}' must be a class or generic alias, got {value!r}."
        raise InvalidArgumentError(msg)


def _require_name(name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        msg = f"Registration name must be a non-empty string, got {name!r}."
        raise InvalidArgumentError(msg)


__all__ = ["Factory", "TypeRegistry"]
