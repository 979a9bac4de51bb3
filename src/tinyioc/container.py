from __future__ import annotations

import logging
from typing import Any, TypeVar, overload

from tinyioc._internal.constructors import Instantiator
from tinyioc._internal.generics import normalize_key
from tinyioc._internal.registry import Factory, TypeRegistry
from tinyioc._internal.resolution_frame import ResolutionFrame
from tinyioc._internal.type_checks import is_abstraction
from tinyioc.config import ContainerSettings
from tinyioc.config import load_configuration as apply_configuration
from tinyioc.exceptions import InvalidArgumentError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Container:
    """Map abstractions to implementations and build object graphs on demand.

    Dependency keys are classes, protocols, or generic aliases. Open generic
    keys (``Repository`` or ``Repository[T]``) map every closed specialization
    (``Repository[User]``) that has no mapping of its own.

    Resolution consults, in order, factories, named registrations (only when a
    name is given), and unnamed type mappings. Unmapped concrete classes
    resolve to themselves; their constructor parameters are resolved
    recursively from their type annotations.

    Each container owns its registrations. Mappings listed in
    ``ContainerSettings`` are registered once, on the first ``resolve`` call.
    """

    def __init__(
        self,
        *,
        settings: ContainerSettings | None = None,
        load_configuration: bool = True,
    ) -> None:
        """Initialize an empty container.

        Args:
            settings: Configuration to load lazily. Defaults to a
                ``ContainerSettings`` read from the environment on first use.
            load_configuration: Disable to ignore configuration entirely.

        Examples:
            .. code-block:: python

                container = Container()

                isolated_container = Container(load_configuration=False)

                configured_container = Container(
                    settings=ContainerSettings(types={"app.ports:Clock": "app.adapters:SystemClock"}),
                )

        """
        self._settings = settings
        self._configured = not load_configuration
        self._configuring = False
        self._registry = TypeRegistry()
        self._instantiator = Instantiator(
            registry=self._registry,
            resolve_dependency=self._resolve_unnamed,
        )

    # region Registration Methods
    def register_type(self, source: Any, target: Any, name: str | None = None) -> None:
        """Map requests for ``source`` to instances of ``target``.

        Unnamed mappings are validated: ``target`` must be a subclass of
        ``source`` (for generics, of its generic definition). The first unnamed
        mapping for a key wins; later ones are ignored.

        Named mappings are looked up only by ``resolve(source, name)``, are not
        validated, and replace earlier mappings under the same name and key.

        Args:
            source: Requested key, possibly an open or closed generic.
            target: Implementation to instantiate.
            name: Optional registration name.

        Raises:
            InvalidArgumentError: If a type is missing or ``name`` is blank.
            IncompatibleTypeError: If an unnamed ``target`` is not assignable
                to ``source``.

        Examples:
            .. code-block:: python

                container.register_type(Clock, SystemClock)
                container.register_type(Repository, SqlRepository)
                container.register_type(Clock, FrozenClock, "tests")

        """
        if name is None:
            self._registry.register_type(source, target)
        else:
            self._registry.register_named_type(name, source, target)

    def register_instance(self, instance: Any, name: str) -> None:
        """Register a pre-built object returned by ``resolve(..., name)``.

        Args:
            instance: Object to return as-is.
            name: Unique registration name.

        Raises:
            InvalidArgumentError: If ``instance`` is ``None`` or ``name`` is blank.
            DuplicateNameError: If ``name`` is already registered.

        """
        self._registry.register_instance(instance, name)

    def register_factory(self, source: Any, factory: Factory) -> None:
        """Build ``source`` by calling ``factory(requested_type)``.

        Factories take precedence over every other registration for the key,
        and for an open generic key they serve every closed specialization.
        The factory is opaque: its dependencies are not tracked for cycles.

        Args:
            source: Requested key.
            factory: Callable receiving the requested type.

        Raises:
            InvalidArgumentError: If ``source`` is not a type or ``factory`` is
                not callable.

        Examples:
            .. code-block:: python

                container.register_factory(Repository, lambda requested: InMemoryRepository())

        """
        self._registry.register_factory(source, factory)

    # endregion Registration Methods

    def lookup(self, source: Any) -> Any:
        """Return the type ``resolve(source)`` would instantiate.

        Unmapped keys are returned unchanged.

        Args:
            source: Requested key, possibly a closed generic.

        Returns:
            The mapped implementation, specialized for closed generic requests.

        """
        self._ensure_configured()
        return self._registry.lookup(source)

    @overload
    def resolve(self, dependency: type[T], name: str | None = None) -> T | None: ...

    @overload
    def resolve(self, dependency: Any, name: str | None = None) -> Any: ...

    def resolve(self, dependency: Any, name: str | None = None) -> Any:
        """Build or look up an object for ``dependency``.

        ``None`` is a valid outcome: it is returned for abstractions without a
        mapping, for concrete types without a satisfiable constructor, and for
        names with no registration.

        Args:
            dependency: Requested type.
            name: Optional registration name. Named requests only consult
                named instances and named type mappings.

        Returns:
            The resolved object, or ``None``.

        Raises:
            InvalidArgumentError: If ``dependency`` is ``None`` or ``name`` is
                blank.
            CircularDependencyError: If constructing ``dependency`` requires
                itself.

        """
        if dependency is None:
            msg = "Requested type must not be None."
            raise InvalidArgumentError(msg)
        if name is not None and (not isinstance(name, str) or not name.strip()):
            msg = f"Registration name must be a non-empty string, got {name!r}."
            raise InvalidArgumentError(msg)

        self._ensure_configured()
        frame = ResolutionFrame()
        if name is None:
            return self._resolve_unnamed(dependency, frame)
        return self._resolve_named(dependency, name, frame)

    def _resolve_named(self, dependency: Any, name: str, frame: ResolutionFrame) -> Any:
        factory = self._registry.find_factory(dependency)
        if factory is not None:
            return factory(dependency)

        if self._registry.has_named_instance(name):
            return self._registry.find_named_instance(name)

        target = self._registry.find_named_type(name, dependency)
        if target is None or is_abstraction(target):
            return None
        return self._instantiator.construct(dependency, target, frame)

    def _resolve_unnamed(self, dependency: Any, frame: ResolutionFrame) -> Any:
        factory = self._registry.find_factory(dependency)
        if factory is not None:
            return factory(dependency)

        with frame.enter(normalize_key(dependency)):
            concrete = self._registry.lookup(dependency)
            if is_abstraction(concrete):
                logger.debug("No concrete type registered for %r", dependency)
                return None
            return self._instantiator.construct(dependency, concrete, frame)

    def _ensure_configured(self) -> None:
        if self._configured:
            return
        registry = self._registry
        with registry.lock:
            # re-entrant calls come from resolving configured named instances
            if self._configured or self._configuring:
                return
            self._configuring = True
            snapshot = registry.snapshot()
            try:
                settings = self._settings if self._settings is not None else ContainerSettings()
                apply_configuration(self, settings)
            except BaseException:
                registry.restore(snapshot)
                raise
            else:
                self._configured = True
            finally:
                self._configuring = False


__all__ = ["Container"]
