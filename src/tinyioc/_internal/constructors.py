from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin

from typing_extensions import get_overloads

from tinyioc._internal.generics import (
    contains_typevar,
    generic_definition,
    is_closed_generic,
    is_open_generic,
    specialize,
    substitute_typevars,
    typevar_map,
)
from tinyioc._internal.registry import TypeRegistry
from tinyioc._internal.resolution_frame import ResolutionFrame
from tinyioc._internal.type_checks import is_abstraction

logger = logging.getLogger(__name__)

_UNINJECTED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_MISSING = object()


@dataclass(frozen=True, slots=True)
class ConstructorParameter:
    """A constructor parameter the container has to supply."""

    name: str
    kind: inspect._ParameterKind
    annotation: Any = _MISSING
    optional: bool = False

    @property
    def is_annotated(self) -> bool:
        return self.annotation is not _MISSING

    @property
    def type_argument(self) -> Any:
        """Return ``X`` for a ``type[X]`` parameter with a concrete ``X``, else ``_MISSING``."""
        if get_origin(self.annotation) is not type:
            return _MISSING
        arguments = get_args(self.annotation)
        if len(arguments) != 1 or contains_typevar(arguments[0]):
            return _MISSING
        return arguments[0]


@dataclass(frozen=True, slots=True)
class ConstructorCandidate:
    """One way of calling a concrete type, with the parameters to inject."""

    parameters: tuple[ConstructorParameter, ...]

    @property
    def arity(self) -> int:
        return len(self.parameters)


class ConstructorInspector:
    """Enumerate the constructor candidates of concrete types.

    Overloads of ``__init__`` declared with ``typing.overload`` are separate
    candidates; otherwise the class call signature is the only candidate.
    Parameters with defaults and variadic parameters are never injected.
    Candidates are returned fewest parameters first.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, tuple[ConstructorCandidate, ...]] = {}

    def get_candidates(self, concrete: Any) -> tuple[ConstructorCandidate, ...]:
        cached = self._cache.get(concrete)
        if cached is not None:
            return cached

        origin = generic_definition(concrete)
        mapping = typevar_map(concrete)
        signatures = _iter_signatures(origin)
        candidates = tuple(
            sorted(
                (
                    ConstructorCandidate(
                        parameters=tuple(
                            _build_parameter(parameter, mapping=mapping)
                            for parameter in signature.parameters.values()
                            if parameter.kind not in _UNINJECTED_KINDS
                            and parameter.default is inspect.Parameter.empty
                        ),
                    )
                    for signature in signatures
                ),
                key=lambda candidate: candidate.arity,
            ),
        )
        # unevaluated annotations may become resolvable once their names exist
        if not any(_has_unevaluated_annotations(signature) for signature in signatures):
            self._cache[concrete] = candidates
        return candidates


class Instantiator:
    """Build instances of concrete types by resolving constructor parameters.

    ``resolve_dependency`` is the container's unnamed resolution path; it is
    called back for every injected parameter with the active frame.
    """

    def __init__(
        self,
        *,
        registry: TypeRegistry,
        resolve_dependency: Callable[[Any, ResolutionFrame], Any],
        inspector: ConstructorInspector | None = None,
    ) -> None:
        self._registry = registry
        self._resolve_dependency = resolve_dependency
        self._inspector = inspector if inspector is not None else ConstructorInspector()

    def construct(self, requested: Any, concrete: Any, frame: ResolutionFrame) -> Any | None:
        """Instantiate ``concrete`` to satisfy a request for ``requested``.

        The first candidate, fewest parameters first, whose every parameter
        type has a plausible mapping is used. Parameters are then resolved
        recursively through the container.

        Args:
            requested: Type originally requested, used to close an open
                ``concrete`` type.
            concrete: Type to instantiate.
            frame: Resolution frame of the active top-level call.

        Returns:
            The new instance, or ``None`` when no candidate is satisfiable.

        """
        if is_closed_generic(requested) and is_open_generic(concrete):
            concrete = specialize(concrete, requested)

        for candidate in self._inspector.get_candidates(concrete):
            if not candidate.parameters:
                return concrete()
            unresolvable = [
                parameter.name
                for parameter in candidate.parameters
                if not self._is_plausible(parameter)
            ]
            if unresolvable:
                logger.debug(
                    "Skipping %d-argument constructor of %r: no mapping for %s",
                    candidate.arity,
                    concrete,
                    ", ".join(unresolvable),
                )
                continue
            return self._invoke(concrete, candidate, frame)

        logger.debug("No satisfiable constructor for %r", concrete)
        return None

    def _is_plausible(self, parameter: ConstructorParameter) -> bool:
        if not parameter.is_annotated:
            return False
        if parameter.type_argument is not _MISSING or parameter.optional:
            return True
        return self._is_resolvable(parameter.annotation)

    def _invoke(
        self,
        concrete: Any,
        candidate: ConstructorCandidate,
        frame: ResolutionFrame,
    ) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in candidate.parameters:
            value = self._build_argument(parameter, frame)
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[parameter.name] = value
        return concrete(*args, **kwargs)

    def _build_argument(self, parameter: ConstructorParameter, frame: ResolutionFrame) -> Any:
        type_argument = parameter.type_argument
        if type_argument is not _MISSING:
            return type_argument
        if parameter.optional and not self._is_resolvable(parameter.annotation):
            return None
        return self._resolve_dependency(parameter.annotation, frame)

    def _is_resolvable(self, annotation: Any) -> bool:
        # ``type[T]`` of an unspecialized generic
        if get_origin(annotation) is type:
            return False
        if self._registry.find_factory(annotation) is not None:
            return True
        return not is_abstraction(self._registry.lookup(annotation))


def _iter_signatures(origin: type[Any]) -> list[inspect.Signature]:
    overloads = get_overloads(origin.__init__) if inspect.isfunction(origin.__init__) else []
    if overloads:
        signatures = []
        for overload in overloads:
            signature = _signature(overload)
            if signature is None:
                continue
            # drop the bound ``self``
            parameters = list(signature.parameters.values())[1:]
            signatures.append(signature.replace(parameters=parameters))
        return signatures

    signature = _signature(origin)
    if signature is None:
        return [inspect.Signature()]
    return [signature]


def _signature(target: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(target, eval_str=True)
    except (NameError, TypeError) as error:
        logger.warning(
            "Could not evaluate annotations of %r (%s); "
            "parameters with string annotations are treated as unannotated",
            target,
            error,
        )
        try:
            return inspect.signature(target)
        except (ValueError, TypeError):
            return None
    except ValueError:
        return None


def _has_unevaluated_annotations(signature: inspect.Signature) -> bool:
    return any(
        isinstance(parameter.annotation, str) for parameter in signature.parameters.values()
    )


def _build_parameter(
    parameter: inspect.Parameter,
    *,
    mapping: dict[Any, Any],
) -> ConstructorParameter:
    annotation = parameter.annotation
    if annotation is inspect.Parameter.empty or isinstance(annotation, str):
        return ConstructorParameter(name=parameter.name, kind=parameter.kind)

    if mapping:
        annotation = substitute_typevars(annotation, mapping=mapping)
    inner, optional = _strip_optional(annotation)
    return ConstructorParameter(
        name=parameter.name,
        kind=parameter.kind,
        annotation=inner,
        optional=optional,
    )


def _strip_optional(annotation: Any) -> tuple[Any, bool]:
    if get_origin(annotation) not in (Union, types.UnionType):
        return annotation, False
    members = [member for member in get_args(annotation) if member is not type(None)]
    if len(members) != 1 or len(members) == len(get_args(annotation)):
        return annotation, False
    return members[0], True


__all__ = [
    "ConstructorCandidate",
    "ConstructorInspector",
    "ConstructorParameter",
    "Instantiator",
]
