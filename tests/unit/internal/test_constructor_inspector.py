import inspect
import logging
from typing import Generic, Optional, TypeVar, overload

import pytest

from tinyioc._internal.constructors import ConstructorInspector, Instantiator
from tinyioc._internal.registry import TypeRegistry
from tinyioc._internal.resolution_frame import ResolutionFrame

T = TypeVar("T")


class _Dependency:
    pass


class _NoInit:
    pass


class _Mixed:
    def __init__(
        self,
        first: _Dependency,
        /,
        second: "_Dependency",
        *args: int,
        flag: bool = False,
        third: Optional[_Dependency],
        **kwargs: str,
    ) -> None:
        pass


class _Unannotated:
    def __init__(self, value) -> None:  # type: ignore[no-untyped-def]
        self.value = value


class _Unresolvable:
    def __init__(self, value: "_DoesNotExist") -> None:  # type: ignore[name-defined]  # noqa: F821
        self.value = value


class _Overloaded:
    @overload
    def __init__(self, a: _Dependency, b: _Dependency) -> None: ...

    @overload
    def __init__(self) -> None: ...

    @overload
    def __init__(self, a: _Dependency) -> None: ...

    def __init__(self, a: object = None, b: object = None) -> None:
        self.a = a
        self.b = b


class _Wrapper(Generic[T]):
    def __init__(self, kind: type[T], value: T, items: list[T]) -> None:
        self.kind = kind
        self.value = value
        self.items = items


def test_class_without_init_has_single_empty_candidate(
    constructor_inspector: ConstructorInspector,
) -> None:
    (candidate,) = constructor_inspector.get_candidates(_NoInit)

    assert candidate.arity == 0


def test_builtin_without_signature_has_single_empty_candidate(
    constructor_inspector: ConstructorInspector,
) -> None:
    (candidate,) = constructor_inspector.get_candidates(dict)

    assert candidate.parameters == ()


def test_defaults_and_variadics_are_not_injected(
    constructor_inspector: ConstructorInspector,
) -> None:
    (candidate,) = constructor_inspector.get_candidates(_Mixed)

    assert [parameter.name for parameter in candidate.parameters] == ["first", "second", "third"]
    first, second, third = candidate.parameters
    assert first.kind is inspect.Parameter.POSITIONAL_ONLY
    assert second.annotation is _Dependency
    assert third.annotation is _Dependency
    assert third.optional
    assert not second.optional


def test_unannotated_and_unresolvable_parameters_are_marked(
    constructor_inspector: ConstructorInspector,
) -> None:
    (unannotated,) = constructor_inspector.get_candidates(_Unannotated)
    (unresolvable,) = constructor_inspector.get_candidates(_Unresolvable)

    assert not unannotated.parameters[0].is_annotated
    assert not unresolvable.parameters[0].is_annotated


def test_overloads_are_candidates_sorted_by_arity(
    constructor_inspector: ConstructorInspector,
) -> None:
    candidates = constructor_inspector.get_candidates(_Overloaded)

    assert [candidate.arity for candidate in candidates] == [0, 1, 2]
    assert candidates[2].parameters[0].name == "a"


def test_closed_generic_parameters_are_substituted(
    constructor_inspector: ConstructorInspector,
) -> None:
    (candidate,) = constructor_inspector.get_candidates(_Wrapper[int])

    kind, value, items = candidate.parameters
    assert kind.type_argument is int
    assert value.annotation is int
    assert items.annotation == list[int]


def test_candidates_are_cached(constructor_inspector: ConstructorInspector) -> None:
    assert constructor_inspector.get_candidates(_Mixed) is constructor_inspector.get_candidates(
        _Mixed,
    )


def test_instantiator_passes_positional_only_arguments_positionally() -> None:
    registry = TypeRegistry()
    resolved: list[object] = []

    def resolve_dependency(dependency: object, frame: ResolutionFrame) -> object:
        resolved.append(dependency)
        return _Dependency()

    instantiator = Instantiator(registry=registry, resolve_dependency=resolve_dependency)

    instance = instantiator.construct(_Mixed, _Mixed, ResolutionFrame())

    assert isinstance(instance, _Mixed)
    assert resolved == [_Dependency, _Dependency, _Dependency]


def test_instantiator_returns_none_without_satisfiable_candidate() -> None:
    registry = TypeRegistry()
    instantiator = Instantiator(
        registry=registry,
        resolve_dependency=lambda dependency, frame: None,
    )

    assert instantiator.construct(_Unannotated, _Unannotated, ResolutionFrame()) is None


def test_unevaluable_annotations_warn_and_are_not_cached(
    constructor_inspector: ConstructorInspector,
    caplog: pytest.LogCaptureFixture,
) -> None:
    class _LocalDependency:
        pass

    class _NeedsLocal:
        def __init__(self, dependency: "_LocalDependency") -> None:
            self.dependency = dependency

    with caplog.at_level(logging.WARNING, logger="tinyioc._internal.constructors"):
        first = constructor_inspector.get_candidates(_NeedsLocal)
        second = constructor_inspector.get_candidates(_NeedsLocal)

    assert first == second
    assert first is not second
    assert not first[0].parameters[0].is_annotated
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 2
    assert "_NeedsLocal" in warnings[0].getMessage()
