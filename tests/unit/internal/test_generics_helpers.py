from __future__ import annotations

import typing
from collections.abc import MutableSequence, Sequence
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

import pytest

from tinyioc._internal import generics

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")
V = TypeVar("V")


class _Box(Generic[T]):
    pass


class _Pair(Generic[K, V]):
    pass


class _IntBox(_Box[int]):
    pass


class _SwappedPair(_Pair[V, K], Generic[K, V]):
    pass


class _ListBox(_Box[list[U]]):
    pass


class _Nested(_Box[T]):
    pass


class _Deeper(_Nested[U]):
    pass


class _Unrelated(Generic[T]):
    pass


class _Closeable(Protocol):
    def close(self) -> None: ...


@runtime_checkable
class _RuntimeCloseable(Protocol):
    def close(self) -> None: ...


class _ExplicitCloser(_Closeable):
    def close(self) -> None:
        return None


class _DuckCloser:
    def close(self) -> None:
        return None


def test_contains_typevar_walks_nested_arguments() -> None:
    assert generics.contains_typevar(T)
    assert generics.contains_typevar(dict[str, list[T]])
    assert generics.contains_typevar(_Box)
    assert not generics.contains_typevar(dict[str, list[int]])
    assert not generics.contains_typevar(int)


def test_is_closed_generic() -> None:
    assert generics.is_closed_generic(_Box[int])
    assert generics.is_closed_generic(list[int])
    assert not generics.is_closed_generic(_Box[T])
    assert not generics.is_closed_generic(_Box)
    assert not generics.is_closed_generic(typing.Sequence)


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [
        (_Box, True),
        (_Box[T], True),
        (_Pair[int, V], True),
        (list, True),
        (_Box[int], False),
        (_IntBox, False),
        (int, False),
        (T, False),
    ],
)
def test_is_open_generic(candidate: Any, expected: bool) -> None:
    assert generics.is_open_generic(candidate) is expected


def test_normalize_key_collapses_open_aliases_onto_definition() -> None:
    assert generics.normalize_key(_Box[T]) is _Box
    assert generics.normalize_key(_Pair[K, int]) is _Pair
    assert generics.normalize_key(typing.Sequence) is Sequence


def test_normalize_key_unifies_typing_and_builtin_aliases() -> None:
    assert generics.normalize_key(typing.List[int]) == list[int]
    assert generics.normalize_key(typing.Dict[str, int]) == dict[str, int]
    assert generics.normalize_key(_Box[int]) == _Box[int]
    assert generics.normalize_key(int) is int


def test_typevar_map_binds_parameters_by_position() -> None:
    assert generics.typevar_map(_Pair[int, str]) == {K: int, V: str}
    assert generics.typevar_map(_Box) == {}
    assert generics.typevar_map(list[int]) == {}


def test_substitute_typevars_rebuilds_nested_aliases() -> None:
    substituted = generics.substitute_typevars(dict[K, list[V]], mapping={K: str, V: int})

    assert substituted == dict[str, list[int]]
    assert generics.substitute_typevars(T, mapping={}) is T
    assert generics.substitute_typevars(typing.Sequence, mapping={}) == typing.Sequence


def test_specialize_uses_generic_base_positions() -> None:
    assert generics.specialize(_SwappedPair, _Pair[int, str]) == _SwappedPair[str, int]


def test_specialize_through_intermediate_bases() -> None:
    assert generics.specialize(_Deeper, _Box[bytes]) == _Deeper[bytes]


def test_specialize_matches_nested_base_arguments() -> None:
    assert generics.specialize(_ListBox, _Box[list[int]]) == _ListBox[int]


def test_specialize_builtin_positionally() -> None:
    assert generics.specialize(list, MutableSequence[int]) == list[int]


def test_specialize_falls_back_to_positional_mapping_for_unrelated_target() -> None:
    assert generics.specialize(_Unrelated, _Box[int]) == _Unrelated[int]


def test_specialize_returns_target_when_arity_differs() -> None:
    assert generics.specialize(_Unrelated, _Pair[int, str]) is _Unrelated


@pytest.mark.parametrize(
    ("source", "target"),
    [
        (_Box, _IntBox),
        (_Box[int], _IntBox),
        (_Box[T], _Deeper),
        (Sequence, list),
        (Sequence[int], list[int]),
        (MutableSequence, list),
        (object, int),
        (_Box, _Box),
        (_Closeable, _ExplicitCloser),
        (_RuntimeCloseable, _DuckCloser),
    ],
)
def test_is_assignable_accepts_compatible_pairs(source: Any, target: Any) -> None:
    assert generics.is_assignable(source, target)


@pytest.mark.parametrize(
    ("source", "target"),
    [
        (_Box, _Unrelated),
        (MutableSequence, set),
        (int, str),
        (_Closeable, _DuckCloser),
        (int, typing.Any),
    ],
)
def test_is_assignable_rejects_incompatible_pairs(source: Any, target: Any) -> None:
    assert not generics.is_assignable(source, target)
