from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from tinyioc.exceptions import CircularDependencyError


class ResolutionFrame:
    """Track the types under construction within one top-level resolve call.

    A fresh frame is created for every ``Container.resolve`` call and passed
    explicitly down the recursive resolution chain, so concurrent resolutions
    never observe each other's in-flight types.
    """

    def __init__(self) -> None:
        self._in_flight: list[Any] = []

    def __contains__(self, dependency: object) -> bool:
        return dependency in self._in_flight

    @property
    def chain(self) -> tuple[Any, ...]:
        return tuple(self._in_flight)

    @contextmanager
    def enter(self, dependency: Any) -> Iterator[None]:
        """Mark ``dependency`` as in flight for the duration of the block.

        Args:
            dependency: Requested type being resolved.

        Raises:
            CircularDependencyError: If ``dependency`` is already an ancestor in
                the current chain.

        """
        if dependency in self._in_flight:
            raise CircularDependencyError([*self._in_flight, dependency])
        self._in_flight.append(dependency)
        try:
            yield
        finally:
            self._in_flight.pop()


__all__ = ["ResolutionFrame"]
