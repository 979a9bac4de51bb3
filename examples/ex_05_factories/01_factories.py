"""Factories: take over construction of a type.

A factory receives the requested type and returns the object to use. It wins
over every other registration for its key, and a factory registered for an
open generic serves every specialization.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, get_args

from tinyioc import Container

T = TypeVar("T")


class Connection:
    def __init__(self, url: str) -> None:
        self.url = url


class Service:
    def __init__(self, connection: Connection) -> None:
        self.connection = connection


class Cache(Generic[T]):
    def __init__(self, name: str) -> None:
        self.name = name


def main() -> None:
    container = Container()
    requested_types: list[str] = []

    def connection_factory(requested: Any) -> Connection:
        requested_types.append(requested.__name__)
        return Connection("sqlite://memory")

    container.register_factory(Connection, connection_factory)

    service = container.resolve(Service)
    print(f"url={service.connection.url}")  # => url=sqlite://memory
    print(f"requested={requested_types}")  # => requested=['Connection']

    container.register_factory(
        Cache,
        lambda requested: Cache(f"cache-for-{get_args(requested)[0].__name__}"),
    )
    print(container.resolve(Cache[int]).name)  # => cache-for-int
    print(container.resolve(Cache[bytes]).name)  # => cache-for-bytes


if __name__ == "__main__":
    main()
