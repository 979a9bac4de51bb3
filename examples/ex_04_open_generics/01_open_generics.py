"""Open generics: one registration for every specialization.

Registering ``Repository`` (or ``Repository[T]``) maps every closed request
such as ``Repository[Order]`` to the implementation specialized with the same
type arguments. A closed registration takes precedence for its exact key.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from tinyioc import Container

T = TypeVar("T")


class User:
    pass


class Order:
    pass


class Repository(ABC, Generic[T]):
    @abstractmethod
    def describe(self) -> str: ...


class InMemoryRepository(Repository[T]):
    def __init__(self, model: type[T]) -> None:
        self.model = model

    def describe(self) -> str:
        return f"in-memory:{self.model.__name__}"


class UserRepository(Repository[User]):
    def describe(self) -> str:
        return "users-table"


class OrderService:
    def __init__(self, orders: Repository[Order]) -> None:
        self.orders = orders


def main() -> None:
    container = Container()
    container.register_type(Repository, InMemoryRepository)
    container.register_type(Repository[User], UserRepository)

    print(container.resolve(Repository[Order]).describe())  # => in-memory:Order
    print(container.resolve(Repository[User]).describe())  # => users-table

    service = container.resolve(OrderService)
    print(f"service={service.orders.describe()}")  # => service=in-memory:Order

    print(f"bare={container.resolve(Repository)}")  # => bare=None


if __name__ == "__main__":
    main()
