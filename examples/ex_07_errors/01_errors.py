"""Errors: what the container raises and when.

Every error derives from ``IoCError``. A missing registration is not an
error: ``resolve`` returns ``None`` instead.
"""

from __future__ import annotations

from tinyioc import (
    CircularDependencyError,
    Container,
    IncompatibleTypeError,
    InvalidArgumentError,
    IoCError,
)


class A:
    def __init__(self, b: B) -> None:
        self.b = b


class B:
    def __init__(self, a: A) -> None:
        self.a = a


class Base:
    pass


def main() -> None:
    container = Container()

    try:
        container.resolve(A)
    except CircularDependencyError as error:
        chain = " -> ".join(item.__name__ for item in error.chain)
        print(f"cycle={chain}")  # => cycle=A -> B -> A

    try:
        container.register_type(Base, str)
    except IncompatibleTypeError as error:
        print(f"incompatible={error.target.__name__}")  # => incompatible=str

    try:
        container.resolve(None)
    except InvalidArgumentError:
        print("invalid_argument=True")  # => invalid_argument=True

    print(f"base_class={issubclass(CircularDependencyError, IoCError)}")  # => base_class=True


if __name__ == "__main__":
    main()
