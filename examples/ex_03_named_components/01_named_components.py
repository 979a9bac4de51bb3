"""Named components: singletons and alternative mappings under a name.

Named instances are returned as-is on every resolution. Named type mappings
sit next to the unnamed ones and are only consulted when a name is given.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tinyioc import Container, DuplicateNameError


class Clock(ABC):
    @abstractmethod
    def now(self) -> str: ...


class SystemClock(Clock):
    def now(self) -> str:
        return "system"


class FrozenClock(Clock):
    def now(self) -> str:
        return "frozen"


def main() -> None:
    container = Container()

    flags = ["alpha", "beta"]
    container.register_instance(flags, "feature_flags")
    resolved_flags = container.resolve(list[str], "feature_flags")
    print(f"flags={','.join(resolved_flags)}")  # => flags=alpha,beta
    print(f"same_object={resolved_flags is flags}")  # => same_object=True

    container.register_type(Clock, SystemClock)
    container.register_type(Clock, FrozenClock, "tests")
    print(f"default={container.resolve(Clock).now()}")  # => default=system
    print(f"named={container.resolve(Clock, 'tests').now()}")  # => named=frozen
    print(f"missing={container.resolve(Clock, 'staging')}")  # => missing=None

    try:
        container.register_instance([], "feature_flags")
    except DuplicateNameError as error:
        print(f"duplicate={error.name}")  # => duplicate=feature_flags


if __name__ == "__main__":
    main()
