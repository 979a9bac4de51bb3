"""Registration: map abstractions to implementations.

Abstract classes and protocols cannot be built on their own. Register a
concrete type for them; the first unnamed registration for a key wins.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tinyioc import Container, IncompatibleTypeError


class Clock(ABC):
    @abstractmethod
    def now(self) -> str: ...


class SystemClock(Clock):
    def now(self) -> str:
        return "system"


class FrozenClock(Clock):
    def now(self) -> str:
        return "frozen"


class Scheduler:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock


def main() -> None:
    container = Container()

    print(f"unmapped={container.resolve(Clock)}")  # => unmapped=None
    print(f"scheduler_unmapped={container.resolve(Scheduler)}")  # => scheduler_unmapped=None

    container.register_type(Clock, SystemClock)
    container.register_type(Clock, FrozenClock)

    scheduler = container.resolve(Scheduler)
    print(f"clock={scheduler.clock.now()}")  # => clock=system
    print(f"lookup={container.lookup(Clock).__name__}")  # => lookup=SystemClock

    try:
        container.register_type(Clock, Scheduler)
    except IncompatibleTypeError:
        print("rejected=Scheduler")  # => rejected=Scheduler


if __name__ == "__main__":
    main()
