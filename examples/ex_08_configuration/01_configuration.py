"""Configuration: registrations supplied outside the code.

``ContainerSettings`` reads ``TINYIOC_TYPES`` and ``TINYIOC_INSTANCES`` (JSON
objects) from the environment or a ``.env`` file. Settings are applied once,
on the first resolution. Here they are passed explicitly.

.. code-block:: bash

    export TINYIOC_TYPES='{"app.ports:Clock": "app.adapters:SystemClock"}'
    export TINYIOC_INSTANCES='{"clock": "app.ports:Clock"}'
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tinyioc import Container, ContainerSettings


class Clock(ABC):
    @abstractmethod
    def now(self) -> str: ...


class SystemClock(Clock):
    def now(self) -> str:
        return "system"


def main() -> None:
    settings = ContainerSettings(
        types={"__main__:Clock": "__main__:SystemClock"},
        instances={"clock": "__main__:Clock", "broken": "no_such_module:Clock"},
    )
    container = Container(settings=settings)

    print(container.resolve(Clock).now())  # => system

    shared = container.resolve(Clock, "clock")
    print(f"instance_type={type(shared).__name__}")  # => instance_type=SystemClock
    print(f"shared={shared is container.resolve(Clock, 'clock')}")  # => shared=True
    print(f"skipped={container.resolve(Clock, 'broken')}")  # => skipped=None

    isolated = Container(load_configuration=False)
    print(f"isolated={isolated.resolve(Clock)}")  # => isolated=None


if __name__ == "__main__":
    main()
