"""Constructor selection: overloads, defaults, and optional parameters.

Each ``typing.overload`` of ``__init__`` is a candidate. Candidates are tried
fewest parameters first, and the first whose parameter types can all be
supplied is used. Parameters with defaults are left to their defaults, and
``X | None`` parameters receive ``None`` when ``X`` cannot be built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import overload

from tinyioc import Container


class Logger:
    pass


class Formatter:
    pass


class Metrics(ABC):
    @abstractmethod
    def record(self) -> str: ...


class PrometheusMetrics(Metrics):
    def record(self) -> str:
        return "prometheus"


class Exporter:
    @overload
    def __init__(self, metrics: Metrics) -> None: ...

    @overload
    def __init__(self, logger: Logger, formatter: Formatter) -> None: ...

    def __init__(
        self,
        metrics: Metrics | None = None,
        logger: Logger | None = None,
        formatter: Formatter | None = None,
    ) -> None:
        self.mode = "metrics" if metrics is not None else "logging"


class Notifier:
    def __init__(self, logger: Logger, metrics: Metrics | None, channel: str = "email") -> None:
        self.logger = logger
        self.metrics = metrics
        self.channel = channel


def main() -> None:
    container = Container()

    notifier = container.resolve(Notifier)
    print(f"metrics={notifier.metrics}")  # => metrics=None
    print(f"channel={notifier.channel}")  # => channel=email

    print(f"exporter={container.resolve(Exporter).mode}")  # => exporter=logging

    container.register_type(Metrics, PrometheusMetrics)
    print(f"exporter={container.resolve(Exporter).mode}")  # => exporter=metrics
    print(f"metrics={container.resolve(Notifier).metrics.record()}")  # => metrics=prometheus


if __name__ == "__main__":
    main()
