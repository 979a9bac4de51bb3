from tinyioc.config import ContainerSettings
from tinyioc.container import Container
from tinyioc.exceptions import (
    CircularDependencyError,
    DuplicateNameError,
    IncompatibleTypeError,
    InvalidArgumentError,
    IoCError,
)

__all__ = [
    "CircularDependencyError",
    "Container",
    "ContainerSettings",
    "DuplicateNameError",
    "IncompatibleTypeError",
    "InvalidArgumentError",
    "IoCError",
]
