"""Shared pytest fixtures for tinyioc tests."""

import pytest

from tinyioc._internal.constructors import ConstructorInspector
from tinyioc._internal.registry import TypeRegistry
from tinyioc.container import Container


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep configuration from the outer environment out of the tests."""
    monkeypatch.delenv("TINYIOC_TYPES", raising=False)
    monkeypatch.delenv("TINYIOC_INSTANCES", raising=False)


@pytest.fixture()
def container() -> Container:
    """Container that ignores external configuration."""
    return Container(load_configuration=False)


@pytest.fixture()
def registry() -> TypeRegistry:
    """Empty TypeRegistry instance."""
    return TypeRegistry()


@pytest.fixture()
def constructor_inspector() -> ConstructorInspector:
    """ConstructorInspector instance."""
    return ConstructorInspector()
