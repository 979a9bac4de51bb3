from __future__ import annotations

import builtins
import importlib
import logging
import sys
from typing import TYPE_CHECKING, Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tinyioc._internal.type_checks import is_type_key

if TYPE_CHECKING:
    from tinyioc.container import Container

logger = logging.getLogger(__name__)


class ContainerSettings(BaseSettings):
    """Type mappings and named instances supplied from the environment.

    Both maps are keyed by string identifiers of the form
    ``package.module:Qualified.Name`` or ``package.module.Name``, optionally
    followed by generic arguments in brackets, for example
    ``collections.abc:Sequence[builtins.int]``. A bare name such as ``int`` or
    ``Clock`` is looked up in ``builtins``, then in the ``__main__`` module.
    Identifiers that cannot be imported are skipped.

    Values are read from ``TINYIOC_TYPES`` / ``TINYIOC_INSTANCES`` as JSON
    objects, from the process environment or a ``.env`` file.

    Examples:
        .. code-block:: bash

            export TINYIOC_TYPES='{"app.ports:Clock": "app.adapters:SystemClock"}'
            export TINYIOC_INSTANCES='{"clock": "app.adapters:SystemClock"}'

    """

    model_config = SettingsConfigDict(
        env_prefix="TINYIOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    types: dict[str, str] = Field(default_factory=dict)
    """Unnamed mappings, source type identifier to target type identifier."""

    instances: dict[str, str] = Field(default_factory=dict)
    """Named singletons, instance name to the identifier of the type to build."""


def load_configuration(container: Container, settings: ContainerSettings) -> None:
    """Register the mappings and named instances described by ``settings``.

    Entries whose identifiers cannot be imported are skipped. Type mappings go
    through ``Container.register_type`` and are validated like any other
    registration. Named instances are built through ``Container.resolve`` and
    skipped when resolution yields ``None``.

    Args:
        container: Container receiving the registrations.
        settings: Loaded settings.

    Raises:
        IncompatibleTypeError: If a configured target is not assignable to its
            source.
        DuplicateNameError: If a configured instance name is already registered.

    """
    registered_types = 0
    for source_identifier, target_identifier in settings.types.items():
        source = import_type(source_identifier)
        target = import_type(target_identifier)
        if source is None or target is None:
            logger.debug(
                "Skipping type mapping %r -> %r: unknown type",
                source_identifier,
                target_identifier,
            )
            continue
        container.register_type(source, target)
        registered_types += 1

    registered_instances = 0
    for name, type_identifier in settings.instances.items():
        instance_type = import_type(type_identifier)
        if instance_type is None:
            logger.debug("Skipping named instance %r: unknown type %r", name, type_identifier)
            continue
        instance = container.resolve(instance_type)
        if instance is None:
            logger.debug("Skipping named instance %r: %r is not constructible", name, instance_type)
            continue
        container.register_instance(instance, name)
        registered_instances += 1

    logger.info(
        "Loaded %d type mappings and %d named instances from configuration",
        registered_types,
        registered_instances,
    )


def import_type(identifier: str) -> Any | None:
    """Import the type named by ``identifier``, or return ``None``.

    Args:
        identifier: ``module:Qualified.Name``, ``module.Name`` or a bare name
            found in ``builtins`` or ``__main__``, optionally with bracketed
            generic arguments. Relative module paths are not supported.

    Returns:
        The imported class or generic alias, ``None`` when any part of the
        identifier cannot be imported or does not name a type.

    """
    identifier = identifier.strip()
    if not identifier:
        return None

    base_identifier, arguments_text = _split_arguments(identifier)
    if base_identifier is None:
        return None

    base = _import_object(base_identifier)
    if base is None:
        return None
    if arguments_text is None:
        return base if is_type_key(base) else None

    arguments = []
    for argument_identifier in _split_top_level(arguments_text):
        argument = import_type(argument_identifier)
        if argument is None:
            return None
        arguments.append(argument)
    try:
        specialized = base[arguments[0]] if len(arguments) == 1 else base[tuple(arguments)]
    except TypeError:
        return None
    return specialized if is_type_key(specialized) else None


def _import_object(path: str) -> Any | None:
    if ":" in path:
        module_path, _, attribute_path = path.partition(":")
    elif "." in path:
        module_path, _, attribute_path = path.rpartition(".")
    else:
        return _import_bare_name(path)

    # relative imports have no anchor package here
    if not module_path or module_path.startswith(".") or not attribute_path:
        return None
    try:
        value: Any = importlib.import_module(module_path)
    except (ImportError, ValueError, TypeError):
        logger.debug("Could not import module %r", module_path)
        return None
    return _get_attribute_path(value, attribute_path)


def _import_bare_name(name: str) -> Any | None:
    value = getattr(builtins, name, None)
    if value is not None:
        return value
    main_module = sys.modules.get("__main__")
    if main_module is None:
        return None
    return getattr(main_module, name, None)


def _get_attribute_path(value: Any, attribute_path: str) -> Any | None:
    for attribute in attribute_path.split("."):
        value = getattr(value, attribute, None)
        if value is None:
            return None
    return value


def _split_arguments(identifier: str) -> tuple[str | None, str | None]:
    if "[" not in identifier:
        return identifier, None
    if not identifier.endswith("]"):
        return None, None
    base, _, rest = identifier.partition("[")
    return base.strip(), rest[:-1]


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts]


__all__ = ["ContainerSettings", "import_type", "load_configuration"]
