from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, TypeVar, get_args, get_origin

from tinyioc._internal.type_checks import is_protocol_class, is_runtime_class


def contains_typevar(value: Any) -> bool:
    """Return whether a type expression still contains a ``TypeVar``.

    Args:
        value: Type expression or object to inspect.

    Returns:
        ``True`` when any nested node contains a TypeVar, else ``False``.

    """
    if isinstance(value, TypeVar):
        return True

    origin = get_origin(value)
    if origin is not None:
        return any(contains_typevar(argument) for argument in get_args(value))

    parameters = getattr(value, "__parameters__", ())
    return any(isinstance(parameter, TypeVar) for parameter in parameters)


def generic_definition(value: Any) -> Any:
    """Return the generic definition (origin class) of a type key.

    ``Box[int]`` and ``Box[T]`` both yield ``Box``; non-generic classes and bare
    generic classes are returned unchanged.

    Args:
        value: Type key, open or closed.

    """
    return get_origin(value) or value


def is_closed_generic(value: Any) -> bool:
    origin = get_origin(value)
    if origin is None:
        return False
    arguments = get_args(value)
    if not arguments:
        return False
    return not any(contains_typevar(argument) for argument in arguments)


def is_open_generic(value: Any) -> bool:
    """Return whether a type can still be specialized with type arguments.

    Aliases that carry TypeVars (``Box[T]``), bare ``Generic`` subclasses
    (``Box``), and bare subscriptable classes (``list``, ``dict``) are open.

    Args:
        value: Type key to inspect.

    """
    if get_origin(value) is not None:
        return contains_typevar(value)
    if not is_runtime_class(value):
        return False
    if hasattr(value, "__parameters__"):
        return bool(_typevar_parameters(value))
    return hasattr(value, "__class_getitem__")


def normalize_key(value: Any) -> Any:
    """Normalize a type key for registry storage and lookup.

    Open aliases collapse onto their generic definition so ``Box`` and
    ``Box[T]`` address the same mapping. Closed aliases are rebuilt from their
    origin so ``typing.List[int]`` and ``list[int]`` address the same mapping.

    Args:
        value: Registration or resolution key.

    Returns:
        The canonical key.

    """
    origin = get_origin(value)
    if origin is None:
        return value
    arguments = get_args(value)
    if not arguments or contains_typevar(value):
        return origin
    return _rebuild_alias(origin=origin, args=arguments, fallback=value)


def substitute_typevars(value: Any, *, mapping: Mapping[TypeVar, Any]) -> Any:
    """Substitute TypeVars in a type expression using a resolved mapping.

    Args:
        value: Type expression template that may contain TypeVars.
        mapping: Mapping from template TypeVars to concrete type arguments.

    Returns:
        The substituted type expression with available TypeVars replaced.

    """
    if isinstance(value, TypeVar):
        return mapping.get(value, value)

    origin = get_origin(value)
    if origin is None:
        return value

    arguments = get_args(value)
    if not arguments:
        return value

    substituted_arguments = tuple(
        substitute_typevars(argument, mapping=mapping) for argument in arguments
    )
    return _rebuild_alias(origin=origin, args=substituted_arguments, fallback=value)


def typevar_map(value: Any) -> dict[TypeVar, Any]:
    """Map the type parameters of a closed generic alias to its arguments.

    ``Box[int]`` for ``class Box(Generic[T])`` yields ``{T: int}``. Returns an
    empty mapping for anything that is not a subscripted user generic.

    Args:
        value: Closed generic alias.

    """
    origin = get_origin(value)
    if origin is None:
        return {}
    parameters = _typevar_parameters(origin)
    arguments = get_args(value)
    if len(parameters) != len(arguments):
        return {}
    return dict(zip(parameters, arguments, strict=True))


def specialize(target: Any, request: Any) -> Any:
    """Close an open target type with the type arguments of a closed request.

    The target's generic bases are searched for the request's generic
    definition so that the target's own TypeVars are bound by position in the
    base (``class Bar(IFoo[U])`` requested as ``IFoo[int]`` gives ``Bar[int]``).
    When no such base exists, the request's arguments are applied positionally,
    which covers builtin generics such as ``list``.

    Args:
        target: Open target type (bare generic class or alias with TypeVars).
        request: Closed generic alias that was requested.

    Returns:
        The specialized target, or ``target`` unchanged when it cannot be
        specialized with the request's arguments.

    """
    definition = get_origin(request)
    arguments = get_args(request)
    template = _open_template(target)
    if template is None:
        origin = generic_definition(target)
        return _rebuild_alias(origin=origin, args=arguments, fallback=target)

    for base in _iter_generic_bases(template):
        if get_origin(base) is not definition:
            continue
        mapping = _match_typevars(template=base, concrete=request)
        if mapping is not None:
            return substitute_typevars(template, mapping=mapping)

    typevars = collect_typevars(template)
    if len(typevars) != len(arguments):
        return target
    return substitute_typevars(template, mapping=dict(zip(typevars, arguments, strict=True)))


def is_assignable(source: Any, target: Any) -> bool:
    """Return whether ``target`` can satisfy requests for ``source``.

    The check is nominal and works on generic definitions: ``list[int]`` is
    assignable to ``Sequence[int]`` and to ``Sequence``; a closed
    implementation such as ``IntComparer(Comparer[int])`` is assignable to the
    open ``Comparer``. ABC virtual subclasses count. Protocols are only matched
    structurally when decorated with ``runtime_checkable``; otherwise the
    target must list the protocol among its bases.

    Args:
        source: Requested key.
        target: Candidate implementation.

    """
    source_origin = generic_definition(source)
    target_origin = generic_definition(target)
    if source_origin is object or source_origin is target_origin:
        return True
    if not is_runtime_class(target_origin):
        return False
    if is_protocol_class(source_origin) and not getattr(
        source_origin,
        "_is_runtime_protocol",
        False,
    ):
        return source_origin in target_origin.__mro__
    try:
        return issubclass(target_origin, source_origin)
    except TypeError:
        return source_origin in target_origin.__mro__


def collect_typevars(value: Any) -> tuple[TypeVar, ...]:
    found: list[TypeVar] = []
    _collect_typevars_into(value=value, found=found)
    unique: dict[TypeVar, None] = {}
    for typevar in found:
        unique[typevar] = None
    return tuple(unique)


def _collect_typevars_into(*, value: Any, found: list[TypeVar]) -> None:
    if isinstance(value, TypeVar):
        found.append(value)
        return

    origin = get_origin(value)
    if origin is not None:
        for argument in get_args(value):
            _collect_typevars_into(value=argument, found=found)
        return

    found.extend(_typevar_parameters(value))


def _typevar_parameters(value: Any) -> tuple[TypeVar, ...]:
    return tuple(
        parameter
        for parameter in getattr(value, "__parameters__", ())
        if isinstance(parameter, TypeVar)
    )


def _open_template(value: Any) -> Any | None:
    if get_origin(value) is not None:
        return value if contains_typevar(value) else None
    parameters = _typevar_parameters(value)
    if not parameters:
        return None
    return _rebuild_alias(origin=value, args=parameters, fallback=None)


def _iter_generic_bases(template: Any) -> Iterator[Any]:
    origin = get_origin(template)
    mapping = dict(zip(_typevar_parameters(origin), get_args(template), strict=False))
    for base in getattr(origin, "__orig_bases__", ()):
        base_origin = get_origin(base)
        if base_origin is None or not is_runtime_class(base_origin):
            continue
        substituted = substitute_typevars(base, mapping=mapping)
        yield substituted
        yield from _iter_generic_bases(substituted)


def _match_typevars(*, template: Any, concrete: Any) -> dict[TypeVar, Any] | None:
    mapping: dict[TypeVar, Any] = {}
    if _match_node(template=template, concrete=concrete, mapping=mapping):
        return mapping
    return None


def _match_node(
    *,
    template: Any,
    concrete: Any,
    mapping: dict[TypeVar, Any],
) -> bool:
    if isinstance(template, TypeVar):
        known = mapping.get(template)
        if known is None:
            mapping[template] = concrete
            return True
        return known == concrete

    template_origin = get_origin(template)
    if template_origin is None:
        return template == concrete

    if get_origin(concrete) != template_origin:
        return False

    template_arguments = get_args(template)
    concrete_arguments = get_args(concrete)
    if len(template_arguments) != len(concrete_arguments):
        return False

    return all(
        _match_node(template=template_argument, concrete=concrete_argument, mapping=mapping)
        for template_argument, concrete_argument in zip(
            template_arguments,
            concrete_arguments,
            strict=True,
        )
    )


def _rebuild_alias(*, origin: Any, args: tuple[Any, ...], fallback: Any) -> Any:
    try:
        if len(args) == 1:
            return origin[args[0]]
        return origin[args]
    except TypeError:
        return fallback


__all__ = [
    "collect_typevars",
    "contains_typevar",
    "generic_definition",
    "is_assignable",
    "is_closed_generic",
    "is_open_generic",
    "normalize_key",
    "specialize",
    "substitute_typevars",
    "typevar_map",
]
