"""Type resolution helpers shared by the binders and the converter.

Annotations arrive in many shapes (``Optional[int]``, ``List[str]``,
``Annotated[Dict[str, int], ...]``, ``int | None``, bare classes). These
helpers reduce them to the runtime class that drives dispatch.
"""

import collections
import collections.abc
import inspect
import sys
import types
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, FrozenSet, Tuple, TypeVar, Union

from pydantic import BaseModel
from typing_extensions import Annotated, Literal, get_args, get_origin

__all__ = [
    "unwrap_type",
    "resolve_type",
    "get_type_arguments",
    "is_map_type",
    "is_collection_type",
    "is_array_type",
    "is_aggregate_type",
    "is_unbindable_type",
    "is_data_object_type",
    "is_scalar_type",
]

_NONE_TYPE = type(None)
_UNION_TYPE = getattr(types, "UnionType", None)

# Types that are never bound as data objects.
NON_BEAN_CLASSES: FrozenSet[type] = frozenset({object, type})

# Scalar classes that pydantic converts natively.
_SCALAR_BASES: Tuple[type, ...] = (str, bytes, bytearray, int, float, complex, Decimal)

# Top-level module namespaces whose classes are never data objects.
RESERVED_NAMESPACES: FrozenSet[str] = frozenset(
    getattr(sys, "stdlib_module_names", ())
) | frozenset(
    {
        "builtins",
        "typing",
        "typing_extensions",
        "collections",
        "datetime",
        "decimal",
        "pathlib",
        "uuid",
        "ipaddress",
        "re",
        "enum",
        "pydantic",
        "pydantic_core",
    }
)

_MAP_ABCS = (collections.abc.Mapping, collections.abc.MutableMapping)
_COLLECTION_ABCS = (
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
)
_COLLECTION_CLASSES = (list, set, frozenset, collections.deque)


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or (_UNION_TYPE is not None and origin is _UNION_TYPE)


def unwrap_type(tp: Any) -> Any:
    """Strip ``Annotated``, ``NewType`` and single-type ``Optional`` wrappers."""
    while True:
        if get_origin(tp) is Annotated:
            tp = get_args(tp)[0]
            continue
        if _is_union(tp):
            args = [arg for arg in get_args(tp) if arg is not _NONE_TYPE]
            if len(args) == 1:
                tp = args[0]
                continue
            return tp
        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            tp = supertype
            continue
        return tp


@lru_cache(maxsize=512)
def _resolve_cached(tp: Any) -> type:
    tp = unwrap_type(tp)
    if tp is Any:
        return object
    if isinstance(tp, TypeVar):
        return resolve_type(tp.__bound__) if tp.__bound__ is not None else object
    origin = get_origin(tp)
    if origin is Literal:
        args = get_args(tp)
        return type(args[0]) if args else object
    if _is_union(tp):
        return object
    if origin is not None:
        return origin if isinstance(origin, type) else object
    if isinstance(tp, type):
        return tp
    return object


def resolve_type(tp: Any) -> type:
    """Return the runtime class behind an annotation (``object`` when unknown)."""
    try:
        return _resolve_cached(tp)
    except TypeError:
        # unhashable annotation metadata
        return _resolve_cached.__wrapped__(tp)


def get_type_arguments(tp: Any) -> Tuple[Any, ...]:
    """Generic arguments of an annotation after unwrapping."""
    return get_args(unwrap_type(tp))


def is_map_type(tp: Any) -> bool:
    resolved = resolve_type(tp)
    return resolved in _MAP_ABCS or issubclass(resolved, dict)


def is_array_type(tp: Any) -> bool:
    # NamedTuples subclass tuple but bind as data objects
    return resolve_type(tp) is tuple


def is_collection_type(tp: Any) -> bool:
    resolved = resolve_type(tp)
    if resolved in (str, bytes, bytearray):
        return False
    return resolved in _COLLECTION_ABCS or issubclass(resolved, _COLLECTION_CLASSES)


def is_aggregate_type(tp: Any) -> bool:
    return is_map_type(tp) or is_array_type(tp) or is_collection_type(tp)


def is_unbindable_type(tp: Any) -> bool:
    """Whether the type is a builtin or lives in a reserved namespace."""
    resolved = resolve_type(tp)
    if resolved in NON_BEAN_CLASSES:
        return True
    module = getattr(resolved, "__module__", "") or ""
    return module.split(".")[0] in RESERVED_NAMESPACES


def is_data_object_type(tp: Any) -> bool:
    """Whether the type is a compound object bound property by property."""
    resolved = resolve_type(tp)
    if not inspect.isclass(resolved) or is_aggregate_type(resolved):
        return False
    if issubclass(resolved, BaseModel):
        return True
    if is_unbindable_type(resolved):
        return False
    if issubclass(resolved, (Enum,) + _SCALAR_BASES):
        return False
    # custom scalar types that describe their own pydantic schema
    return not hasattr(resolved, "__get_pydantic_core_schema__")


def is_scalar_type(tp: Any) -> bool:
    """Whether the type is converted from a single raw value."""
    if unwrap_type(tp) is Any or resolve_type(tp) is object:
        return False
    return not is_aggregate_type(tp) and not is_data_object_type(tp)
