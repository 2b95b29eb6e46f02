r"""Binders for aggregate targets: maps, collections and tuples.

Each binder walks the candidate child names of the aggregate and delegates
every element to the ``element_binder`` callback, which performs a full
recursive bind scoped to the source the element was found in.

\dot
digraph AggregateBinder {
    node [shape=rectangle];
    "AggregateBinder" -> "MapBinder";
    "AggregateBinder" -> "IndexedElementsBinder";
    "IndexedElementsBinder" -> "CollectionBinder";
    "IndexedElementsBinder" -> "ArrayBinder";
}
\enddot
"""

import collections
import collections.abc
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..core.bindable import Bindable
from ..core.context import BindContext
from ..sources import IterablePropertySource, PropertyName, PropertySource, PropertyState
from ..utils import (
    is_array_type,
    is_collection_type,
    is_map_type,
    is_scalar_type,
    resolve_type,
    unwrap_type,
)

__all__ = [
    "ElementBinder",
    "AggregateBinder",
    "MapBinder",
    "IndexedElementsBinder",
    "CollectionBinder",
    "ArrayBinder",
    "get_aggregate_binder",
]

logger = logging.getLogger(__name__)

ElementBinder = Callable[..., Any]
"""``element_binder(name, target, source=None) -> value | None``."""

_ABSTRACT_MAPS = (collections.abc.Mapping, collections.abc.MutableMapping)
_LIST_LIKE = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)
_SET_LIKE = (set, collections.abc.Set, collections.abc.MutableSet)


class AggregateBinder(ABC):
    """Base class for binders of container targets."""

    def __init__(self, context: BindContext):
        self.context = context

    @abstractmethod
    def is_allow_recursive_binding(self, source: Optional[PropertySource]) -> bool:
        """Whether elements from ``source`` may re-enter a type being bound."""

    def bind(self, name: PropertyName, target: Bindable, element_binder: ElementBinder) -> Any:
        """Bind the aggregate, merging into the existing value when there is one."""
        result = self._bind_aggregate(name, target, element_binder)
        existing = target.value
        if result is None or existing is None:
            return result
        return self._merge(existing, result)

    @abstractmethod
    def _bind_aggregate(self, name: PropertyName, target: Bindable, element_binder: ElementBinder) -> Any:
        pass

    @abstractmethod
    def _merge(self, existing: Any, additional: Any) -> Any:
        pass

    def _has_descendants(self, name: PropertyName) -> bool:
        return any(
            source.contains_descendant_of(name) is PropertyState.PRESENT
            for source in self.context.sources
        )

    def _bind_direct_value(self, source: PropertySource, name: PropertyName) -> Tuple[bool, Any]:
        """Return ``(found, resolved_value)`` for a property named exactly ``name``."""
        prop = source.get_property(name)
        if prop is None:
            return False, None
        self.context.set_configuration_property(prop)
        return True, self.context.placeholders_resolver.resolve_placeholders(prop.value)


# -----------------------------------------------------------------------------
# Map Binder
# -----------------------------------------------------------------------------


class MapBinder(AggregateBinder):
    """Binds ``dict``-like targets from the children of a name.

    Keys are the direct child elements of the name. When the value type is a
    scalar the whole remaining path becomes the key, so
    ``logging.level.com.example=DEBUG`` binds ``{"com.example": "DEBUG"}``.
    Sources are walked in order and the first source to supply a key wins.
    """

    def is_allow_recursive_binding(self, source):
        return True

    def _bind_aggregate(self, name, target, element_binder):
        key_type, value_type = _map_arguments(target)
        if not self._has_descendants(name):
            for source in self.context.sources:
                found, value = self._bind_direct_value(source, name)
                if found:
                    return self.context.converter.convert(value, target)
        entries: Dict[Any, Any] = {}
        for source in self.context.sources:
            if isinstance(source, IterablePropertySource):
                self._bind_entries(source, name, target, key_type, value_type, entries, element_binder)
        if not entries:
            return None
        return _create_map(target.resolved_type, entries)

    def _bind_entries(
        self,
        source: IterablePropertySource,
        root: PropertyName,
        target: Bindable,
        key_type: Any,
        value_type: Any,
        entries: Dict[Any, Any],
        element_binder: ElementBinder,
    ) -> None:
        seen = set()
        for candidate in source.names_under(root):
            entry_name = self._get_entry_name(root, candidate, value_type)
            if entry_name in seen:
                continue
            seen.add(entry_name)
            key = self.context.converter.convert(entry_name.subname(len(root)).to_key(), key_type)
            if key in entries:
                continue
            value = element_binder(entry_name, self._get_value_bindable(root, candidate, target, value_type), source)
            if value is not None:
                entries[key] = value

    @staticmethod
    def _get_entry_name(root: PropertyName, name: PropertyName, value_type: Any) -> PropertyName:
        if is_collection_type(value_type) or is_array_type(value_type):
            return _chop_at_first_index(root, name)
        if not root.is_parent_of(name) and (_is_nested_map_value(value_type) or not is_scalar_type(value_type)):
            return name.chop(len(root) + 1)
        return name

    @staticmethod
    def _get_value_bindable(root: PropertyName, name: PropertyName, target: Bindable, value_type: Any) -> Bindable:
        if not root.is_parent_of(name) and _is_nested_map_value(value_type):
            return Bindable.of(target.type)
        return Bindable.of(value_type)

    def _merge(self, existing, additional):
        if isinstance(existing, collections.abc.MutableMapping):
            existing.update(additional)
            return existing
        merged = dict(existing)
        merged.update(additional)
        return _create_map(type(additional), merged)


def _map_arguments(target: Bindable) -> Tuple[Any, Any]:
    args = target.element_types
    if len(args) == 2:
        return args[0], args[1]
    return str, Any


def _is_nested_map_value(value_type: Any) -> bool:
    return unwrap_type(value_type) is Any or resolve_type(value_type) is object


def _chop_at_first_index(root: PropertyName, name: PropertyName) -> PropertyName:
    for index in range(len(root) + 1, len(name)):
        if name.is_numeric_index(index):
            return name.chop(index)
    return name


def _create_map(resolved: type, entries: Dict[Any, Any]) -> Any:
    if resolved in _ABSTRACT_MAPS or resolved is dict:
        return entries
    try:
        return resolved(entries)
    except TypeError:
        logger.debug("Cannot instantiate %s from entries; using dict", resolved)
        return entries


# -----------------------------------------------------------------------------
# Indexed Binders
# -----------------------------------------------------------------------------


class IndexedElementsBinder(AggregateBinder):
    """Shared logic for collections and tuples.

    For each source in order, a property named exactly like the aggregate is
    used as the whole value (comma separated strings are split, a single
    scalar becomes a one element collection). Otherwise the indexed children
    ``name[0], name[1], ...`` are bound until the first missing index. The
    first source that supplies anything wins.
    """

    def is_allow_recursive_binding(self, source):
        return source is None or isinstance(source, IterablePropertySource)

    def _bind_aggregate(self, name, target, element_binder):
        for source in self.context.sources:
            elements = self._bind_from_source(source, name, target, element_binder)
            if elements is not None:
                return self._create(target, elements)
        return None

    def _bind_from_source(
        self,
        source: PropertySource,
        root: PropertyName,
        target: Bindable,
        element_binder: ElementBinder,
    ) -> Optional[List[Any]]:
        found, value = self._bind_direct_value(source, root)
        if found:
            return self._bind_value(target, value)
        elements: List[Any] = []
        for index in range(self._max_elements(target)):
            element = element_binder(root.append_index(index), Bindable.of(self._element_type(target, index)), source)
            if element is None:
                break
            elements.append(element)
        return elements or None

    def _bind_value(self, target: Bindable, value: Any) -> Optional[List[Any]]:
        if value is None or value == "":
            return None
        if isinstance(value, str):
            parts: Sequence[Any] = [part.strip() for part in value.split(",")]
        elif isinstance(value, (list, tuple, set, frozenset, collections.deque)):
            parts = list(value)
        else:
            parts = [value]
        return [
            self.context.converter.convert(part, self._element_type(target, index))
            for index, part in enumerate(parts)
        ]

    def _max_elements(self, target: Bindable) -> int:
        return 2**31 - 1

    @staticmethod
    def _element_type(target: Bindable, index: int) -> Any:
        args = target.element_types
        return args[0] if args else Any

    @abstractmethod
    def _create(self, target: Bindable, elements: List[Any]) -> Any:
        pass


class CollectionBinder(IndexedElementsBinder):
    """Binds lists, sets, deques and their abstract counterparts."""

    def _create(self, target, elements):
        resolved = target.resolved_type
        if resolved in _LIST_LIKE:
            return elements
        if resolved in _SET_LIKE:
            return set(elements)
        if resolved is frozenset:
            return frozenset(elements)
        return resolved(elements)

    def _merge(self, existing, additional):
        if isinstance(existing, collections.abc.MutableSequence):
            existing.extend(additional)
            return existing
        if isinstance(existing, collections.abc.MutableSet):
            existing.update(additional)
            return existing
        if isinstance(existing, (frozenset, collections.abc.Set)):
            return type(existing)(existing | frozenset(additional))
        return additional


class ArrayBinder(IndexedElementsBinder):
    """Binds tuples: ``Tuple[T, ...]`` of any length or ``Tuple[A, B]`` of fixed arity."""

    def _create(self, target, elements):
        return tuple(elements)

    def _max_elements(self, target):
        args = target.element_types
        if args and args[-1] is not Ellipsis and args != ((),):
            return len(args)
        return super()._max_elements(target)

    @staticmethod
    def _element_type(target, index):
        args = target.element_types
        if not args or args == ((),):
            return Any
        if args[-1] is Ellipsis:
            return args[0]
        return args[index] if index < len(args) else Any

    def _bind_value(self, target, value):
        elements = super()._bind_value(target, value)
        if elements is None:
            return None
        return elements[: self._max_elements(target)]

    def _merge(self, existing, additional):
        return additional


def get_aggregate_binder(target: Bindable, context: BindContext) -> Optional[AggregateBinder]:
    """Return the binder for the target's container kind, or ``None``."""
    if is_map_type(target.type):
        return MapBinder(context)
    if is_array_type(target.type):
        return ArrayBinder(context)
    if is_collection_type(target.type):
        return CollectionBinder(context)
    return None
