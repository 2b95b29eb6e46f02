"""Per-call binding state."""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence

from ..sources import ConfigurationProperty, PlaceholdersResolver, PropertySource

if TYPE_CHECKING:
    from .binder import Binder
    from .converter import BindConverter

__all__ = ["BindContext"]


class BindContext:
    """Mutable state owned by a single top-level bind call.

    The context tracks the recursion depth, the source override used while
    an aggregate element is bound, the data object types currently being
    bound (cycle guard), the types currently bound through their constructor,
    and the last property matched. Every push is paired with a pop through a
    context manager, so the state is balanced even when binding fails.
    """

    def __init__(self, binder: "Binder"):
        self._binder = binder
        self._depth = 0
        self._source_overrides: List[PropertySource] = []
        self._data_object_bindings: List[type] = []
        self._constructor_bindings: List[type] = []
        self._configuration_property: Optional[ConfigurationProperty] = None

    @property
    def binder(self) -> "Binder":
        return self._binder

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def sources(self) -> Sequence[PropertySource]:
        """The sources visible to the current bind (the override, if active)."""
        if self._source_overrides:
            return self._source_overrides[-1:]
        return self._binder.sources

    @property
    def converter(self) -> "BindConverter":
        return self._binder.converter

    @property
    def placeholders_resolver(self) -> PlaceholdersResolver:
        return self._binder.placeholders_resolver

    @property
    def configuration_property(self) -> Optional[ConfigurationProperty]:
        return self._configuration_property

    def set_configuration_property(self, prop: Optional[ConfigurationProperty]) -> None:
        self._configuration_property = prop

    def clear_configuration_property(self) -> None:
        self._configuration_property = None

    # -------------------------------------------------------------------------
    # Scoped state
    # -------------------------------------------------------------------------

    @contextmanager
    def with_source(self, source: Optional[PropertySource]) -> Iterator[None]:
        """Restrict lookups to ``source`` for the duration of the block."""
        if source is None:
            yield
            return
        self._source_overrides.append(source)
        try:
            yield
        finally:
            self._source_overrides.pop()

    @contextmanager
    def with_increased_depth(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    @contextmanager
    def with_data_object(self, type_: type) -> Iterator[None]:
        """Mark ``type_`` as being bound as a data object (one level deeper)."""
        self._data_object_bindings.append(type_)
        try:
            with self.with_increased_depth():
                yield
        finally:
            self._data_object_bindings.pop()

    @contextmanager
    def with_constructor_binding(self, type_: type) -> Iterator[None]:
        self._constructor_bindings.append(type_)
        try:
            yield
        finally:
            self._constructor_bindings.pop()

    def is_binding_data_object(self, type_: type) -> bool:
        return type_ in self._data_object_bindings

    def is_nested_constructor_binding(self) -> bool:
        return bool(self._constructor_bindings)

    def __repr__(self) -> str:
        return (
            f"BindContext(depth={self._depth}, "
            f"data_objects={[t.__name__ for t in self._data_object_bindings]})"
        )
