r"""Configuration properties and the source interfaces that provide them.

\dot
digraph PropertySource {
    node [shape=rectangle];
    "PropertySource" -> "IterablePropertySource";
    "PropertySource" -> "LookupPropertySource";
    "IterablePropertySource" -> "IndexedPropertySource";
    "IndexedPropertySource" -> "MapPropertySource";
    "IndexedPropertySource" -> "EnvironmentPropertySource";
}
\enddot
"""

import enum
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

from .name import PropertyName

__all__ = [
    "ConfigurationProperty",
    "PropertyState",
    "PropertySource",
    "IterablePropertySource",
    "IndexedPropertySource",
    "LookupPropertySource",
]

logger = logging.getLogger(__name__)


class ConfigurationProperty(BaseModel):
    """A single property resolved from a source.

    Attributes:
        name: The property name.
        value: The raw value, before placeholder resolution and conversion.
        origin: A human readable description of where the value came from.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: PropertyName
    value: Any
    origin: Optional[str] = None

    def __lt__(self, other: "ConfigurationProperty") -> bool:
        return self.name < other.name

    def __str__(self) -> str:
        origin = f" ({self.origin})" if self.origin else ""
        return f"{self.name}={self.value!r}{origin}"


class PropertyState(enum.Enum):
    """Answer to a "does this name have descendants" query."""

    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"

    @classmethod
    def search(cls, names: Iterable[PropertyName], predicate: Callable[[PropertyName], bool]) -> "PropertyState":
        for name in names:
            if predicate(name):
                return cls.PRESENT
        return cls.ABSENT


# -----------------------------------------------------------------------------
# Source Interfaces
# -----------------------------------------------------------------------------


class PropertySource(ABC):
    """A queryable provider of configuration properties."""

    @abstractmethod
    def get_property(self, name: PropertyName) -> Optional[ConfigurationProperty]:
        """Return the property exactly matching ``name`` or ``None``."""

    def contains_descendant_of(self, name: PropertyName) -> PropertyState:
        """Whether any property lives below ``name``; unknown by default."""
        return PropertyState.UNKNOWN


class IterablePropertySource(PropertySource):
    """A source whose property names can be enumerated."""

    @abstractmethod
    def __iter__(self) -> Iterator[PropertyName]:
        """Iterate over every property name the source holds."""

    def contains_descendant_of(self, name: PropertyName) -> PropertyState:
        return PropertyState.search(self, name.is_ancestor_of)

    def names_under(self, name: PropertyName) -> Iterator[PropertyName]:
        """Iterate over the property names that ``name`` is an ancestor of."""
        return (candidate for candidate in self if name.is_ancestor_of(candidate))


class IndexedPropertySource(IterablePropertySource):
    """An immutable, fully materialized iterable source.

    Subclasses hand their ``(name, value, origin)`` triples to ``__init__``;
    later triples for the same name replace earlier ones.
    """

    def __init__(self, entries: Iterable[Tuple[PropertyName, Any, Optional[str]]], source_name: str):
        self.source_name = source_name
        self._properties: Dict[PropertyName, ConfigurationProperty] = {}
        for name, value, origin in entries:
            self._properties[name] = ConfigurationProperty(name=name, value=value, origin=origin)
        self._ancestors: Set[PropertyName] = set()
        for name in self._properties:
            for size in range(len(name)):
                self._ancestors.add(name.chop(size))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Loaded %d properties into %r", len(self._properties), self)

    def get_property(self, name: PropertyName) -> Optional[ConfigurationProperty]:
        return self._properties.get(name)

    def contains_descendant_of(self, name: PropertyName) -> PropertyState:
        return PropertyState.PRESENT if name in self._ancestors else PropertyState.ABSENT

    def __iter__(self) -> Iterator[PropertyName]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_name!r})"


class LookupPropertySource(PropertySource):
    """A non-iterable source backed by a lookup callable.

    The callable receives the string form of the name and returns the raw
    value or ``None``. Descendant queries always answer ``UNKNOWN``.
    """

    def __init__(self, lookup: Callable[[str], Any], source_name: str = "lookup"):
        self._lookup = lookup
        self.source_name = source_name

    def get_property(self, name: PropertyName) -> Optional[ConfigurationProperty]:
        if name.is_empty():
            return None
        value = self._lookup(str(name))
        if value is None:
            return None
        return ConfigurationProperty(
            name=name, value=value, origin=f'"{name}" from lookup source "{self.source_name}"'
        )

    def __repr__(self) -> str:
        return f"LookupPropertySource({self.source_name!r})"
