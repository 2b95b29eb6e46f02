"""Property source backed by an already-parsed mapping."""

from typing import Any, Iterator, Mapping, Optional, Tuple

from .name import PropertyName
from .property import IndexedPropertySource

__all__ = ["MapPropertySource"]


class MapPropertySource(IndexedPropertySource):
    """Flattens a (possibly nested) mapping into configuration properties.

    Keys may be dotted (``{"server.port": 80}``) or nested
    (``{"server": {"port": 80}}``); lists become indexed elements. Keys that
    are not valid name elements are kept whole as bracketed elements. Empty
    lists and empty mappings are kept as leaf values.

    Example:
        >>> source = MapPropertySource({"server": {"ports": [80, 443]}})
        >>> source.get_property(PropertyName.of("server.ports[1]")).value
        443
    """

    def __init__(self, data: Mapping[str, Any], source_name: str = "map"):
        self._data = data
        super().__init__(self._flatten(PropertyName.EMPTY, data), source_name)

    def _flatten(self, prefix: PropertyName, value: Any) -> Iterator[Tuple[PropertyName, Any, Optional[str]]]:
        if isinstance(value, Mapping) and value:
            for key, child in value.items():
                key = str(key)
                name = prefix.append(key) if PropertyName.is_valid(key) else prefix.append_key(key)
                yield from self._flatten(name, child)
        elif isinstance(value, (list, tuple)) and value:
            for index, child in enumerate(value):
                yield from self._flatten(prefix.append_index(index), child)
        elif not prefix.is_empty():
            # source_name is assigned before the entries are consumed
            yield prefix, value, f'"{prefix}" from property source "{self.source_name}"'
