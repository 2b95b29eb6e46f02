"""Placeholder resolution for raw property values.

``${server.host}`` inside a value is replaced by the value of the
``server.host`` property; ``${server.port:8080}`` falls back to ``8080`` when
the property is missing. Placeholders may be nested and may appear in
defaults. ``\\${`` escapes a literal ``${``.
"""

import logging
from typing import Any, Iterable, List, Optional, Set

from ..utils import PlaceholderResolutionError
from .name import PropertyName
from .property import PropertySource

__all__ = ["PlaceholdersResolver", "SourcesPlaceholdersResolver"]

logger = logging.getLogger(__name__)


class PlaceholdersResolver:
    """Strategy used to resolve placeholders in raw values.

    The base implementation returns values unchanged and is available as
    ``PlaceholdersResolver.NONE``.
    """

    NONE: "PlaceholdersResolver"

    def resolve_placeholders(self, value: Any) -> Any:
        return value


PlaceholdersResolver.NONE = PlaceholdersResolver()


class SourcesPlaceholdersResolver(PlaceholdersResolver):
    """Resolves placeholders against an ordered list of property sources.

    Parameters:
        sources: Sources searched in order; the first match wins.
        ignore_unresolvable: Leave unresolvable placeholders untouched
            instead of raising :class:`PlaceholderResolutionError`.
    """

    def __init__(
        self,
        sources: Iterable[PropertySource],
        prefix: str = "${",
        suffix: str = "}",
        separator: str = ":",
        ignore_unresolvable: bool = True,
    ):
        self._sources = tuple(sources)
        self._prefix = prefix
        self._suffix = suffix
        self._separator = separator
        self._ignore_unresolvable = ignore_unresolvable

    def resolve_placeholders(self, value: Any) -> Any:
        if not isinstance(value, str) or self._prefix not in value:
            return value
        return self._parse(value, set())

    def _parse(self, text: str, visiting: Set[str]) -> Any:
        start = text.find(self._prefix)
        # a value made of a single placeholder keeps the raw type of its target
        if start == 0 and self._find_placeholder_end(text, 0) == len(text) - len(self._suffix):
            return self._resolve_placeholder(text[len(self._prefix) : -len(self._suffix)], visiting)

        parts: List[str] = []
        position = 0
        while start != -1:
            if start > 0 and text[start - 1] == "\\":
                parts.append(text[position : start - 1])
                parts.append(self._prefix)
                position = start + len(self._prefix)
                start = text.find(self._prefix, position)
                continue
            end = self._find_placeholder_end(text, start)
            if end == -1:
                break
            parts.append(text[position:start])
            resolved = self._resolve_placeholder(text[start + len(self._prefix) : end], visiting)
            parts.append(str(resolved))
            position = end + len(self._suffix)
            start = text.find(self._prefix, position)
        parts.append(text[position:])
        return "".join(parts)

    def _find_placeholder_end(self, text: str, start: int) -> int:
        index = start + len(self._prefix)
        nested = 0
        while index < len(text):
            if text.startswith(self._prefix, index):
                nested += 1
                index += len(self._prefix)
            elif text.startswith(self._suffix, index):
                if nested == 0:
                    return index
                nested -= 1
                index += len(self._suffix)
            else:
                index += 1
        return -1

    def _resolve_placeholder(self, placeholder: str, visiting: Set[str]) -> Any:
        if placeholder in visiting:
            raise PlaceholderResolutionError(
                f"Circular placeholder reference '{placeholder}'",
                ["Break the cycle between the referencing properties"],
                {"placeholder": placeholder, "visiting": sorted(visiting)},
            )
        visiting.add(placeholder)
        try:
            key = self._parse(placeholder, visiting) if self._prefix in placeholder else placeholder
            key, default = self._split_default(str(key))
            value = self._lookup(key)
            if value is None and default is not None:
                value = default
            if value is None:
                if self._ignore_unresolvable:
                    return f"{self._prefix}{placeholder}{self._suffix}"
                raise PlaceholderResolutionError(
                    f"Could not resolve placeholder '{placeholder}'",
                    [f"Define the property '{key}'", f"Provide a default: ${{{key}:value}}"],
                    {"placeholder": placeholder},
                )
            if isinstance(value, str) and self._prefix in value:
                value = self._parse(value, visiting)
            return value
        finally:
            visiting.discard(placeholder)

    def _split_default(self, key: str):
        if self._separator in key:
            key, default = key.split(self._separator, 1)
            return key, default
        return key, None

    def _lookup(self, key: str) -> Optional[Any]:
        if not PropertyName.is_valid(key):
            return None
        name = PropertyName.of(key)
        for source in self._sources:
            prop = source.get_property(name)
            if prop is not None:
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug("Resolved placeholder %s from %s", key, prop.origin)
                return prop.value
        return None
