r"""Hierarchical configuration property names.

A :class:`PropertyName` is an immutable sequence of elements such as
``server.ports[0].host``. Dotted elements are compared in a relaxed,
canonical form (case-insensitive, ``-`` and ``_`` ignored) so that
``server.max-size``, ``server.max_size`` and ``SERVER_MAXSIZE`` all address
the same property. Bracketed elements (``map[a.b]``) keep their exact value.
Numeric elements are indexes, whichever notation was used.
"""

import re
from typing import Iterator, List, Tuple, Union

from ..utils import InvalidPropertyNameError

__all__ = ["PropertyName"]

_DOTTED_ELEMENT = re.compile(r"^[A-Za-z0-9_-]+$")


class PropertyName:
    """Immutable hierarchical configuration property name.

    Attributes:
        EMPTY: The name with no elements, the root of every other name.
    """

    __slots__ = ("_elements", "_bracketed", "_canonical", "_hash")

    EMPTY: "PropertyName"

    def __init__(self, elements: Tuple[str, ...] = (), bracketed: Tuple[bool, ...] = ()):
        self._elements = tuple(elements)
        self._bracketed = tuple(bracketed) or (False,) * len(self._elements)
        self._canonical = tuple(
            value if is_bracketed else _canonical_form(value)
            for value, is_bracketed in zip(self._elements, self._bracketed)
        )
        self._hash = hash(self._canonical)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, name: Union[str, "PropertyName", None]) -> "PropertyName":
        """Parse a dotted/indexed name such as ``a.b[0].c``."""
        if isinstance(name, PropertyName):
            return name
        if not name:
            return cls.EMPTY
        elements, bracketed = _parse(name)
        return cls(tuple(elements), tuple(bracketed))

    @classmethod
    def is_valid(cls, name: str) -> bool:
        try:
            _parse(name)
        except InvalidPropertyNameError:
            return False
        return True

    def append(self, suffix: Union[str, int, None]) -> "PropertyName":
        """Return a new name with ``suffix`` (parsed) appended."""
        if suffix is None or suffix == "":
            return self
        if isinstance(suffix, int):
            return self.append_index(suffix)
        elements, bracketed = _parse(suffix)
        return PropertyName(self._elements + tuple(elements), self._bracketed + tuple(bracketed))

    def append_index(self, index: int) -> "PropertyName":
        return PropertyName(self._elements + (str(index),), self._bracketed + (True,))

    def append_key(self, key: str) -> "PropertyName":
        """Append ``key`` as a single element, bracketed when it is not a plain element."""
        if _DOTTED_ELEMENT.match(key):
            return PropertyName(self._elements + (key,), self._bracketed + (False,))
        return PropertyName(self._elements + (key,), self._bracketed + (True,))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self._elements

    def __len__(self) -> int:
        return len(self._elements)

    @property
    def number_of_elements(self) -> int:
        return len(self._elements)

    def get_element(self, index: int) -> str:
        return self._elements[index]

    def elements(self) -> Tuple[str, ...]:
        return self._elements

    def last_element(self) -> str:
        return self._elements[-1] if self._elements else ""

    def is_numeric_index(self, index: int) -> bool:
        return self._elements[index].isdigit()

    def is_last_element_indexed(self) -> bool:
        return bool(self._elements) and self.is_numeric_index(-1)

    def parent(self) -> "PropertyName":
        return self.chop(len(self._elements) - 1) if self._elements else self

    def chop(self, size: int) -> "PropertyName":
        """Return the name truncated to its first ``size`` elements."""
        if size >= len(self._elements):
            return self
        return PropertyName(self._elements[:size], self._bracketed[:size])

    def subname(self, offset: int) -> "PropertyName":
        """Return the name without its first ``offset`` elements."""
        return PropertyName(self._elements[offset:], self._bracketed[offset:])

    def is_parent_of(self, other: "PropertyName") -> bool:
        return len(other) == len(self) + 1 and self.is_ancestor_of(other)

    def is_ancestor_of(self, other: "PropertyName") -> bool:
        return (
            len(other) > len(self)
            and other._canonical[: len(self._canonical)] == self._canonical
        )

    def to_key(self) -> str:
        """Render the elements joined with dots, without brackets (map keys)."""
        return ".".join(self._elements)

    # -------------------------------------------------------------------------
    # Dunder
    # -------------------------------------------------------------------------

    def __iter__(self) -> Iterator[str]:
        return iter(self._elements)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            if not PropertyName.is_valid(other):
                return False
            other = PropertyName.of(other)
        if not isinstance(other, PropertyName):
            return NotImplemented
        return self._canonical == other._canonical

    def __hash__(self) -> int:
        return self._hash

    def __lt__(self, other: "PropertyName") -> bool:
        return str(self) < str(other)

    def __str__(self) -> str:
        parts: List[str] = []
        for value, is_bracketed in zip(self._elements, self._bracketed):
            if is_bracketed or value.isdigit() or not _DOTTED_ELEMENT.match(value):
                parts.append(f"[{value}]")
            else:
                parts.append(f".{value}" if parts else value)
        return "".join(parts)

    def __repr__(self) -> str:
        return f"PropertyName({str(self)!r})"


PropertyName.EMPTY = PropertyName()


def _canonical_form(value: str) -> str:
    return value.replace("-", "").replace("_", "").lower()


def _parse(name: str) -> Tuple[List[str], List[bool]]:
    """Split ``name`` into elements, flagging the bracketed ones."""
    elements: List[str] = []
    bracketed: List[bool] = []
    buffer = ""
    after_dot = False
    i = 0
    while i < len(name):
        char = name[i]
        if char == "[":
            if buffer:
                elements.append(buffer)
                bracketed.append(False)
                buffer = ""
            elif after_dot:
                raise InvalidPropertyNameError(name, "empty element before '['")
            end = name.find("]", i)
            if end == -1:
                raise InvalidPropertyNameError(name, "unclosed '['")
            value = name[i + 1 : end]
            if not value:
                raise InvalidPropertyNameError(name, "empty brackets")
            elements.append(value)
            bracketed.append(True)
            i = end + 1
            after_dot = False
            if i < len(name):
                if name[i] == ".":
                    i += 1
                    after_dot = True
                    if i == len(name):
                        raise InvalidPropertyNameError(name, "trailing '.'")
                elif name[i] != "[":
                    raise InvalidPropertyNameError(name, "expected '.' or '[' after ']'")
            continue
        if char == ".":
            if not buffer:
                raise InvalidPropertyNameError(name, "empty element")
            elements.append(buffer)
            bracketed.append(False)
            buffer = ""
            i += 1
            after_dot = True
            if i == len(name):
                raise InvalidPropertyNameError(name, "trailing '.'")
            continue
        if not _DOTTED_ELEMENT.match(char):
            raise InvalidPropertyNameError(name, f"invalid character {char!r}")
        buffer += char
        after_dot = False
        i += 1
    if buffer:
        elements.append(buffer)
        bracketed.append(False)
    return elements, bracketed
