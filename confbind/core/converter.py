r"""Value conversion for bound properties.

The :class:`BindConverter` turns raw source values into instances of the
target annotation. Values that already satisfy the annotation are returned
as is (checked with typeguard). Otherwise a converter registered for the
``(source class, target class)`` pair is used, and failing that the value is
validated with a pydantic ``TypeAdapter`` built for the annotation.

\dot
digraph Conversion {
    rankdir=LR;
    node [shape=rectangle];
    "value" -> "check_type" -> "ConverterRegistry" -> "TypeAdapter";
}
\enddot
"""

import enum
import logging
import re
from datetime import timedelta
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Type

from pydantic import PydanticSchemaGenerationError, PydanticUserError, TypeAdapter, ValidationError
from typeguard import CollectionCheckStrategy, TypeCheckError, check_type

from ..utils import (
    ConversionError,
    ConverterNotFoundError,
    RegistryError,
    RegistryLookupError,
    get_type_name,
    is_data_object_type,
    resolve_type,
)
from .bindable import Bindable

__all__ = ["Converter", "ConverterRegistry", "BindConverter"]

logger = logging.getLogger(__name__)

Converter = Callable[[Any, Any], Any]
"""A callable receiving ``(value, target_annotation)`` and returning the converted value."""

_DURATION_PATTERN = re.compile(r"^\s*([+-]?\d+)\s*([a-zA-Z]{0,2})\s*$")
_DURATION_UNITS: Dict[str, str] = {
    "": "milliseconds",
    "ns": "nanoseconds",
    "us": "microseconds",
    "ms": "milliseconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


# -----------------------------------------------------------------------------
# Converter Registry
# -----------------------------------------------------------------------------


class ConverterRegistry:
    """Registry of converters keyed by ``(source class, target class)``.

    Lookups walk the MRO of the source class against the exact target class
    first, then fall back to converters registered with
    ``include_subclasses=True``, in registration order.

    Example:
        >>> registry = ConverterRegistry()
        >>> @registry.register(str, Color)
        ... def to_color(value, target):
        ...     return Color.parse(value)
    """

    def __init__(self) -> None:
        self._repository: Dict[Tuple[type, type], Converter] = {}
        self._hierarchy: List[Tuple[type, type, Converter]] = []

    def register(
        self,
        source_type: type,
        target_type: type,
        converter: Optional[Converter] = None,
        include_subclasses: bool = False,
    ) -> Any:
        """Register ``converter``; used as a decorator when it is omitted.

        Raises:
            RegistryError: If a converter is already registered for the pair.
        """
        if converter is None:

            def decorator(func: Converter) -> Converter:
                self.register(source_type, target_type, func, include_subclasses)
                return func

            return decorator

        key = (source_type, target_type)
        if key in self._repository or any(
            (src, tgt) == key for src, tgt, _ in self._hierarchy
        ):
            raise RegistryError(
                f"{type(self).__name__}: converter for {_pair_name(key)} already registered",
                [
                    "Unregister the existing converter first",
                    "Register the converter on a fresh BindConverter",
                ],
                {"key": _pair_name(key)},
            )
        if include_subclasses:
            self._hierarchy.append((source_type, target_type, converter))
        else:
            self._repository[key] = converter
        logger.debug("Registered converter for %s", _pair_name(key))
        return converter

    def unregister(self, source_type: type, target_type: type) -> None:
        key = (source_type, target_type)
        if key in self._repository:
            del self._repository[key]
            return
        for index, (src, tgt, _) in enumerate(self._hierarchy):
            if (src, tgt) == key:
                del self._hierarchy[index]
                return
        raise RegistryLookupError(
            f"{type(self).__name__}: converter for {_pair_name(key)} not registered",
            [f"Registered pairs: {', '.join(_pair_name(k) for k in self) or 'none'}"],
        )

    def find(self, source_type: type, target_type: type) -> Optional[Converter]:
        """Return the converter for the pair, or ``None``."""
        for candidate in source_type.__mro__:
            converter = self._repository.get((candidate, target_type))
            if converter is not None:
                return converter
        if not isinstance(target_type, type):
            return None
        for src, tgt, converter in self._hierarchy:
            if issubclass(source_type, src) and issubclass(target_type, tgt):
                return converter
        return None

    def get(self, source_type: type, target_type: type) -> Converter:
        converter = self.find(source_type, target_type)
        if converter is None:
            raise RegistryLookupError(
                f"{type(self).__name__}: converter for "
                f"{_pair_name((source_type, target_type))} not registered"
            )
        return converter

    def __contains__(self, key: Any) -> bool:
        return isinstance(key, tuple) and len(key) == 2 and self.find(*key) is not None

    def __iter__(self) -> Iterator[Tuple[type, type]]:
        yield from self._repository
        for src, tgt, _ in self._hierarchy:
            yield (src, tgt)

    def __len__(self) -> int:
        return len(self._repository) + len(self._hierarchy)


def _pair_name(key: Tuple[type, type]) -> str:
    return f"{get_type_name(key[0])} -> {get_type_name(key[1])}"


# -----------------------------------------------------------------------------
# Default Converters
# -----------------------------------------------------------------------------


def _number_to_str(value: Any, target: Any) -> str:
    return str(value)


def _bool_to_str(value: bool, target: Any) -> str:
    return "true" if value else "false"


def _str_to_timedelta(value: str, target: Any) -> timedelta:
    """Parse simple durations such as ``10s``, ``5m`` or ``100ms``.

    A number without unit is read as milliseconds. Anything else (ISO 8601,
    ``HH:MM:SS``) is handed to pydantic.
    """
    match = _DURATION_PATTERN.match(value)
    if match is None:
        return _adapter(timedelta).validate_python(value)
    amount, unit = match.groups()
    unit = unit.lower()
    if unit not in _DURATION_UNITS:
        raise ConversionError(
            value,
            timedelta,
            f"unknown duration unit {unit!r}",
            [f"Use one of: {', '.join(u for u in _DURATION_UNITS if u)}"],
        )
    if unit == "ns":
        return timedelta(microseconds=int(amount) / 1000)
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def _str_to_enum(value: str, target: Any) -> enum.Enum:
    """Match enum members by name, ignoring case, ``-`` and ``_``."""
    enum_cls: Type[enum.Enum] = resolve_type(target)
    wanted = _lenient(value)
    for member_name, member in enum_cls.__members__.items():
        if _lenient(member_name) == wanted:
            return member
    return _adapter(enum_cls).validate_python(value)


def _lenient(value: str) -> str:
    return re.sub(r"[^0-9a-z]", "", value.lower())


def _register_defaults(registry: ConverterRegistry) -> None:
    registry.register(bool, str, _bool_to_str)
    for number_type in (int, float, Decimal):
        registry.register(number_type, str, _number_to_str)
    registry.register(str, timedelta, _str_to_timedelta)
    registry.register(str, enum.Enum, _str_to_enum, include_subclasses=True)


# -----------------------------------------------------------------------------
# Bind Converter
# -----------------------------------------------------------------------------


@lru_cache(maxsize=256)
def _cached_adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _adapter(annotation: Any) -> TypeAdapter:
    try:
        return _cached_adapter(annotation)
    except TypeError:
        # unhashable annotation metadata
        return TypeAdapter(annotation)


class BindConverter:
    """Converts raw property values to target annotations.

    Attributes:
        registry: The converters consulted before pydantic validation.
    """

    def __init__(self, registry: Optional[ConverterRegistry] = None):
        if registry is None:
            registry = ConverterRegistry()
            _register_defaults(registry)
        self.registry = registry

    def can_convert(self, value: Any, target: Any) -> bool:
        """Whether :meth:`convert` has a route for ``value`` to ``target``."""
        try:
            self.convert(value, target)
        except ConverterNotFoundError:
            return False
        except ConversionError:
            return True
        return True

    def convert(self, value: Any, target: Any) -> Any:
        """Convert ``value`` to ``target`` (a :class:`Bindable` or an annotation).

        Raises:
            ConverterNotFoundError: If no route exists for the type pair.
            ConversionError: If a converter rejects the value.
        """
        if value is None:
            return None
        annotation = target.type if isinstance(target, Bindable) else target
        resolved = resolve_type(annotation)
        if self._satisfies(value, annotation, resolved):
            return value

        converter = self.registry.find(type(value), resolved)
        try:
            if converter is not None:
                return converter(value, annotation)
            if is_data_object_type(resolved) and not isinstance(value, Mapping):
                raise ConverterNotFoundError(value, annotation)
            return _adapter(annotation).validate_python(value)
        except ValidationError as ex:
            raise ConversionError(
                value,
                annotation,
                "; ".join(error["msg"] for error in ex.errors()),
                [f"Provide a value that is a valid {get_type_name(annotation)}"],
            ) from ex
        except (PydanticSchemaGenerationError, PydanticUserError) as ex:
            raise ConverterNotFoundError(value, annotation) from ex

    @staticmethod
    def _satisfies(value: Any, annotation: Any, resolved: type) -> bool:
        try:
            # int passes typeguard's check for float; keep the declared class
            if resolved is not object and not isinstance(value, resolved):
                return False
            check_type(value, annotation, collection_check_strategy=CollectionCheckStrategy.ALL_ITEMS)
        except (TypeCheckError, TypeError):
            return False
        return True

    def __repr__(self) -> str:
        return f"BindConverter(converters={len(self.registry)})"
