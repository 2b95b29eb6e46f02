import enum
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from confbind import Bindable, BindConverter, ConversionError, ConverterNotFoundError, ConverterRegistry
from confbind.utils import RegistryError, RegistryLookupError


class Color(enum.Enum):
    RED = "red"
    DARK_BLUE = "dark-blue"


@dataclass
class Point:
    x: int
    y: int


class Opaque:
    def __init__(self, payload):
        self.payload = payload


class Base:
    pass


class Derived(Base):
    pass


def parse_point(value, target):
    x, y = value.split(",")
    return Point(int(x), int(y))


@pytest.fixture
def converter():
    return BindConverter()


# -------------------------------------------------------------------
# BindConverter
# -------------------------------------------------------------------


def test_none_converts_to_none(converter):
    assert converter.convert(None, int) is None


def test_value_already_of_target_type_is_returned(converter):
    values = ["a", "b"]

    assert converter.convert(values, List[str]) is values


@pytest.mark.parametrize(
    "value, target, expected",
    [
        ("8080", int, 8080),
        ("1.5", float, 1.5),
        (1, float, 1.0),
        ("true", bool, True),
        ("off", bool, False),
        ("5", Optional[int], 5),
        (["1", "2"], List[int], [1, 2]),
        ({"a": "1"}, Dict[str, int], {"a": 1}),
        ("3.25", Decimal, Decimal("3.25")),
    ],
)
def test_convert_with_pydantic(converter, value, target, expected):
    result = converter.convert(value, target)

    assert result == expected
    assert type(result) is type(expected)


def test_convert_accepts_bindable(converter):
    assert converter.convert("5", Bindable.of(int)) == 5


def test_any_target_keeps_value(converter):
    value = object()

    assert converter.convert(value, Any) is value


def test_invalid_value_raises_conversion_error(converter):
    with pytest.raises(ConversionError) as exc_info:
        converter.convert("abc", int)

    assert exc_info.value.value == "abc"
    assert exc_info.value.target_type is int
    assert not isinstance(exc_info.value, ConverterNotFoundError)


@pytest.mark.parametrize(
    "value, expected",
    [(True, "true"), (False, "false"), (42, "42"), (1.5, "1.5"), (Decimal("2.50"), "2.50")],
)
def test_scalars_convert_to_text(converter, value, expected):
    assert converter.convert(value, str) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        ("10s", timedelta(seconds=10)),
        ("100", timedelta(milliseconds=100)),
        ("250ms", timedelta(milliseconds=250)),
        ("5m", timedelta(minutes=5)),
        ("2h", timedelta(hours=2)),
        ("1d", timedelta(days=1)),
        ("-3s", timedelta(seconds=-3)),
        (" 7 S ", timedelta(seconds=7)),
        ("1000ns", timedelta(microseconds=1)),
        ("30us", timedelta(microseconds=30)),
        ("PT1M", timedelta(minutes=1)),
    ],
)
def test_text_to_duration(converter, value, expected):
    assert converter.convert(value, timedelta) == expected


def test_unknown_duration_unit_fails(converter):
    with pytest.raises(ConversionError, match="unknown duration unit"):
        converter.convert("10x", timedelta)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("RED", Color.RED),
        ("red", Color.RED),
        ("dark-blue", Color.DARK_BLUE),
        ("DARK_BLUE", Color.DARK_BLUE),
        ("Dark_Blue", Color.DARK_BLUE),
        ("darkblue", Color.DARK_BLUE),
    ],
)
def test_text_to_enum_is_lenient(converter, value, expected):
    assert converter.convert(value, Color) is expected


def test_unknown_enum_member_fails(converter):
    with pytest.raises(ConversionError):
        converter.convert("green", Color)


def test_data_object_from_text_has_no_converter(converter):
    with pytest.raises(ConverterNotFoundError):
        converter.convert("text", Point)


def test_data_object_from_mapping_is_validated(converter):
    assert converter.convert({"x": "1", "y": "2"}, Point) == Point(1, 2)


def test_unsupported_schema_has_no_converter(converter):
    with pytest.raises(ConverterNotFoundError):
        converter.convert({"payload": 1}, Opaque)


def test_can_convert(converter):
    assert converter.can_convert("1", int)
    assert converter.can_convert("abc", int)
    assert not converter.can_convert("text", Point)


def test_registered_converter_takes_precedence():
    converter = BindConverter()
    converter.registry.register(str, Point, parse_point)

    assert converter.convert("1,2", Point) == Point(1, 2)


def test_custom_registry_has_no_defaults():
    converter = BindConverter(ConverterRegistry())

    assert len(converter.registry) == 0
    with pytest.raises(ConversionError):
        converter.convert(True, str)


def test_repr_counts_converters(converter):
    assert repr(converter) == f"BindConverter(converters={len(converter.registry)})"


# -------------------------------------------------------------------
# ConverterRegistry
# -------------------------------------------------------------------


def test_register_as_decorator():
    registry = ConverterRegistry()

    @registry.register(str, Point)
    def to_point(value, target):
        return parse_point(value, target)

    assert registry.get(str, Point) is to_point
    assert (str, Point) in registry
    assert list(registry) == [(str, Point)]


def test_duplicate_registration_fails():
    registry = ConverterRegistry()
    registry.register(str, Point, parse_point)

    with pytest.raises(RegistryError):
        registry.register(str, Point, parse_point)
    with pytest.raises(KeyError):
        registry.register(str, Point, parse_point, include_subclasses=True)


def test_find_walks_source_class_hierarchy():
    registry = ConverterRegistry()
    registry.register(Base, str, lambda value, target: "base")

    assert registry.find(Derived, str)(Derived(), str) == "base"
    assert registry.find(str, Base) is None


def test_include_subclasses_matches_target_subclasses():
    registry = ConverterRegistry()
    registry.register(str, Base, lambda value, target: target(), include_subclasses=True)

    assert (str, Derived) in registry
    assert (str, Point) not in registry


def test_exact_registration_wins_over_subclass_registration():
    registry = ConverterRegistry()
    registry.register(str, Base, lambda value, target: "hierarchy", include_subclasses=True)
    registry.register(str, Derived, lambda value, target: "exact")

    assert registry.get(str, Derived)("x", Derived) == "exact"


def test_unregister():
    registry = ConverterRegistry()
    registry.register(str, Point, parse_point)
    registry.register(str, Base, parse_point, include_subclasses=True)

    registry.unregister(str, Point)
    registry.unregister(str, Base)

    assert len(registry) == 0
    with pytest.raises(RegistryLookupError):
        registry.unregister(str, Point)


def test_get_missing_converter_fails():
    with pytest.raises(RegistryLookupError, match="not registered"):
        ConverterRegistry().get(str, Point)
