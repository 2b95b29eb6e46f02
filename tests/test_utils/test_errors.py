import pytest

from confbind import (
    Bindable,
    BindError,
    BindingError,
    ConfigurationProperty,
    ConversionError,
    ConverterNotFoundError,
    CreationError,
    NoSuchElementError,
    PropertyName,
    UnboundElementsError,
)
from confbind.utils import RegistryError, RegistryLookupError, get_type_name

# -------------------------------------------------------------------
# Hierarchy
# -------------------------------------------------------------------


@pytest.mark.parametrize(
    "error_cls, bases",
    [
        (ConversionError, (BindError, ValueError)),
        (ConverterNotFoundError, (ConversionError,)),
        (CreationError, (BindError, RuntimeError)),
        (BindingError, (BindError,)),
        (UnboundElementsError, (BindError,)),
        (NoSuchElementError, (BindError, LookupError)),
        (RegistryError, (BindError, KeyError)),
        (RegistryLookupError, (RegistryError,)),
    ],
)
def test_error_hierarchy(error_cls, bases):
    for base in bases:
        assert issubclass(error_cls, base)


# -------------------------------------------------------------------
# Messages
# -------------------------------------------------------------------


def test_bind_error_renders_context_and_suggestions():
    """Context entries and suggestions are part of the rendered message."""
    error = BindError(
        "Something failed",
        ["Try this", "Or that"],
        {"property_name": "a.b", "target_type": "int", "value": "x", "origin": "env"},
    )

    assert str(error).splitlines() == [
        "Something failed",
        "  Property: a.b",
        "  Target: int",
        "  Value: 'x'",
        "  Origin: env",
        "  Suggestions:",
        "    • Try this",
        "    • Or that",
    ]
    assert error.message == "Something failed"


def test_conversion_error_message():
    error = ConversionError("abc", int, "not a number")

    assert error.message == "Failed to convert str to int: not a number"
    assert error.context == {"value": "abc", "target_type": "int"}


def test_converter_not_found_has_suggestions():
    error = ConverterNotFoundError("abc", dict)

    assert "no converter found" in error.message
    assert error.suggestions


def test_binding_error_describes_property():
    prop = ConfigurationProperty(name=PropertyName.of("server.port"), value="x", origin="app.yaml")
    cause = ConversionError("x", int, "not a number", ["Use digits"])

    error = BindingError(PropertyName.of("server.port"), Bindable.of(int), prop, cause)

    assert error.name == PropertyName.of("server.port")
    assert error.property is prop
    assert error.message == "Failed to bind properties under 'server.port' to int: Failed to convert str to int: not a number"
    assert error.context["origin"] == "app.yaml"
    assert error.suggestions == ["Use digits"]


def test_binding_error_without_property():
    error = BindingError(PropertyName.of("a"), Bindable.of(str), None, RuntimeError("boom"))

    assert error.property is None
    assert "value" not in error.context
    assert error.message.endswith(": boom")


def test_unbound_elements_error_lists_names():
    props = [ConfigurationProperty(name=PropertyName.of(n), value="1") for n in ("a.x", "a.y")]

    error = UnboundElementsError(props)

    assert error.unbound_properties == props
    assert error.message == "The elements [a.x, a.y] were left unbound"


def test_registry_error_str_is_not_quoted():
    assert str(RegistryError("plain message")) == "plain message"


@pytest.mark.parametrize(
    "tp, qualname, expected",
    [
        (int, False, "int"),
        (dict, True, "dict"),
        ("List[int]", False, "List[int]"),
    ],
)
def test_get_type_name(tp, qualname, expected):
    assert get_type_name(tp, qualname) == expected
