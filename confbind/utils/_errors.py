r"""Binding error hierarchy.

Every error raised by confbind carries a message, a list of actionable
suggestions and a context dictionary. The rendered message includes the
context entries and the suggestions so that a failure deep inside a recursive
bind is still readable at the top level.

Doxygen Dot Graph of Exception Hierarchy:
------------------------------------------
\dot
digraph ExceptionHierarchy {
    node [shape=rectangle];
    "Exception" -> "BindError";
    "BindError" -> "ConversionError";
    "ConversionError" -> "ConverterNotFoundError";
    "BindError" -> "CreationError";
    "BindError" -> "BindingError";
    "BindError" -> "UnboundElementsError";
    "BindError" -> "InvalidPropertyNameError";
    "BindError" -> "PlaceholderResolutionError";
    "BindError" -> "NoSuchElementError";
    "BindError" -> "RegistryError";
    "RegistryError" -> "RegistryLookupError";
}
\enddot
"""

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

if TYPE_CHECKING:
    from ..core.bindable import Bindable
    from ..sources.name import PropertyName
    from ..sources.property import ConfigurationProperty

__all__ = [
    "BindError",
    "ConversionError",
    "ConverterNotFoundError",
    "CreationError",
    "BindingError",
    "UnboundElementsError",
    "InvalidPropertyNameError",
    "PlaceholderResolutionError",
    "NoSuchElementError",
    "RegistryError",
    "RegistryLookupError",
    "get_type_name",
]


def get_type_name(tp: Any, qualname: bool = False) -> str:
    """
    Retrieve the name or qualified name of a type or annotation.

    Parameters:
        tp (Any): The class, typing construct or object.
        qualname (bool): If True, return the qualified name.

    Returns:
        str: The type's name.
    """
    if qualname and hasattr(tp, "__qualname__"):
        return getattr(tp, "__qualname__")
    if isinstance(tp, type):
        return tp.__name__
    return str(tp).replace("typing.", "")


# -----------------------------------------------------------------------------
# Base Exception
# -----------------------------------------------------------------------------


class BindError(Exception):
    """Base exception for binding errors with rich context."""

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}
        super().__init__(self._build_enhanced_message())

    def _build_enhanced_message(self) -> str:
        """Build enhanced error message with context and suggestions."""
        lines = [self.message]

        if "property_name" in self.context:
            lines.append(f"  Property: {self.context['property_name']}")
        if "target_type" in self.context:
            lines.append(f"  Target: {self.context['target_type']}")
        if "value" in self.context:
            lines.append(f"  Value: {self.context['value']!r}")
        if "origin" in self.context:
            lines.append(f"  Origin: {self.context['origin']}")

        if self.suggestions:
            lines.append("  Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"    • {suggestion}")

        return "\n".join(lines)


# -----------------------------------------------------------------------------
# Conversion Errors
# -----------------------------------------------------------------------------


class ConversionError(BindError, ValueError):
    """Raised when a converter rejects a value."""

    def __init__(
        self,
        value: Any,
        target_type: Any,
        reason: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.value = value
        self.target_type = target_type
        message = (
            f"Failed to convert {type(value).__name__} to {get_type_name(target_type)}"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            suggestions,
            {"value": value, "target_type": get_type_name(target_type)},
        )


class ConverterNotFoundError(ConversionError):
    """Raised when no converter exists for a source/target type pair."""

    def __init__(self, value: Any, target_type: Any):
        super().__init__(
            value,
            target_type,
            "no converter found",
            [
                "Bind the value through nested properties instead of a single value",
                "Register a converter for this type pair on the BindConverter",
            ],
        )


# -----------------------------------------------------------------------------
# Binding Errors
# -----------------------------------------------------------------------------


class CreationError(BindError, RuntimeError):
    """Raised when no data object binder can create the target instance."""

    pass


class BindingError(BindError):
    """Wraps any failure raised while binding a property name.

    Attributes:
        name: The property name being bound when the failure happened.
        target: The bindable that was being bound.
        property: The last configuration property matched, if any.
    """

    def __init__(
        self,
        name: "PropertyName",
        target: "Bindable",
        property: Optional["ConfigurationProperty"],
        cause: BaseException,
    ):
        self.name = name
        self.target = target
        self.property = property
        context: Dict[str, Any] = {
            "property_name": str(name),
            "target_type": get_type_name(target.type),
        }
        if property is not None:
            context["value"] = property.value
            if property.origin:
                context["origin"] = property.origin
        suggestions = list(getattr(cause, "suggestions", []))
        super().__init__(
            f"Failed to bind properties under '{name}' to "
            f"{get_type_name(target.type)}: {getattr(cause, 'message', cause)}",
            suggestions,
            context,
        )


class UnboundElementsError(BindError):
    """Raised when properties below a bound name were left unused."""

    def __init__(self, unbound: Iterable["ConfigurationProperty"]):
        self.unbound_properties = list(unbound)
        names = ", ".join(str(p.name) for p in self.unbound_properties)
        super().__init__(
            f"The elements [{names}] were left unbound",
            ["Check the property names for typos", "Remove the unused properties"],
            {"unbound": names},
        )


# -----------------------------------------------------------------------------
# Collaborator Errors
# -----------------------------------------------------------------------------


class InvalidPropertyNameError(BindError, ValueError):
    """Raised when a property name cannot be parsed."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(
            f"Configuration property name '{name}' is not valid: {reason}",
            [
                "Use dot separated elements made of letters, digits, '-' and '_'",
                "Wrap keys containing other characters in brackets, e.g. map[a/b]",
            ],
            {"property_name": name},
        )


class PlaceholderResolutionError(BindError, ValueError):
    """Raised when a placeholder cannot be resolved."""

    pass


class NoSuchElementError(BindError, LookupError):
    """Raised when reading the value of an unbound BindResult."""

    pass


# -----------------------------------------------------------------------------
# Registry Errors
# -----------------------------------------------------------------------------


class RegistryError(BindError, KeyError):
    """Raised for invalid converter registrations."""

    def __str__(self) -> str:
        # KeyError quotes its argument
        return self.args[0] if self.args else ""


class RegistryLookupError(RegistryError):
    """Raised when a converter is not registered."""

    pass
