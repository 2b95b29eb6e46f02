"""Descriptors of what is being bound."""

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, Generic, List, Optional, Tuple, Type, TypeVar

from ..utils import get_type_arguments, get_type_name, resolve_type

__all__ = ["Bindable", "BindMethod", "BindRestriction", "bind_method"]

T = TypeVar("T")
C = TypeVar("C", bound=type)

BIND_METHOD_ATTRIBUTE = "__confbind_bind_method__"


class BindMethod(enum.Enum):
    """Strategy used to bind a data object."""

    VALUE_OBJECT = "value_object"
    """Bind constructor parameters, then construct."""

    PROPERTIES = "properties"
    """Construct with no arguments, then assign properties."""


class BindRestriction(enum.Enum):
    """Restrictions that can be applied when binding values."""

    NO_DIRECT_PROPERTY = "no_direct_property"
    """Do not bind direct property values to the target."""


def bind_method(method: BindMethod) -> Callable[[C], C]:
    """Class decorator declaring the preferred bind method of a data object.

    Example:
        >>> @bind_method(BindMethod.PROPERTIES)
        ... class Settings:
        ...     debug: bool = False
    """

    def decorator(cls: C) -> C:
        setattr(cls, BIND_METHOD_ATTRIBUTE, method)
        return cls

    return decorator


@dataclass(frozen=True)
class Bindable(Generic[T]):
    """An immutable description of a bind target.

    Attributes:
        type: The target annotation (``int``, ``List[str]``, a class, ...).
        value: An existing value to bind into, if any.
        restrictions: Restrictions applied to this bind.
        bind_method: The data object strategy to use; when omitted the class
            preference set with :func:`bind_method` is used, and failing that
            both strategies are tried.
    """

    type: Any
    value: Optional[T] = None
    restrictions: FrozenSet[BindRestriction] = field(default_factory=frozenset)
    bind_method: Optional[BindMethod] = None

    def __post_init__(self) -> None:
        if self.bind_method is None:
            declared = getattr(self.resolved_type, BIND_METHOD_ATTRIBUTE, None)
            if declared is not None:
                object.__setattr__(self, "bind_method", declared)

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, target: Any) -> "Bindable":
        """Return ``target`` if it already is a Bindable, else wrap the type."""
        if isinstance(target, Bindable):
            return target
        return cls(type=target)

    @classmethod
    def of_instance(cls, instance: T) -> "Bindable[T]":
        """Bindable that binds into an existing instance."""
        return cls(type=type(instance), value=instance)

    @classmethod
    def list_of(cls, element_type: Type[T]) -> "Bindable[List[T]]":
        return cls(type=List[element_type])

    @classmethod
    def map_of(cls, key_type: Any, value_type: Any) -> "Bindable[Dict[Any, Any]]":
        return cls(type=Dict[key_type, value_type])

    def with_existing_value(self, value: Optional[T]) -> "Bindable[T]":
        return replace(self, value=value)

    def with_bind_restrictions(self, *restrictions: BindRestriction) -> "Bindable[T]":
        return replace(self, restrictions=self.restrictions | frozenset(restrictions))

    def with_bind_method(self, method: Optional[BindMethod]) -> "Bindable[T]":
        return replace(self, bind_method=method)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def resolved_type(self) -> type:
        """The runtime class that drives dispatch."""
        return resolve_type(self.type)

    @property
    def element_types(self) -> Tuple[Any, ...]:
        """Generic arguments of the target annotation."""
        return get_type_arguments(self.type)

    def has_bind_restriction(self, restriction: BindRestriction) -> bool:
        return restriction in self.restrictions

    def __repr__(self) -> str:
        parts = [f"type={get_type_name(self.type)}"]
        if self.value is not None:
            parts.append(f"value={type(self.value).__name__}")
        if self.restrictions:
            parts.append(f"restrictions={sorted(r.name for r in self.restrictions)}")
        if self.bind_method is not None:
            parts.append(f"bind_method={self.bind_method.name}")
        return f"Bindable({', '.join(parts)})"
