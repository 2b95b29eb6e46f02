r"""Binders for data objects: compound, non-aggregate targets.

Two strategies are available and tried in order until one produces a value:

    ConstructorBinder  binds each constructor parameter, then constructs
                       (dataclasses, named tuples, pydantic models, classes
                       with a required ``__init__`` argument)
    PropertyBinder     default-constructs, then assigns each annotated
                       attribute or settable ``property``

\dot
digraph DataObjectBinder {
    node [shape=rectangle];
    "DataObjectBinder" -> "ConstructorBinder";
    "DataObjectBinder" -> "PropertyBinder";
    "ConstructorBinder" -> "BindConstructorProvider";
}
\enddot
"""

import collections.abc
import dataclasses
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, Iterator, List, NamedTuple, Optional, Tuple, TypeVar

from pydantic import BaseModel
from pydantic_core import PydanticUndefined
from typing_extensions import get_origin, get_type_hints

from ..core.bindable import Bindable, BindMethod
from ..core.context import BindContext
from ..sources import PropertyName
from ..utils import CreationError, get_type_name, is_data_object_type

__all__ = [
    "PropertyBinderCallback",
    "constructor_binding",
    "BindParameter",
    "BindConstructor",
    "BindConstructorProvider",
    "DataObjectBinder",
    "ConstructorBinder",
    "PropertyBinder",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONSTRUCTOR_BINDING_ATTRIBUTE = "__confbind_constructor_binding__"

PropertyBinderCallback = Callable[[str, Bindable], Any]
"""``property_binder(property_name, target) -> value | None``."""

_MISSING = inspect.Parameter.empty


def constructor_binding(obj: T) -> T:
    """Mark a class, or one of its classmethods, for constructor binding.

    On a class, the ``__init__`` is used even when every argument has a
    default. On a classmethod, that factory is used instead of ``__init__``.

    Example:
        >>> @constructor_binding
        ... class Endpoint:
        ...     def __init__(self, host: str = "localhost", port: int = 80): ...
        ...
        >>> class Window:
        ...     @constructor_binding
        ...     @classmethod
        ...     def of(cls, width: int, height: int): ...
    """
    target = obj.__func__ if isinstance(obj, (classmethod, staticmethod)) else obj
    setattr(target, CONSTRUCTOR_BINDING_ATTRIBUTE, True)
    return obj


# -----------------------------------------------------------------------------
# Bind Constructor
# -----------------------------------------------------------------------------


class BindParameter(NamedTuple):
    """A constructor argument bound from ``name`` and passed as ``keyword``."""

    name: str
    type: Any
    keyword: str
    default: Any = _MISSING
    default_factory: Optional[Callable[[], Any]] = None

    @property
    def required(self) -> bool:
        return self.default is _MISSING and self.default_factory is None


class BindConstructor(NamedTuple):
    """The callable used to build a value object and the arguments it takes."""

    type: type
    parameters: Tuple[BindParameter, ...]
    factory: Callable[..., Any]

    def instantiate(self, arguments: Dict[str, Any]) -> Any:
        return self.factory(**arguments)

    @property
    def all_optional(self) -> bool:
        return all(not param.required for param in self.parameters)


class BindConstructorProvider:
    """Decides whether, and how, a type is bound through its constructor.

    Eligible types, in lookup order:
      - classes with a classmethod marked by :func:`constructor_binding`
      - dataclasses, named tuples and pydantic models (their fields)
      - classes marked by :func:`constructor_binding`
      - classes whose ``__init__`` has a required argument
      - any class whose ``__init__`` takes arguments, when it is nested in
        another constructor binding or prefers ``BindMethod.VALUE_OBJECT``

    Targets that already carry an instance are never constructor bound.
    """

    DEFAULT: "BindConstructorProvider"

    def get_bind_constructor(self, target: Any, is_nested_constructor_binding: bool) -> Optional[BindConstructor]:
        bindable = Bindable.of(target)
        if bindable.value is not None:
            return None
        cls = bindable.resolved_type
        if not is_data_object_type(cls):
            return None
        factory = _marked_factory(cls)
        if factory is not None:
            return _from_signature(cls, factory)
        if dataclasses.is_dataclass(cls):
            return _from_dataclass(cls)
        if _is_named_tuple(cls):
            return _from_named_tuple(cls)
        if issubclass(cls, BaseModel):
            return _from_model(cls)
        constructor = _from_signature(cls, cls)
        if constructor is None:
            return None
        if getattr(cls, CONSTRUCTOR_BINDING_ATTRIBUTE, False) or not constructor.all_optional:
            return constructor
        if is_nested_constructor_binding or bindable.bind_method is BindMethod.VALUE_OBJECT:
            return constructor
        return None


BindConstructorProvider.DEFAULT = BindConstructorProvider()


def _marked_factory(cls: type) -> Optional[Callable[..., Any]]:
    for klass in cls.__mro__:
        for member in vars(klass).values():
            if isinstance(member, classmethod) and getattr(member.__func__, CONSTRUCTOR_BINDING_ATTRIBUTE, False):
                return getattr(cls, member.__func__.__name__)
    return None


def _is_named_tuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def _type_hints(obj: Any) -> Dict[str, Any]:
    try:
        localns = {obj.__name__: obj} if isinstance(obj, type) else None
        return get_type_hints(obj, localns=localns)
    except (NameError, TypeError, AttributeError):  # unresolvable forward references
        logger.debug("Cannot resolve type hints of %r", obj, exc_info=True)
        return dict(getattr(obj, "__annotations__", {}))


def _from_dataclass(cls: type) -> Optional[BindConstructor]:
    hints = _type_hints(cls)
    params = tuple(
        BindParameter(
            name=field.name,
            type=hints.get(field.name, Any),
            keyword=field.name,
            default=_MISSING if field.default is dataclasses.MISSING else field.default,
            default_factory=None if field.default_factory is dataclasses.MISSING else field.default_factory,
        )
        for field in dataclasses.fields(cls)
        if field.init
    )
    return BindConstructor(cls, params, cls) if params else None


def _from_named_tuple(cls: type) -> Optional[BindConstructor]:
    hints = _type_hints(cls)
    defaults = getattr(cls, "_field_defaults", {})
    params = tuple(
        BindParameter(
            name=field,
            type=hints.get(field, Any),
            keyword=field,
            default=defaults.get(field, _MISSING),
        )
        for field in cls._fields
    )
    return BindConstructor(cls, params, cls) if params else None


def _from_model(cls: type) -> Optional[BindConstructor]:
    params = tuple(
        BindParameter(
            name=field_name,
            type=field.annotation if field.annotation is not None else Any,
            keyword=field.alias or field_name,
            default=_MISSING if field.default is PydanticUndefined else field.default,
            default_factory=field.default_factory,
        )
        for field_name, field in cls.model_fields.items()
    )
    return BindConstructor(cls, params, cls) if params else None


def _from_signature(cls: type, factory: Callable[..., Any]) -> Optional[BindConstructor]:
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        return None
    hints = _type_hints(factory.__init__ if factory is cls else factory)
    params: List[BindParameter] = []
    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.kind is param.POSITIONAL_ONLY:
            return None
        annotation = hints.get(param.name, param.annotation)
        params.append(
            BindParameter(
                name=param.name,
                type=Any if annotation is _MISSING else annotation,
                keyword=param.name,
                default=param.default,
            )
        )
    return BindConstructor(cls, tuple(params), factory) if params else None


# -----------------------------------------------------------------------------
# Data Object Binders
# -----------------------------------------------------------------------------


class DataObjectBinder(ABC):
    """A strategy that binds a data object from the properties below a name."""

    @abstractmethod
    def bind(
        self,
        name: PropertyName,
        target: Bindable,
        context: BindContext,
        property_binder: PropertyBinderCallback,
    ) -> Any:
        """Return the bound instance, or ``None`` when nothing could be bound."""

    @abstractmethod
    def create(self, target: Bindable, context: BindContext) -> Any:
        """Return a default instance without binding anything, or ``None``."""

    def on_unable_to_create_instance(self, target: Bindable, context: BindContext, error: CreationError) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s unable to create %s: %s", type(self).__name__, get_type_name(target.type), error.message)


class ConstructorBinder(DataObjectBinder):
    """Binds value objects through their constructor.

    Every parameter is bound below the object's name. An absent optional
    parameter keeps its default; an absent required parameter aborts the
    bind, which then reports nothing bound.
    """

    def __init__(self, provider: Optional[BindConstructorProvider] = None):
        self.provider = provider or BindConstructorProvider.DEFAULT

    def bind(self, name, target, context, property_binder):
        constructor = self.provider.get_bind_constructor(target, context.is_nested_constructor_binding())
        if constructor is None:
            return None
        arguments: Dict[str, Any] = {}
        with context.with_constructor_binding(constructor.type):
            for param in constructor.parameters:
                value = property_binder(param.name, Bindable.of(param.type))
                if value is not None:
                    arguments[param.keyword] = value
                elif param.required:
                    if logger.isEnabledFor(logging.DEBUG):
                        logger.debug("Missing required argument %r of %s at %s", param.name, constructor.type.__name__, name)
                    return None
        if not arguments:
            return None
        return constructor.instantiate(arguments)

    def create(self, target, context):
        constructor = self.provider.get_bind_constructor(target, context.is_nested_constructor_binding())
        if constructor is None or not constructor.all_optional:
            return None
        return constructor.instantiate({})


class _BeanProperty(NamedTuple):
    name: str
    type: Any


class PropertyBinder(DataObjectBinder):
    """Binds mutable objects by assigning their properties.

    The target's existing instance is used when there is one, otherwise the
    class is constructed with no arguments. Public annotated attributes and
    ``property`` objects with a setter are bound; nested data objects and
    mutable containers already held by the instance are bound into.
    """

    def bind(self, name, target, context, property_binder):
        cls = target.resolved_type
        if not self._is_supported(cls):
            return None
        instance = target.value if target.value is not None else self._instantiate(cls)
        if instance is None:
            return None
        bound = False
        for prop in self.get_properties(cls):
            prop_target = Bindable.of(prop.type)
            existing = self._existing_value(instance, prop.name)
            if existing is not None:
                prop_target = prop_target.with_existing_value(existing)
            value = property_binder(prop.name, prop_target)
            if value is not None:
                setattr(instance, prop.name, value)
                bound = True
        return instance if bound else None

    def create(self, target, context):
        cls = target.resolved_type
        if not self._is_supported(cls):
            return None
        return target.value if target.value is not None else self._instantiate(cls)

    @staticmethod
    def get_properties(cls: type) -> Iterator[_BeanProperty]:
        """Yield the public, assignable properties of ``cls``."""
        hints = _type_hints(cls)
        for prop_name, annotation in hints.items():
            if prop_name.startswith("_") or annotation is ClassVar or get_origin(annotation) is ClassVar:
                continue
            descriptor = inspect.getattr_static(cls, prop_name, None)
            if isinstance(descriptor, property) and descriptor.fset is None:
                continue
            yield _BeanProperty(prop_name, annotation)
        descriptors: Dict[str, property] = {}
        for klass in reversed(cls.__mro__):
            for prop_name, member in vars(klass).items():
                if isinstance(member, property):
                    descriptors[prop_name] = member
        for prop_name, member in descriptors.items():
            if prop_name.startswith("_") or prop_name in hints or member.fset is None:
                continue
            yield _BeanProperty(prop_name, _type_hints(member.fget).get("return", Any))

    @staticmethod
    def _is_supported(cls: type) -> bool:
        if not is_data_object_type(cls) or issubclass(cls, tuple):
            return False
        params = getattr(cls, "__dataclass_params__", None)
        return not (params is not None and params.frozen)

    @staticmethod
    def _instantiate(cls: type) -> Any:
        # Models validate on construction; they are only built by ConstructorBinder.
        if issubclass(cls, BaseModel):
            return None
        try:
            inspect.signature(cls).bind()
        except (TypeError, ValueError):
            return None
        return cls()

    @staticmethod
    def _existing_value(instance: Any, prop_name: str) -> Any:
        descriptor = inspect.getattr_static(type(instance), prop_name, None)
        if isinstance(descriptor, property):
            value = getattr(instance, prop_name, None)
        else:
            value = getattr(instance, "__dict__", {}).get(prop_name)
        if value is None:
            return None
        mutable = (
            collections.abc.MutableMapping,
            collections.abc.MutableSequence,
            collections.abc.MutableSet,
        )
        if isinstance(value, mutable) or is_data_object_type(type(value)):
            return value
        return None
