r"""The binder: entry point and recursive binding algorithm.

A bind attempt for a name runs through the following steps:

    1. ``on_start`` may replace the target or bypass the attempt.
    2. The dispatcher looks for a property matching the name, then binds the
       target as an aggregate, as a converted property value, or as a data
       object built from the properties below the name.
    3. The outcome pipeline passes the result through ``on_success``, or, when
       nothing was bound and creation was requested, creates a default
       instance and passes it through ``on_create``.
    4. ``on_finish`` observes the final result.

Any error raised along the way is offered to ``on_failure`` and otherwise
surfaces as a :class:`~confbind.utils.BindingError` naming the property that
was being bound.

\dot
digraph Bind {
    rankdir=LR;
    node [shape=rectangle];
    "on_start" -> "find_property" -> "aggregate" -> "outcome";
    "find_property" -> "property" -> "outcome";
    "find_property" -> "data_object" -> "outcome";
    "property" -> "data_object" [label="no converter"];
}
\enddot
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from ..binders import (
    AggregateBinder,
    BindConstructorProvider,
    ConstructorBinder,
    DataObjectBinder,
    PropertyBinder,
    get_aggregate_binder,
)
from ..sources import (
    ConfigurationProperty,
    EnvironmentPropertySource,
    PlaceholdersResolver,
    PropertyName,
    PropertySource,
    PropertyState,
    SourcesPlaceholdersResolver,
)
from ..utils import BindingError, ConverterNotFoundError, CreationError, get_type_name, is_unbindable_type, log_debug
from .bindable import Bindable, BindMethod, BindRestriction
from .context import BindContext
from .converter import BindConverter
from .handler import BIND_BYPASS, BindHandler
from .result import BindResult

__all__ = ["Binder"]

logger = logging.getLogger(__name__)


class Binder:
    """Binds properties from an ordered list of sources into typed objects.

    Parameters:
        *sources: The property sources, searched in order. A single iterable
            of sources is accepted as well.
        placeholders_resolver: Resolves ``${...}`` placeholders in raw values
            before conversion (none by default).
        converter: Converts raw values to target types.
        default_bind_handler: Handler used when a bind call passes none.
        constructor_provider: Decides which types are constructor bound.

    Example:
        >>> binder = Binder(MapPropertySource({"server": {"port": "8080"}}))
        >>> binder.bind("server.port", int).get()
        8080
    """

    def __init__(
        self,
        *sources: Union[PropertySource, Iterable[PropertySource]],
        placeholders_resolver: Optional[PlaceholdersResolver] = None,
        converter: Optional[BindConverter] = None,
        default_bind_handler: Optional[BindHandler] = None,
        constructor_provider: Optional[BindConstructorProvider] = None,
    ):
        if len(sources) == 1 and not isinstance(sources[0], PropertySource):
            sources = tuple(sources[0])
        for source in sources:
            if not isinstance(source, PropertySource):
                raise TypeError(f"Expected a PropertySource, got {type(source).__name__}")
        self._sources: Tuple[PropertySource, ...] = tuple(sources)
        self._placeholders_resolver = placeholders_resolver or PlaceholdersResolver.NONE
        self._converter = converter or BindConverter()
        self._default_bind_handler = default_bind_handler or BindHandler.DEFAULT
        constructor_binder = ConstructorBinder(constructor_provider)
        property_binder = PropertyBinder()
        self._data_object_binders: Dict[Optional[BindMethod], Tuple[DataObjectBinder, ...]] = {
            None: (constructor_binder, property_binder),
            BindMethod.VALUE_OBJECT: (constructor_binder,),
            BindMethod.PROPERTIES: (property_binder,),
        }

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_sources(cls, sources: Iterable[PropertySource], **kwargs: Any) -> "Binder":
        """Binder over ``sources`` with placeholders resolved against the same sources."""
        sources = tuple(sources)
        kwargs.setdefault("placeholders_resolver", SourcesPlaceholdersResolver(sources))
        return cls(*sources, **kwargs)

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None, *extra_sources: PropertySource) -> "Binder":
        """Binder over the environment variables followed by ``extra_sources``."""
        return cls.from_sources((EnvironmentPropertySource(environ),) + extra_sources)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def sources(self) -> Sequence[PropertySource]:
        return self._sources

    @property
    def converter(self) -> BindConverter:
        return self._converter

    @property
    def placeholders_resolver(self) -> PlaceholdersResolver:
        return self._placeholders_resolver

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @log_debug
    def bind(
        self,
        name: Union[str, PropertyName],
        target: Any,
        handler: Optional[BindHandler] = None,
    ) -> BindResult:
        """Bind the properties at ``name`` to ``target`` (a type or a :class:`Bindable`).

        Returns:
            BindResult: Unbound when nothing matched ``name``.

        Raises:
            BindingError: If binding failed and the handler did not recover.
        """
        return BindResult.of(self._bind_top_level(name, target, handler, create=False))

    @log_debug
    def bind_or_create(
        self,
        name: Union[str, PropertyName],
        target: Any,
        handler: Optional[BindHandler] = None,
    ) -> Any:
        """Like :meth:`bind` but creates a default instance when nothing matched.

        Raises:
            BindingError: If binding failed, or no default instance could be
                created (the cause is then a :class:`CreationError`).
        """
        return self._bind_top_level(name, target, handler, create=True)

    def _bind_top_level(self, name: Any, target: Any, handler: Optional[BindHandler], create: bool) -> Any:
        name = PropertyName.of(name)
        target = Bindable.of(target)
        handler = handler or self._default_bind_handler
        context = BindContext(self)
        return self._bind(name, target, handler, context, False, create)

    # -------------------------------------------------------------------------
    # Outcome Pipeline
    # -------------------------------------------------------------------------

    def _bind(
        self,
        name: PropertyName,
        target: Bindable,
        handler: BindHandler,
        context: BindContext,
        allow_recursive_binding: bool,
        create: bool,
    ) -> Any:
        try:
            replacement = handler.on_start(name, target, context)
            if replacement is BIND_BYPASS:
                return self._handle_bind_result(name, target, handler, context, None, create)
            if replacement is not None:
                target = replacement
            bound = self._bind_object(name, target, handler, context, allow_recursive_binding)
            return self._handle_bind_result(name, target, handler, context, bound, create)
        except Exception as ex:
            return self._handle_bind_error(name, target, handler, context, ex)

    def _handle_bind_result(
        self,
        name: PropertyName,
        target: Bindable,
        handler: BindHandler,
        context: BindContext,
        result: Any,
        create: bool,
    ) -> Any:
        if result is not None:
            replaced = handler.on_success(name, target, context, result)
            if replaced is not None:
                result = replaced
            result = context.converter.convert(result, target)
        if result is None and create:
            result = self._create(target, context)
            replaced = handler.on_create(name, target, context, result)
            if replaced is not None:
                result = replaced
            result = context.converter.convert(result, target)
        handler.on_finish(name, target, context, result)
        return context.converter.convert(result, target)

    def _create(self, target: Bindable, context: BindContext) -> Any:
        binders = self._data_object_binders[target.bind_method]
        for binder in binders:
            instance = binder.create(target, context)
            if instance is not None:
                return instance
        error = CreationError(
            f"Unable to create instance for {get_type_name(target.type)}",
            [
                "Provide properties for the required constructor arguments",
                "Give every constructor argument a default value",
            ],
            {"target_type": get_type_name(target.type)},
        )
        for binder in binders:
            binder.on_unable_to_create_instance(target, context, error)
        raise error

    def _handle_bind_error(
        self,
        name: PropertyName,
        target: Bindable,
        handler: BindHandler,
        context: BindContext,
        error: Exception,
    ) -> Any:
        try:
            result = handler.on_failure(name, target, context, error)
            return context.converter.convert(result, target)
        except BindingError:
            raise
        except Exception as ex:
            raise BindingError(name, target, context.configuration_property, ex) from ex

    # -------------------------------------------------------------------------
    # Dispatcher
    # -------------------------------------------------------------------------

    def _bind_object(
        self,
        name: PropertyName,
        target: Bindable,
        handler: BindHandler,
        context: BindContext,
        allow_recursive_binding: bool,
    ) -> Any:
        prop = self._find_property(name, target, context)
        if prop is None and context.depth != 0 and self._contains_no_descendant_of(context.sources, name):
            return None
        aggregate_binder = get_aggregate_binder(target, context)
        if aggregate_binder is not None:
            return self._bind_aggregate(name, target, handler, context, aggregate_binder)
        if prop is not None:
            try:
                return self._bind_property(target, context, prop)
            except ConverterNotFoundError:
                instance = self._bind_data_object(name, target, handler, context, allow_recursive_binding)
                if instance is not None:
                    return instance
                raise
        return self._bind_data_object(name, target, handler, context, allow_recursive_binding)

    @staticmethod
    def _find_property(name: PropertyName, target: Bindable, context: BindContext) -> Optional[ConfigurationProperty]:
        if name.is_empty() or target.has_bind_restriction(BindRestriction.NO_DIRECT_PROPERTY):
            return None
        for source in context.sources:
            prop = source.get_property(name)
            if prop is not None:
                return prop
        return None

    @staticmethod
    def _contains_no_descendant_of(sources: Iterable[PropertySource], name: PropertyName) -> bool:
        return all(source.contains_descendant_of(name) is PropertyState.ABSENT for source in sources)

    def _bind_aggregate(
        self,
        name: PropertyName,
        target: Bindable,
        handler: BindHandler,
        context: BindContext,
        aggregate_binder: AggregateBinder,
    ) -> Any:
        def element_binder(item_name: PropertyName, item_target: Bindable, source: Optional[PropertySource] = None) -> Any:
            allow_recursive_binding = aggregate_binder.is_allow_recursive_binding(source)
            with context.with_source(source):
                return self._bind(item_name, item_target, handler, context, allow_recursive_binding, False)

        with context.with_increased_depth():
            return aggregate_binder.bind(name, target, element_binder)

    @staticmethod
    def _bind_property(target: Bindable, context: BindContext, prop: ConfigurationProperty) -> Any:
        context.set_configuration_property(prop)
        value = context.placeholders_resolver.resolve_placeholders(prop.value)
        return context.converter.convert(value, target)

    def _bind_data_object(
        self,
        name: PropertyName,
        target: Bindable,
        handler: BindHandler,
        context: BindContext,
        allow_recursive_binding: bool,
    ) -> Any:
        if self._is_unbindable_bean(name, target, context):
            return None
        type_ = target.resolved_type
        if not allow_recursive_binding and context.is_binding_data_object(type_):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Skipping recursive bind of %s at %s", type_.__name__, name)
            return None

        def property_binder(property_name: str, property_target: Bindable) -> Any:
            return self._bind(name.append(property_name), property_target, handler, context, False, False)

        with context.with_data_object(type_):
            for binder in self._data_object_binders[target.bind_method]:
                instance = binder.bind(name, target, context, property_binder)
                if instance is not None:
                    return instance
        return None

    @staticmethod
    def _is_unbindable_bean(name: PropertyName, target: Bindable, context: BindContext) -> bool:
        for source in context.sources:
            if source.contains_descendant_of(name) is PropertyState.PRESENT:
                return False
        return is_unbindable_type(target.type)

    def __repr__(self) -> str:
        return f"Binder(sources={list(self._sources)!r})"
