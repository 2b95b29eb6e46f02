"""Strategies used by the binder for aggregates and data objects.

Exports:
    MapBinder / CollectionBinder / ArrayBinder: aggregate binders, selected
        with :func:`get_aggregate_binder`.
    ConstructorBinder / PropertyBinder: data object strategies.
    BindConstructorProvider: decides which types are constructor bound.
    constructor_binding: decorator forcing constructor binding.
"""

from .aggregate import (
    AggregateBinder,
    ArrayBinder,
    CollectionBinder,
    ElementBinder,
    IndexedElementsBinder,
    MapBinder,
    get_aggregate_binder,
)
from .data_object import (
    BindConstructor,
    BindConstructorProvider,
    BindParameter,
    ConstructorBinder,
    DataObjectBinder,
    PropertyBinder,
    PropertyBinderCallback,
    constructor_binding,
)

__all__ = [
    "ElementBinder",
    "AggregateBinder",
    "MapBinder",
    "IndexedElementsBinder",
    "CollectionBinder",
    "ArrayBinder",
    "get_aggregate_binder",
    "PropertyBinderCallback",
    "constructor_binding",
    "BindParameter",
    "BindConstructor",
    "BindConstructorProvider",
    "DataObjectBinder",
    "ConstructorBinder",
    "PropertyBinder",
]
