"""Public API for the binding core.

Exports:
    Binder: entry point binding property names to typed targets.
    Bindable / BindMethod / BindRestriction / bind_method: target descriptors.
    BindContext: per-call binding state handed to handlers.
    BindHandler and its variants: hooks around every bind attempt.
    BindResult: the outcome of :meth:`Binder.bind`.
    BindConverter / ConverterRegistry: value conversion.
"""

from .bindable import Bindable, BindMethod, BindRestriction, bind_method
from .result import BindResult
from .context import BindContext
from .handler import (
    BIND_BYPASS,
    AbstractBindHandler,
    BindHandler,
    IgnoreErrorsBindHandler,
    IgnoreTopLevelConverterNotFoundBindHandler,
    LoggingBindHandler,
    NoUnboundElementsBindHandler,
)
from .converter import BindConverter, Converter, ConverterRegistry
from .binder import Binder

__all__ = [
    "Binder",
    "Bindable",
    "BindMethod",
    "BindRestriction",
    "bind_method",
    "BindResult",
    "BindContext",
    "BIND_BYPASS",
    "BindHandler",
    "AbstractBindHandler",
    "IgnoreErrorsBindHandler",
    "IgnoreTopLevelConverterNotFoundBindHandler",
    "NoUnboundElementsBindHandler",
    "LoggingBindHandler",
    "Converter",
    "ConverterRegistry",
    "BindConverter",
]
