r"""Bind handlers: hooks invoked around every bind attempt.

A handler sees five events per attempt:

    on_start   may replace the target, keep it (``None``) or bypass the bind
               entirely by returning :data:`BIND_BYPASS`
    on_success may transform the bound value (``None`` keeps it)
    on_create  may transform a freshly created value (``None`` keeps it)
    on_failure may recover from an error by returning a value (``None``
               recovers as "not bound") or re-raise
    on_finish  observes the final result

\dot
digraph BindHandler {
    node [shape=rectangle];
    "BindHandler" -> "AbstractBindHandler";
    "AbstractBindHandler" -> "IgnoreErrorsBindHandler";
    "AbstractBindHandler" -> "IgnoreTopLevelConverterNotFoundBindHandler";
    "AbstractBindHandler" -> "NoUnboundElementsBindHandler";
    "AbstractBindHandler" -> "LoggingBindHandler";
}
\enddot
"""

import logging
from typing import Any, Callable, Dict, Optional, Set

from ..sources import ConfigurationProperty, IterablePropertySource, PropertyName, PropertySource
from ..utils import ConverterNotFoundError, UnboundElementsError
from .bindable import Bindable
from .context import BindContext

__all__ = [
    "BIND_BYPASS",
    "BindHandler",
    "AbstractBindHandler",
    "IgnoreErrorsBindHandler",
    "IgnoreTopLevelConverterNotFoundBindHandler",
    "NoUnboundElementsBindHandler",
    "LoggingBindHandler",
]

logger = logging.getLogger(__name__)


class _BindBypass:
    __slots__ = ()

    def __repr__(self) -> str:
        return "BIND_BYPASS"


BIND_BYPASS = _BindBypass()
"""Returned from :meth:`BindHandler.on_start` to skip a bind."""


class BindHandler:
    """Handler with no-op hooks; the default when callers pass none."""

    DEFAULT: "BindHandler"

    def on_start(self, name: PropertyName, target: Bindable, context: BindContext) -> Any:
        return None

    def on_success(self, name: PropertyName, target: Bindable, context: BindContext, result: Any) -> Any:
        return None

    def on_create(self, name: PropertyName, target: Bindable, context: BindContext, result: Any) -> Any:
        return None

    def on_failure(self, name: PropertyName, target: Bindable, context: BindContext, error: Exception) -> Any:
        raise error

    def on_finish(self, name: PropertyName, target: Bindable, context: BindContext, result: Any) -> None:
        pass


BindHandler.DEFAULT = BindHandler()


class AbstractBindHandler(BindHandler):
    """Base class for handlers that delegate to a parent handler."""

    def __init__(self, parent: Optional[BindHandler] = None):
        self.parent = parent if parent is not None else BindHandler.DEFAULT

    def on_start(self, name, target, context):
        return self.parent.on_start(name, target, context)

    def on_success(self, name, target, context, result):
        return self.parent.on_success(name, target, context, result)

    def on_create(self, name, target, context, result):
        return self.parent.on_create(name, target, context, result)

    def on_failure(self, name, target, context, error):
        return self.parent.on_failure(name, target, context, error)

    def on_finish(self, name, target, context, result):
        self.parent.on_finish(name, target, context, result)


class IgnoreErrorsBindHandler(AbstractBindHandler):
    """Recovers from every failure, falling back to the target's existing value."""

    def on_failure(self, name, target, context, error):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Ignoring failure binding %s: %s", name, error)
        return target.value


class IgnoreTopLevelConverterNotFoundBindHandler(AbstractBindHandler):
    """Ignores a missing converter for the top-level name only.

    Useful when a whole object is bound at a name that may also carry a plain
    value that cannot be converted into it.
    """

    def on_failure(self, name, target, context, error):
        if context.depth == 0 and isinstance(error, ConverterNotFoundError):
            return None
        return super().on_failure(name, target, context, error)


class NoUnboundElementsBindHandler(AbstractBindHandler):
    """Fails when iterable sources hold properties that were never bound.

    The check runs when the top-level bind finishes. Create a new handler for
    each top-level bind: it records the names bound during the call.

    Parameters:
        parent: Handler to delegate to.
        source_filter: Only sources for which this returns True are checked.
    """

    def __init__(
        self,
        parent: Optional[BindHandler] = None,
        source_filter: Optional[Callable[[PropertySource], bool]] = None,
    ):
        super().__init__(parent)
        self._source_filter = source_filter or (lambda source: True)
        self._bound_names: Set[PropertyName] = set()

    def on_success(self, name, target, context, result):
        self._bound_names.add(name)
        return super().on_success(name, target, context, result)

    def on_finish(self, name, target, context, result):
        if context.depth == 0:
            self._check_no_unbound_elements(name, context)
        super().on_finish(name, target, context, result)

    def _check_no_unbound_elements(self, name: PropertyName, context: BindContext) -> None:
        unbound: Dict[PropertyName, ConfigurationProperty] = {}
        for source in context.sources:
            if isinstance(source, IterablePropertySource) and self._source_filter(source):
                for candidate in source.names_under(name):
                    if candidate not in self._bound_names and candidate not in unbound:
                        unbound[candidate] = source.get_property(candidate)
        if unbound:
            raise UnboundElementsError(sorted(unbound.values()))


class LoggingBindHandler(AbstractBindHandler):
    """Logs every hook at DEBUG level."""

    def __init__(self, parent: Optional[BindHandler] = None, log: Optional[logging.Logger] = None):
        super().__init__(parent)
        self._logger = log or logger

    def on_start(self, name, target, context):
        self._logger.debug("Binding %s to %r at depth %d", name, target, context.depth)
        return super().on_start(name, target, context)

    def on_success(self, name, target, context, result):
        self._logger.debug("Bound %s = %r", name, result)
        return super().on_success(name, target, context, result)

    def on_create(self, name, target, context, result):
        self._logger.debug("Created %r for %s", result, name)
        return super().on_create(name, target, context, result)

    def on_failure(self, name, target, context, error):
        self._logger.debug("Failed to bind %s: %s", name, error)
        return super().on_failure(name, target, context, error)

    def on_finish(self, name, target, context, result):
        self._logger.debug("Finished %s -> %r", name, result)
        super().on_finish(name, target, context, result)
