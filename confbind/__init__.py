r"""confbind: bind hierarchical configuration properties into typed objects.

Example:
    >>> from dataclasses import dataclass
    >>> from confbind import Binder, MapPropertySource
    >>> @dataclass
    ... class Server:
    ...     host: str
    ...     port: int = 80
    >>> binder = Binder(MapPropertySource({"server": {"host": "example.org", "port": "8080"}}))
    >>> binder.bind("server", Server).get()
    Server(host='example.org', port=8080)
"""

from ._version import __version__, get_version_info, print_version_info
from .core import (
    BIND_BYPASS,
    AbstractBindHandler,
    Bindable,
    BindConverter,
    BindContext,
    Binder,
    BindHandler,
    BindMethod,
    BindRestriction,
    BindResult,
    ConverterRegistry,
    IgnoreErrorsBindHandler,
    IgnoreTopLevelConverterNotFoundBindHandler,
    LoggingBindHandler,
    NoUnboundElementsBindHandler,
    bind_method,
)
from .binders import (
    BindConstructorProvider,
    ConstructorBinder,
    PropertyBinder,
    constructor_binding,
)
from .sources import (
    ConfigurationProperty,
    EnvironmentPropertySource,
    IterablePropertySource,
    LookupPropertySource,
    MapPropertySource,
    PlaceholdersResolver,
    PropertyName,
    PropertySource,
    PropertyState,
    SourcesPlaceholdersResolver,
)
from .utils import (
    BindError,
    BindingError,
    ConversionError,
    ConverterNotFoundError,
    CreationError,
    InvalidPropertyNameError,
    NoSuchElementError,
    PlaceholderResolutionError,
    UnboundElementsError,
)

__all__ = [
    "__version__",
    "get_version_info",
    "print_version_info",
    # core
    "Binder",
    "Bindable",
    "BindMethod",
    "BindRestriction",
    "bind_method",
    "BindResult",
    "BindContext",
    "BindConverter",
    "ConverterRegistry",
    # handlers
    "BIND_BYPASS",
    "BindHandler",
    "AbstractBindHandler",
    "IgnoreErrorsBindHandler",
    "IgnoreTopLevelConverterNotFoundBindHandler",
    "NoUnboundElementsBindHandler",
    "LoggingBindHandler",
    # binders
    "BindConstructorProvider",
    "ConstructorBinder",
    "PropertyBinder",
    "constructor_binding",
    # sources
    "PropertyName",
    "ConfigurationProperty",
    "PropertyState",
    "PropertySource",
    "IterablePropertySource",
    "MapPropertySource",
    "EnvironmentPropertySource",
    "LookupPropertySource",
    "PlaceholdersResolver",
    "SourcesPlaceholdersResolver",
    # errors
    "BindError",
    "BindingError",
    "ConversionError",
    "ConverterNotFoundError",
    "CreationError",
    "InvalidPropertyNameError",
    "NoSuchElementError",
    "PlaceholderResolutionError",
    "UnboundElementsError",
]
