"""Public API for the property sources package.

Exports:
    PropertyName: hierarchical property key.
    ConfigurationProperty: a resolved (name, value, origin) triple.
    PropertyState: answer to descendant queries.
    PropertySource / IterablePropertySource: source interfaces.
    MapPropertySource / EnvironmentPropertySource / LookupPropertySource:
        concrete sources.
    PlaceholdersResolver / SourcesPlaceholdersResolver: ``${...}`` handling.
"""

from .env_source import EnvironmentPropertySource
from .map_source import MapPropertySource
from .name import PropertyName
from .placeholders import PlaceholdersResolver, SourcesPlaceholdersResolver
from .property import (
    ConfigurationProperty,
    IndexedPropertySource,
    IterablePropertySource,
    LookupPropertySource,
    PropertySource,
    PropertyState,
)

__all__ = [
    "PropertyName",
    "ConfigurationProperty",
    "PropertyState",
    "PropertySource",
    "IterablePropertySource",
    "IndexedPropertySource",
    "LookupPropertySource",
    "MapPropertySource",
    "EnvironmentPropertySource",
    "PlaceholdersResolver",
    "SourcesPlaceholdersResolver",
]
