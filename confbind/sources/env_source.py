"""Property source backed by environment variables."""

import logging
import os
from typing import Iterator, Mapping, Optional, Tuple

from ..utils import InvalidPropertyNameError
from .name import PropertyName
from .property import IndexedPropertySource

__all__ = ["EnvironmentPropertySource"]

logger = logging.getLogger(__name__)


class EnvironmentPropertySource(IndexedPropertySource):
    """Maps environment variables onto property names.

    ``SERVER_PORT`` becomes ``server.port`` and numeric parts become indexes
    (``HOSTS_0_NAME`` is ``hosts[0].name``). Because dashes are ignored when
    names are compared, ``SERVER_MAXSIZE`` matches ``server.max-size``.
    The environment is copied when the source is created.

    Parameters:
        environ: The variables to expose (defaults to ``os.environ``).
        prefix: Only variables starting with ``PREFIX_`` are exposed, with the
            prefix removed.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None, prefix: Optional[str] = None):
        self.prefix = prefix.rstrip("_").upper() if prefix else None
        environ = dict(os.environ if environ is None else environ)
        super().__init__(self._entries(environ), "systemEnvironment")

    def _entries(self, environ: Mapping[str, str]) -> Iterator[Tuple[PropertyName, str, str]]:
        for variable, value in environ.items():
            name = self.to_property_name(variable)
            if name is None:
                continue
            yield name, value, f'System Environment Property "{variable}"'

    def to_property_name(self, variable: str) -> Optional[PropertyName]:
        """Return the property name for ``variable`` or ``None`` if it is skipped."""
        if self.prefix:
            if not variable.upper().startswith(self.prefix + "_"):
                return None
            variable = variable[len(self.prefix) + 1 :]
        parts = variable.split("_")
        if not all(parts):
            return None
        name = PropertyName.EMPTY
        try:
            for part in parts:
                name = name.append_index(int(part)) if part.isdigit() else name.append(part.lower())
        except InvalidPropertyNameError:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Skipping environment variable %s", variable)
            return None
        return name
