"""Version of confbind and of the conversion stack it runs on.

Usage:
    from confbind import __version__, get_version_info, print_version_info

CLI Usage:
    python -m confbind --version
    python -m confbind info
"""

import importlib.metadata
import platform
from typing import Any, Dict, Optional

VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Distributions reported by ``python -m confbind info``
DEPENDENCIES = ("pydantic", "pydantic-core", "typeguard", "typing_extensions")


def _get_package_version(distribution: str) -> Optional[str]:
    try:
        return importlib.metadata.version(distribution)
    except importlib.metadata.PackageNotFoundError:
        return None


def get_version_info() -> Dict[str, Any]:
    """Return the confbind, Python and dependency versions.

    Example:
        >>> get_version_info()["confbind"]
        '0.1.0'
    """
    return {
        "confbind": __version__,
        "python": platform.python_version(),
        "dependencies": {name: _get_package_version(name) for name in DEPENDENCIES},
    }


def print_version_info() -> None:
    """Print the versions, one dependency per line."""
    info = get_version_info()
    width = max(len(name) for name in DEPENDENCIES)
    print(f"confbind: {info['confbind']}")
    print(f"python: {info['python']}")
    print()
    print("Dependencies:")
    for name, version in info["dependencies"].items():
        print(f"  {name:>{width}} : {version or 'not installed'}")
