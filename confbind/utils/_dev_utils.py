"""Utilities for development: logging configuration and call tracing."""

import logging
import os
from functools import partial, partialmethod, wraps
from typing import Callable

# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------

# The package logger level comes from the environment; handlers are left to
# the application (or to the CLI).
package_logger = logging.getLogger("confbind")
package_logger.setLevel(os.getenv("CONFBIND_LOG_LEVEL", "WARNING").upper())

LOG_FORMAT = "[%(asctime)s] [%(levelname)-5s] [%(name)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the root logger using the package format."""
    level = os.getenv("CONFBIND_LOG_LEVEL", level).upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    package_logger.setLevel(level)


def get_func_name(func: Callable) -> str:
    """
    Retrieve the qualified name of a function, resolving partial functions.

    Parameters:
        func (Callable): The function or partial function.

    Returns:
        str: The qualified name of the underlying function.
    """
    if isinstance(func, (partial, partialmethod)):
        return get_func_name(func.func)
    return func.__qualname__


# -----------------------------------------------------------------------------
# Decorators
# -----------------------------------------------------------------------------


def log_debug(func: Callable) -> Callable:
    """
    Decorator to log function calls in debug mode.

    If the environment variable 'CONFBIND_QUIET' is set to 'TRUE',
    logging is disabled for the decorated function.

    Parameters:
        func (Callable): The function to decorate.

    Returns:
        Callable: The decorated function.
    """
    if os.getenv("CONFBIND_QUIET", "FALSE").upper() == "TRUE":
        return func

    func_name = get_func_name(func)
    func_logger = logging.getLogger(f"{func.__module__}.{func_name}")

    @wraps(func)
    def wrapper(*args, **kwargs):
        if func_logger.isEnabledFor(logging.DEBUG):
            arg_str = ", ".join(repr(a) for a in args)
            kwarg_str = ", ".join(f"{k}={v!r}" for k, v in kwargs.items())
            all_args = ", ".join(filter(None, [arg_str, kwarg_str]))
            func_logger.debug("%s(%s)", func_name, all_args)
        return func(*args, **kwargs)

    return wrapper
