"""The outcome of a bind operation."""

from typing import Any, Callable, Generic, Optional, Type, TypeVar

from ..utils import NoSuchElementError

__all__ = ["BindResult"]

T = TypeVar("T")
R = TypeVar("R")


class BindResult(Generic[T]):
    """A bound value, or the absence of one.

    Absence is a normal outcome: it means no property matched the name being
    bound and callers typically fall back to a default.

    Example:
        >>> binder.bind("server.port", int).or_else(8080)
        8080
    """

    __slots__ = ("_value",)

    _UNBOUND: "BindResult[Any]"

    def __init__(self, value: Optional[T]):
        self._value = value

    @classmethod
    def of(cls, value: Optional[T]) -> "BindResult[T]":
        if value is None:
            return cls._UNBOUND
        return cls(value)

    def is_bound(self) -> bool:
        return self._value is not None

    def get(self) -> T:
        """Return the bound value or raise :class:`NoSuchElementError`."""
        if self._value is None:
            raise NoSuchElementError(
                "No value bound",
                ["Use or_else() to supply a default", "Check is_bound() first"],
            )
        return self._value

    def if_bound(self, consumer: Callable[[T], Any]) -> None:
        if self._value is not None:
            consumer(self._value)

    def map(self, mapper: Callable[[T], Optional[R]]) -> "BindResult[R]":
        if self._value is None:
            return BindResult._UNBOUND
        return BindResult.of(mapper(self._value))

    def or_else(self, other: Optional[T]) -> Optional[T]:
        return self._value if self._value is not None else other

    def or_else_get(self, supplier: Callable[[], T]) -> T:
        return self._value if self._value is not None else supplier()

    def or_else_create(self, type_: Type[T]) -> T:
        return self._value if self._value is not None else type_()

    def or_else_raise(self, exception_supplier: Callable[[], BaseException]) -> T:
        if self._value is None:
            raise exception_supplier()
        return self._value

    def __bool__(self) -> bool:
        return self._value is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BindResult):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value) if self._value is not None else 0

    def __repr__(self) -> str:
        if self._value is None:
            return "BindResult(<unbound>)"
        return f"BindResult({self._value!r})"


BindResult._UNBOUND = BindResult(None)
