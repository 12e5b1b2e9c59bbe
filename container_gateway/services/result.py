"""
Result - explicit success/failure value returned by every core operation.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from container_gateway.services.errors import ServiceError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either ``data`` (on success) or ``error`` (on failure)."""

    data: T | None = None
    error: ServiceError | None = None

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: ServiceError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the data, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        """Transform successful data; failures pass through untouched."""
        if self.error is not None:
            return Result(error=self.error)
        return Result(data=fn(self.data))  # type: ignore[arg-type]
