"""Tagged success/failure values returned by checks that must not raise."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from s3_store.errors import StoreError

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a single store call.

    Exactly one of ``value`` and ``error`` is meaningful: a successful result
    carries the value, a failed one carries the ``StoreError`` that caused it.
    Each call returns its own result, so a failure is never observed after an
    unrelated successful call.
    """

    value: Optional[T] = None
    error: Optional[StoreError] = None

    @classmethod
    def success(cls, value: T = None) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: StoreError) -> "StoreResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""

    def unwrap(self) -> T:
        """Return the value or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value
