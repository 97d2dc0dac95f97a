"""Explicit success/failure results for fallible lookups"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Outcome of a lookup that may fail.

    ``value`` can be set even when ``error`` is set: paginated fetches return
    whatever they accumulated before failing.
    """

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Lookup[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: str, value: T | None = None) -> Lookup[T]:
        return cls(value=value, error=error)

    def unwrap_or(self, default: T) -> T:
        """Value on success, ``default`` otherwise"""
        if self.ok and self.value is not None:
            return self.value
        return default
