# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Nullable scalar wrappers.

Optional database columns are commonly bound to a wrapper carrying the
value plus a validity flag. Such wrappers collapse to their inner value (or
to ``None``) in a response instead of showing up as ``{"value": .., "valid": ..}``.

Recognition is structural: anything satisfying ``NullableValue`` qualifies,
whatever its class is called.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

# Sentinel: value is not a nullable wrapper.
NO_MATCH = object()


@runtime_checkable
class NullableValue(Protocol):
    """Structural contract for nullable wrappers."""

    valid: bool

    def unwrap(self) -> Any: ...


@dataclass(frozen=True)
class Nullable(Generic[T]):
    """Explicit present/absent wrapper.

    ``value`` is ignored when ``valid`` is False.
    """

    value: T | None = None
    valid: bool = False

    @classmethod
    def of(cls, value: T) -> Nullable[T]:
        return cls(value=value, valid=True)

    @classmethod
    def absent(cls) -> Nullable[Any]:
        return cls()

    @classmethod
    def from_optional(cls, value: T | None) -> Nullable[T]:
        """Wrap a plain Optional: None becomes absent."""
        if value is None:
            return cls()
        return cls.of(value)

    def unwrap(self) -> T | None:
        return self.value if self.valid else None


def unwrap_nullable(value: Any) -> Any:
    """Return the unwrapped value, or ``NO_MATCH`` when ``value`` is not a wrapper.

    An invalid wrapper unwraps to None regardless of what its value holds.
    """
    if not isinstance(value, NullableValue):
        return NO_MATCH
    if not value.valid:
        return None
    return value.unwrap()

