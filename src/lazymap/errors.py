from __future__ import annotations

from typing import Sequence


class LazyMapError(Exception):
    """Base class for errors raised while mapping values."""


class ParseError(LazyMapError):
    """Raised when JSON input cannot be decoded into a record."""


class CastError(LazyMapError):
    """Raised when a value fits none of the members of a union type."""

    def __init__(self, value_type: str, candidates: Sequence[str]) -> None:
        self.value_type = value_type
        self.candidates = tuple(candidates)
        super().__init__(
            f"Cannot cast value of type {value_type} to any of the union types: "
            f"[{', '.join(self.candidates)}]"
        )


class ValidationError(LazyMapError):
    """Raised when an attribute holds a value its declared type does not accept."""

    def __init__(self, field: str, declared: str, actual: str) -> None:
        self.field = field
        self.declared = declared
        self.actual = actual
        super().__init__(
            f"Type mismatch on property {field}. Expected {declared} but found type {actual}."
        )
