"""Custom exceptions for Strata."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .values import Span


class StrataError(Exception):
    """Base exception for all Strata errors."""

    pass


class ConstructError(StrataError):
    """Raised when an element cannot be built from its arguments."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


class MissingArgumentError(ConstructError):
    """Raised when a required argument is absent."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"missing argument: {name}")


class TypeMismatchError(ConstructError):
    """Raised when a supplied argument has the wrong type."""

    def __init__(self, name: str, expected: str, got: str) -> None:
        super().__init__(name, f"argument '{name}': expected {expected}, found {got}")
        self.expected = expected
        self.got = got


class InvariantViolationError(ConstructError):
    """Raised when an argument violates a range or positivity check."""

    def __init__(self, name: str, detail: str = "") -> None:
        message = f"argument '{name}' is invalid"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(name, message)
        self.detail = detail


class UnexpectedArgumentError(ConstructError):
    """Raised when arguments are left over after construction."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"unexpected argument: {name}")


class ResolutionError(StrataError):
    """Raised when a recipe, a built-in show or the world fails during realization."""

    def __init__(
        self,
        cause: str,
        *,
        location: Span | None = None,
        kind: str | None = None,
        recipe: str | None = None,
    ) -> None:
        self.cause = cause
        self.location = location
        self.kind = kind
        self.recipe = recipe
        super().__init__(self._format())

    def _format(self) -> str:
        parts: list[str] = []
        if self.location is not None:
            parts.append(f"{self.location}:")
        if self.kind is not None:
            parts.append(f"while showing {self.kind}")
            if self.recipe is not None:
                parts.append(f"with recipe '{self.recipe}'")
            parts[-1] += ":"
        parts.append(self.cause)
        return " ".join(parts)


class AggregateResolutionError(ResolutionError):
    """Raised when one or more independently realized subtrees failed."""

    def __init__(self, errors: list[ResolutionError]) -> None:
        self.errors = errors
        detail = "; ".join(str(e) for e in errors)
        super().__init__(f"{len(errors)} subtree(s) failed to realize: {detail}")


class FontNotFoundError(StrataError):
    """Raised when the world has no metrics for a font family."""

    def __init__(self, family: str) -> None:
        super().__init__(f"unknown font family: {family}")
        self.family = family


class ValidationError(StrataError):
    """Raised when configuration or registration validation fails."""

    pass


class ParseError(StrataError):
    """Raised when YAML parsing fails."""

    pass
