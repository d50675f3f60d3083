"""Argument lists handed to element constructors."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import MissingArgumentError, UnexpectedArgumentError
from .values import Span


class Args:
    """Positional and named constructor arguments.

    Constructors consume arguments by name or position; whatever is left
    after construction is reported by finish().
    """

    def __init__(
        self,
        positional: Iterable[Any] = (),
        named: Mapping[str, Any] | None = None,
        *,
        span: Span | None = None,
    ):
        self.positional: list[Any] = list(positional)
        self.named_args: dict[str, Any] = dict(named or {})
        self.span = span

    def expect(self, name: str) -> Any:
        """Take a required argument.

        A named argument with the given name is preferred, otherwise the next
        positional argument is consumed.

        Raises:
            MissingArgumentError: If neither is available
        """
        if name in self.named_args:
            return self.named_args.pop(name)
        if self.positional:
            return self.positional.pop(0)
        raise MissingArgumentError(name)

    def named(self, name: str) -> Any | None:
        """Take an optional named argument, or None if it was not given."""
        return self.named_args.pop(name, None)

    def take_all(self) -> list[Any]:
        """Take all remaining positional arguments."""
        taken, self.positional = self.positional, []
        return taken

    def finish(self) -> None:
        """Fail on leftover arguments.

        Raises:
            UnexpectedArgumentError: If anything was not consumed
        """
        if self.named_args:
            raise UnexpectedArgumentError(next(iter(self.named_args)))
        if self.positional:
            raise UnexpectedArgumentError(repr(self.positional[0]))
