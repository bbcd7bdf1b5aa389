"""Errors raised by console tool operations."""

from __future__ import annotations

from typing import Optional


class ConsoleToolError(Exception):
    """Base class for failures reported to the operator."""


class NotFoundError(ConsoleToolError):
    """A referenced entity type, table or seeder does not exist."""


class AlreadyConvertedError(ConsoleToolError):
    """The translation conversion has already been applied."""

    def __init__(self, message: str = "The conversion has already been completed."):
        super().__init__(message)


class ValueTooLongError(ConsoleToolError):
    """The store rejected a value that does not fit its column."""

    def __init__(self, column: Optional[str]):
        self.column = column
        if column:
            super().__init__(f"Increase the length of the column '{column}'.")
        else:
            super().__init__("A value is too long for its column.")


class StoreError(ConsoleToolError):
    """Any other database failure; carries the raw driver message."""


class SubprocessFailure(ConsoleToolError):
    """An external utility failed or could not be started."""
