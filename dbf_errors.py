"""
Exceptions raised by the DBF codec.

Every failure surfaces as a DBFError; the subclasses only narrow down
which stage rejected the operation.
"""

from typing import Any, Optional


class DBFError(Exception):
    """Base failure type: a readable message plus the wrapped I/O cause, if any."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self):
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message


class DBFLayoutError(DBFError):
    """The field layout was rejected or cannot be changed."""


class DBFRecordError(DBFError):
    """A record was rejected before any of its bytes were written."""

    def __init__(self, message: str, field_index: Optional[int] = None, value: Any = None):
        super().__init__(message)
        self.field_index = field_index
        self.value = value


class DBFCharsetError(DBFError):
    """The charset has no language driver code and cannot be written."""


class DBFStateError(DBFError):
    """The writer or reader is not in a state that allows the operation."""


__all__ = [
    'DBFError', 'DBFLayoutError', 'DBFRecordError',
    'DBFCharsetError', 'DBFStateError',
]
