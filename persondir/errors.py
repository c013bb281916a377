"""
Error taxonomy for persondir.

"No such person" is never an error: lookups return ``None`` for it.
Database faults raised by asyncpg are not wrapped and reach the caller as is.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Standardized error codes."""

    PERSONDIR_ERROR = "ERR_1000"
    INVALID_ARGUMENT = "ERR_1001"

    # Query errors (2xxx)
    QUERY_COMPILATION = "ERR_2001"
    INCORRECT_RESULT_SIZE = "ERR_2002"

    # Configuration errors (3xxx)
    CONFIG_ERROR = "ERR_3000"


class PersonDirectoryError(Exception):
    code: ErrorCode = ErrorCode.PERSONDIR_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class InvalidArgumentError(PersonDirectoryError, ValueError):
    """A required input (seed, uid, attribute list) was not supplied."""

    code = ErrorCode.INVALID_ARGUMENT


class QueryCompilationError(PersonDirectoryError, ValueError):
    """The SQL template does not match the declared query parameters."""

    code = ErrorCode.QUERY_COMPILATION


class IncorrectResultSizeError(PersonDirectoryError):
    code = ErrorCode.INCORRECT_RESULT_SIZE

    def __init__(self, expected: int, actual: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"Incorrect result size: expected {expected}, actual {actual}")
        self.expected = expected
        self.actual = actual


class ConfigError(PersonDirectoryError):
    code = ErrorCode.CONFIG_ERROR
