"""Typed results for expected business failures.

Services return a Result instead of raising when a request is refused for
an ordinary reason (bad input, unknown id, duplicate name, missing
privilege). Callers branch on ``error_type`` to choose a response.
"""

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict


T = TypeVar("T")


class ErrorType(str, Enum):
    """Defines the category of a failed Result.

    Attributes:
        VALIDATION: Bad input or a failed integrity check.
        NOT_FOUND: Reference to an entity that does not exist.
        CONFLICT: Duplicate of a unique key.
        UNAUTHORIZED: Missing or insufficient privilege.
        SERVER_ERROR: Unexpected failure.
    """

    VALIDATION = "Validation"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    UNAUTHORIZED = "Unauthorized"
    SERVER_ERROR = "ServerError"


class Result(BaseModel, Generic[T]):
    """Outcome of a service operation.

    Attributes:
        is_success: Whether the operation succeeded.
        value: The payload on success.
        error: Human-readable reason on failure.
        error_type: Failure category on failure.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(is_success=True, value=value)

    @classmethod
    def failure(
        cls, error: str, error_type: ErrorType = ErrorType.VALIDATION
    ) -> "Result[T]":
        return cls(is_success=False, error=error, error_type=error_type)
