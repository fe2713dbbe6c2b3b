"""Exception classes and result variants for the calculation engine.

Validation problems are raised as ``ValidationError`` before any schedule is
built. Callers that prefer not to rely on exception propagation can use the
``Result`` wrapper returned by the ``try_compute_*`` entry points.
"""

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class MortgageError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (field names, values)
    """

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ValidationError(MortgageError, ValueError):
    """Raised for malformed or out-of-range input.

    Example:
        >>> raise ValidationError(
        ...     "Loan amount must be greater than zero",
        ...     context={"loan_amount": -1000},
        ... )
    """


class ComputationError(MortgageError):
    """Raised when an internal calculation guard trips.

    Should not occur with valid input.
    """


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a computed value or the validation error that prevented it."""

    value: Optional[T] = None
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the stored error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value
