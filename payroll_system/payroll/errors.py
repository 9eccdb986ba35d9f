"""
Calculation errors and the result/error union returned by the payroll pipeline.

Every stage of the calculator returns an ``Outcome``: either a value or a
``CalculationError``. Nothing is thrown between stages; the first failure
halts the pipeline and is handed back to the caller as-is.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    INVALID_POSITION = "invalid_position"
    PROVIDER_FAILURE = "provider_failure"
    VALIDATION_FAILURE = "validation_failure"


class CalculationError(Exception):
    """Base class for every fatal payroll calculation failure."""

    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, message, state=None, **details):
        super().__init__(message)
        self.message = message
        self.state = state
        self.details = details

    @property
    def code(self):
        return self.kind.value

    def at(self, state):
        """Record the pipeline state the calculation halted in."""
        self.state = state
        return self

    def to_dict(self):
        return {
            'code': self.code,
            'message': self.message,
            'state': self.state.value if self.state is not None else None,
            'details': self.details,
        }


class InvalidInput(CalculationError):
    kind = ErrorKind.INVALID_INPUT


class NotFound(CalculationError):
    kind = ErrorKind.NOT_FOUND


class InvalidPosition(NotFound):
    """The position is missing or carries an unusable salary."""
    kind = ErrorKind.INVALID_POSITION


class ProviderFailure(CalculationError):
    kind = ErrorKind.PROVIDER_FAILURE


class ValidationFailure(CalculationError):
    kind = ErrorKind.VALIDATION_FAILURE


@dataclass(frozen=True)
class Outcome:
    """Either a value or a CalculationError, never both."""

    value: Any = None
    error: Optional[CalculationError] = None

    @classmethod
    def success(cls, value):
        return cls(value=value)

    @classmethod
    def failure(cls, error):
        return cls(error=error)

    @property
    def ok(self):
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.value


def call_provider(provider_name, func, *args):
    """
    Run one provider read and turn any exception it raises into a
    ProviderFailure outcome. ``None`` results are passed through untouched so
    the caller can decide between NotFound and Absent.
    """
    try:
        return Outcome.success(func(*args))
    except Exception as exc:
        error = ProviderFailure(
            f"{provider_name} failed: {exc}",
            provider=provider_name,
            cause=type(exc).__name__,
        )
        error.__cause__ = exc
        return Outcome.failure(error)
