"""Validity-propagating value container and error model."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Optional, Tuple, TypeVar, Union

T = TypeVar('T')
U = TypeVar('U')


class ErrorKind(str, Enum):
    """Categories of pipeline failures."""
    INPUT_EMPTY = "input_empty"
    NO_MATCH = "no_match"
    GROUP_OUT_OF_RANGE = "group_out_of_range"
    CONVERSION_FAILURE = "conversion_failure"
    VALIDATION_FAILURE = "validation_failure"
    CONFIGURATION_ERROR = "configuration_error"


@dataclass(frozen=True)
class PipelineError:
    """An error recorded by a pipeline stage."""
    message: str
    operation: Optional[str] = None
    kind: Optional[ErrorKind] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not isinstance(self.message, str) or not self.message:
            raise ValueError("PipelineError message must be a non-empty string")

    def __str__(self) -> str:
        stamp = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        if self.operation:
            return f"[{stamp}] {self.operation}: {self.message}"
        return f"[{stamp}] {self.message}"


class ExtractionError(ValueError):
    """Raised by extraction when ``throw_on_failure`` is set."""

    def __init__(self, error: PipelineError):
        super().__init__(error.message)
        self.error = error

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind


@dataclass(frozen=True)
class ResultValue(Generic[T]):
    """
    Immutable wrapper around a value, its validity and the errors collected
    while producing it.

    Every operation returns a new instance; errors are only ever appended.
    Once a value is invalid, downstream stages leave it untouched apart from
    recording further errors.
    """
    value: T
    is_valid: bool = True
    errors: Tuple[PipelineError, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'errors', tuple(self.errors or ()))

    @classmethod
    def of(cls, value: T) -> 'ResultValue[T]':
        """Wrap a raw value as a valid result."""
        return cls(value)

    @classmethod
    def invalid(
        cls,
        message: str,
        operation: Optional[str] = None,
        kind: Optional[ErrorKind] = None,
        value: Any = None,
        errors: Iterable[PipelineError] = ()
    ) -> 'ResultValue[Any]':
        """
        Create an invalid result carrying prior errors plus one new error.

        Args:
            message: Error message
            operation: Name of the stage that failed
            kind: Failure category
            value: Payload to carry (None by default)
            errors: Errors collected by earlier stages

        Returns:
            ResultValue: Invalid result
        """
        error = PipelineError(message, operation, kind)
        return cls(value, False, tuple(errors) + (error,))

    def with_value(self, new_value: U) -> 'ResultValue[U]':
        """Replace the payload, keeping validity and error history."""
        return ResultValue(new_value, self.is_valid, self.errors)

    def with_validation(
        self,
        is_valid: bool,
        error: Optional[PipelineError] = None
    ) -> 'ResultValue[T]':
        """
        Combine a stage outcome with the current validity.

        The error is only recorded when the stage failed.
        """
        errors = self.errors
        if not is_valid and error is not None:
            errors = errors + (error,)
        return replace(self, is_valid=is_valid and self.is_valid, errors=errors)

    def with_error(
        self,
        error: Union[PipelineError, str],
        operation: Optional[str] = None,
        kind: Optional[ErrorKind] = None
    ) -> 'ResultValue[T]':
        """Append an error and mark the value invalid."""
        if not isinstance(error, PipelineError):
            error = PipelineError(error, operation, kind)
        return replace(self, is_valid=False, errors=self.errors + (error,))

    def validate(
        self,
        predicate: Callable[[T], bool],
        message: str = "Validation failed",
        operation: str = "validate"
    ) -> 'ResultValue[T]':
        """
        Run a predicate against the payload of a valid result.

        Args:
            predicate: Function returning whether the payload is acceptable
            message: Error message recorded when the predicate fails
            operation: Stage name recorded with the error

        Returns:
            ResultValue: Updated result
        """
        if not self.is_valid:
            return self
        try:
            passed = bool(predicate(self.value))
        except Exception as e:
            return self.with_error(
                f"Validation error: {e}", operation, ErrorKind.VALIDATION_FAILURE
            )
        error = None if passed else PipelineError(
            message, operation, ErrorKind.VALIDATION_FAILURE
        )
        return self.with_validation(passed, error)

    @property
    def error_messages(self) -> Tuple[str, ...]:
        return tuple(e.message for e in self.errors)


def ensure_result(value: Any) -> ResultValue:
    """Wrap raw input in a valid ResultValue unless it already is one."""
    if isinstance(value, ResultValue):
        return value
    return ResultValue(value)
