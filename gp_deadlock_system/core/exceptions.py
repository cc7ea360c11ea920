"""Error taxonomy for deadlock detection. Every error here is fatal to a run."""

from typing import Any, Optional


class DeadlockDetectionError(Exception):
    """Base class for all detector errors."""
    pass


class ValidationError(DeadlockDetectionError):
    """Custom exception for validation errors."""
    pass


class MalformedRow(ValidationError):
    """A snapshot row is missing one of mode, granted or mppsessionid."""

    def __init__(self, field: str, row_index: Optional[int] = None, value: Any = None):
        self.field = field
        self.row_index = row_index
        self.value = value
        where = f"row {row_index}" if row_index is not None else "row"
        if value is None:
            message = f"{field} is null in {where}"
        else:
            message = f"{field} has invalid value {value!r} in {where}"
        super().__init__(message)


class UnknownLockMode(DeadlockDetectionError):
    """The snapshot reported a lock mode the conflict table does not know."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(f"There isn't conflict modes for {mode}")


class SourceUnavailable(DeadlockDetectionError):
    """The lock snapshot could not be read."""
    pass


class ConfigurationError(DeadlockDetectionError):
    """Configuration file could not be loaded."""
    pass
