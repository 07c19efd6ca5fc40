"""Result types produced by resolving and invoking a single action."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(str, Enum):
    """Recoverable failures of a single action; each becomes an observation."""

    INVALID_ACTION_FORMAT = "invalid_action_format"
    INVALID_JSON_FORMAT = "invalid_json_format"
    FINISH_MISROUTED = "finish_action_misrouted"
    NOT_FOUND = "not_found"
    DEPENDENCY_MISSING = "dependency_missing"
    PERMISSION_DENIED = "permission_denied"
    PERMISSION_UNDEFINED = "permission_undefined"
    EXECUTION_ERROR = "execution_error"


class InvocationError(BaseModel):
    """A classified, human-readable action failure."""

    kind: ErrorKind = Field(description="Machine-readable failure category.")
    message: str = Field(description="Message shown to the model as an observation.")
    status_hint: Optional[int] = Field(
        default=None, description="HTTP-style status hint for operators."
    )

    model_config = ConfigDict(frozen=True)


class InvocationResult(BaseModel):
    """Either the value a tool returned or the error that prevented it."""

    value: Any = Field(default=None, description="Tool output when successful.")
    error: Optional[InvocationError] = Field(
        default=None, description="Failure details when unsuccessful."
    )

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "InvocationResult":
        """Build a successful result wrapping the tool output."""
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        status_hint: Optional[int] = None,
    ) -> "InvocationResult":
        """Build a failed result.

        Args:
            kind: Failure category.
            message: Human-readable description.
            status_hint: Optional HTTP-style status code.

        Returns:
            An InvocationResult carrying the error.
        """
        return cls(
            error=InvocationError(kind=kind, message=message, status_hint=status_hint)
        )

    @classmethod
    def from_error(cls, error: InvocationError) -> "InvocationResult":
        return cls(error=error)
