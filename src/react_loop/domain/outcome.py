"""Terminal outcomes and iteration bookkeeping for the agent loop."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

DEFAULT_NO_ACTION_ANSWER = (
    "I have completed the thought process but couldn't determine a final "
    "action or answer."
)
MAX_ITERATIONS_ANSWER = "Maximum iterations reached. Could not complete the task."
MODEL_ERROR_ANSWER = (
    "An error occurred while communicating with the AI service. Please check logs."
)
INTERNAL_ERROR_ANSWER = "An internal error occurred. Please check the logs."


class OutcomeKind(str, Enum):
    """How a loop execution ended."""

    ANSWERED = "answered"
    NO_ACTION_GIVEN = "no_action_given"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"
    MODEL_ERROR = "model_error"
    INTERNAL_ERROR = "internal_error"


class IterationState(BaseModel):
    """Counts dispatched iterations against the configured ceiling."""

    count: int = Field(default=0, ge=0)
    max: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "IterationState":
        if self.count > self.max:
            raise ValueError("Iteration count cannot exceed the ceiling.")
        return self

    @property
    def exhausted(self) -> bool:
        return self.count >= self.max

    def advance(self) -> None:
        """
        Records one completed iteration.

        Raises:
            RuntimeError: If the ceiling has already been reached.
        """
        if self.exhausted:
            raise RuntimeError("Iteration ceiling already reached.")
        self.count += 1


class LoopOutcome(BaseModel):
    """Exactly one of these is produced per loop execution."""

    kind: OutcomeKind
    text: Optional[str] = Field(
        default=None, description="Final answer for answered/no-action outcomes."
    )
    detail: Optional[str] = Field(
        default=None, description="Fault description for error outcomes."
    )
    error_details: Dict[str, Any] = Field(
        default_factory=dict, description="Sanitized fault metadata for operators."
    )

    @classmethod
    def answered(cls, text: str) -> "LoopOutcome":
        return cls(kind=OutcomeKind.ANSWERED, text=text)

    @classmethod
    def no_action_given(cls, text: str) -> "LoopOutcome":
        return cls(kind=OutcomeKind.NO_ACTION_GIVEN, text=text)

    @classmethod
    def max_iterations_reached(cls) -> "LoopOutcome":
        return cls(kind=OutcomeKind.MAX_ITERATIONS_REACHED)

    @classmethod
    def model_error(
        cls, detail: str, error_details: Optional[Dict[str, Any]] = None
    ) -> "LoopOutcome":
        return cls(
            kind=OutcomeKind.MODEL_ERROR,
            detail=detail,
            error_details=error_details or {},
        )

    @classmethod
    def internal_error(
        cls, detail: str, error_details: Optional[Dict[str, Any]] = None
    ) -> "LoopOutcome":
        return cls(
            kind=OutcomeKind.INTERNAL_ERROR,
            detail=detail,
            error_details=error_details or {},
        )

    @property
    def answer(self) -> str:
        """User-facing answer text for this outcome."""
        if self.kind in (OutcomeKind.ANSWERED, OutcomeKind.NO_ACTION_GIVEN):
            return self.text or ""
        if self.kind is OutcomeKind.MAX_ITERATIONS_REACHED:
            return MAX_ITERATIONS_ANSWER
        if self.kind is OutcomeKind.MODEL_ERROR:
            return MODEL_ERROR_ANSWER
        return INTERNAL_ERROR_ANSWER

    @property
    def is_error(self) -> bool:
        return self.kind in (OutcomeKind.MODEL_ERROR, OutcomeKind.INTERNAL_ERROR)


class LoopResult(BaseModel):
    """What the loop hands back to its caller."""

    outcome: LoopOutcome
    transcript: str
    model_calls: int = Field(default=0, ge=0)
    iterations: int = Field(default=0, ge=0)

    @property
    def answer(self) -> str:
        return self.outcome.answer

    def as_payload(self) -> Dict[str, str]:
        """Returns the transport payload {answer, transcript}."""
        return {"answer": self.answer, "transcript": self.transcript}
