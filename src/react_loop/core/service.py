"""Transport boundary: capability check, request validation, loop execution."""

import logging
import re
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from react_loop.domain.outcome import LoopResult, OutcomeKind
from react_loop.engine.react_loop import ReActLoop
from react_loop.llm.model_client import ModelProvider

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

EMPTY_QUERY_MESSAGE = "Query cannot be empty."
PERMISSION_DENIED_MESSAGE = "You do not have permission to use the agent."
INVALID_CEILING_MESSAGE = "max_iterations must be at least 1."


class TransportErrorKind(str, Enum):
    """Failure categories reported across the transport boundary."""

    PERMISSION_DENIED = "permission_denied"
    INVALID_REQUEST = "invalid_request"
    MODEL_ERROR = "model_error"
    INTERNAL_ERROR = "internal_error"

    @property
    def status(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    TransportErrorKind.PERMISSION_DENIED: 403,
    TransportErrorKind.INVALID_REQUEST: 400,
    TransportErrorKind.MODEL_ERROR: 502,
    TransportErrorKind.INTERNAL_ERROR: 500,
}


class TransportError(BaseModel):
    kind: TransportErrorKind
    message: str
    status: int


class AgentRunRequest(BaseModel):
    """Incoming request body."""

    query: str = Field(default="", description="The user's request.")


class AgentRunResponse(BaseModel):
    """Outgoing response body."""

    success: bool
    answer: str = ""
    transcript: str = ""
    outcome: Optional[OutcomeKind] = None
    error: Optional[TransportError] = None

    @classmethod
    def rejected(cls, kind: TransportErrorKind, message: str) -> "AgentRunResponse":
        return cls(
            success=False,
            error=TransportError(kind=kind, message=message, status=kind.status),
        )

    @classmethod
    def from_result(cls, result: LoopResult) -> "AgentRunResponse":
        """
        Converts a loop result into a response.

        Model and internal faults are failures; every other outcome,
        including an exhausted iteration budget, is a successful response.

        Args:
            result: The loop result.

        Returns:
            The transport response carrying answer and transcript.
        """
        outcome = result.outcome
        error = None
        if outcome.kind is OutcomeKind.MODEL_ERROR:
            kind = TransportErrorKind.MODEL_ERROR
            error = TransportError(kind=kind, message=result.answer, status=kind.status)
        elif outcome.kind is OutcomeKind.INTERNAL_ERROR:
            kind = TransportErrorKind.INTERNAL_ERROR
            error = TransportError(kind=kind, message=result.answer, status=kind.status)
        return cls(
            success=error is None,
            answer=result.answer,
            transcript=result.transcript,
            outcome=outcome.kind,
            error=error,
        )


def sanitize_query(query: str) -> str:
    """Strips surrounding whitespace and removes control characters."""
    return _CONTROL_CHARS.sub("", query).strip()


class AgentService:
    """
    Validates transport requests and runs the loop on behalf of a caller.

    Args:
        loop: The loop to run.
        provider: Model provider handed to the loop.
        required_capability: Capability a caller must hold.
    """

    def __init__(
        self,
        loop: ReActLoop,
        provider: ModelProvider,
        required_capability: str,
    ) -> None:
        self.loop = loop
        self.provider = provider
        self.required_capability = required_capability

    def is_permitted(self, capabilities: Iterable[str]) -> bool:
        return self.required_capability in set(capabilities)

    def handle(
        self,
        request: AgentRunRequest,
        capabilities: Iterable[str],
        max_iterations: Optional[int] = None,
    ) -> AgentRunResponse:
        """
        Handles one agent request.

        Args:
            request: The request body.
            capabilities: Capabilities held by the caller.
            max_iterations: Optional per-request iteration ceiling.

        Returns:
            The response; never raises.
        """
        if not self.is_permitted(capabilities):
            logger.warning(
                "Agent request denied",
                extra={"required_capability": self.required_capability},
            )
            return AgentRunResponse.rejected(
                TransportErrorKind.PERMISSION_DENIED, PERMISSION_DENIED_MESSAGE
            )

        query = sanitize_query(request.query)
        if not query:
            return AgentRunResponse.rejected(
                TransportErrorKind.INVALID_REQUEST, EMPTY_QUERY_MESSAGE
            )
        if max_iterations is not None and max_iterations < 1:
            return AgentRunResponse.rejected(
                TransportErrorKind.INVALID_REQUEST, INVALID_CEILING_MESSAGE
            )

        result = self.loop.run(self.provider, query, max_iterations=max_iterations)
        if result.outcome.is_error:
            logger.error(
                "Agent request failed",
                extra={
                    "outcome": result.outcome.kind.value,
                    "detail": result.outcome.detail,
                },
            )
        return AgentRunResponse.from_result(result)
