"""Normalize invocation results into size-capped observation strings."""

import json

from pydantic_core import to_jsonable_python

from react_loop.config import DEFAULT_OBSERVATION_MAX_CHARS
from react_loop.domain.invocation import InvocationError, InvocationResult

ERROR_PREFIX = "Error:"
OBSERVATION_PREFIX = "Observation:"
TRUNCATION_MARKER = "... [Result Truncated]"
ENCODING_FAILED_MARKER = "Could not encode observation result to JSON."


class ObservationFormatter:
    """
    Builds the observation text that re-enters the conversation.

    Args:
        max_chars: Longer serialized results are cut to this many
            characters and followed by the truncation marker.
    """

    def __init__(self, max_chars: int = DEFAULT_OBSERVATION_MAX_CHARS) -> None:
        if max_chars < 1:
            raise ValueError("max_chars must be positive")
        self.max_chars = max_chars

    def truncate(self, text: str) -> str:
        if len(text) > self.max_chars:
            return text[: self.max_chars] + TRUNCATION_MARKER
        return text

    def encode(self, value: object) -> str:
        """
        Serializes a tool value to capped JSON.

        Args:
            value: The tool output.

        Returns:
            Capped JSON text, or an error observation when the value cannot
            be serialized.
        """
        try:
            encoded = json.dumps(value, default=to_jsonable_python, allow_nan=False)
        except (TypeError, ValueError):
            return f"{ERROR_PREFIX} {ENCODING_FAILED_MARKER}"
        return self.truncate(encoded)

    def describe_error(self, error: InvocationError) -> str:
        text = self.truncate(f"{error.message} (Code: {error.kind.value})")
        return f"{ERROR_PREFIX} {text}"

    def format(self, result: InvocationResult) -> str:
        """Returns the observation text for a success or failure result."""
        if result.error is not None:
            return self.describe_error(result.error)
        return self.encode(result.value)


def as_context_text(observation: str) -> str:
    """Text of the user turn that carries an observation back to the model."""
    return f"{OBSERVATION_PREFIX} {observation}"
