"""Human-readable log of one loop execution."""

from typing import List


class Transcript:
    """
    Append-only audit log that parallels the conversation context.

    Unlike the context, the transcript also records system annotations
    (finish markers, errors, ceiling notices). It is never parsed back.
    """

    def __init__(self) -> None:
        self._parts: List[str] = []

    def user(self, query: str) -> None:
        self._parts.append(f"User: {query}\n\n")

    def model(self, response: str) -> None:
        self._parts.append(f"LLM:\n{response}\n\n")

    def observation(self, observation: str) -> None:
        self._parts.append(f"Observation: {observation}\n\n")

    def agent(self, note: str, answer: str = "") -> None:
        """
        Records an agent-level note, optionally followed by the answer.

        Args:
            note: The annotation, e.g. "Finishing with answer.".
            answer: Final answer text appended on the next line.
        """
        self._parts.append(f"Agent: {note}\n{answer}")

    def system_error(self, message: str) -> None:
        self._parts.append(f"System Error: {message}")

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def __str__(self) -> str:
        return self.text
