"""Conversation turns exchanged with the model."""

from enum import Enum
from typing import Iterator, List, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a conversation turn."""

    USER = "user"
    MODEL = "model"


class Turn(BaseModel):
    """A single immutable message in the conversation."""

    role: Role = Field(description="Author of the turn.")
    text: str = Field(description="Literal text sent to or received from the model.")

    model_config = ConfigDict(frozen=True)


class ConversationContext:
    """
    Ordered, append-only message history sent to the model.

    The first turn is always the user's query. Turns are never edited or
    removed once appended.
    """

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    def append(self, turn: Turn) -> None:
        """
        Appends a turn to the history.

        Args:
            turn: The turn to append.

        Raises:
            ValueError: If the first turn is not a user turn.
        """
        if not self._turns and turn.role is not Role.USER:
            raise ValueError("The first conversation turn must come from the user.")
        self._turns.append(turn)

    def add_user(self, text: str) -> Turn:
        """Appends and returns a user turn."""
        turn = Turn(role=Role.USER, text=text)
        self.append(turn)
        return turn

    def add_model(self, text: str) -> Turn:
        """Appends and returns a model turn."""
        turn = Turn(role=Role.MODEL, text=text)
        self.append(turn)
        return turn

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))
