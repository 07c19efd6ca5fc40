"""Extract the thought and action from free-text model responses.

The model is instructed to answer with a ``Thought:`` line followed by an
``Action:`` line. Models drift from that grammar in predictable ways, so
parsing is a grammar match followed by deterministic cleanup passes.
"""

import re
from typing import NamedTuple

THOUGHT_MARKER = "thought:"
ACTION_MARKER = "action:"
NAMESPACE_CONFUSION_PREFIX = "tool-"

_THOUGHT_THEN_ACTION = re.compile(
    r"Thought:(.*?)(?:\n|^)Action:(.*)", re.IGNORECASE | re.DOTALL
)
_ACTION_ONLY = re.compile(r"Action:(.*)", re.IGNORECASE | re.DOTALL)
# Optional language tag must end its line, otherwise it is part of the action.
_FENCED_BLOCK = re.compile(r"```(?:[\w+-]*[ \t]*\n)?(.*?)```", re.DOTALL)


class ParsedResponse(NamedTuple):
    """Thought and cleaned action extracted from one model response."""

    thought: str
    action: str


def strip_code_fence(text: str) -> str:
    """Returns the trimmed contents of the first fenced block, if any."""
    match = _FENCED_BLOCK.search(text)
    if match is None:
        return text
    return match.group(1).strip()


def strip_backticks(text: str) -> str:
    return text.replace("`", "")


def strip_namespace_prefix(text: str) -> str:
    """Removes one leading ``tool-`` token that models prepend to tool ids."""
    if text.startswith(NAMESPACE_CONFUSION_PREFIX):
        return text[len(NAMESPACE_CONFUSION_PREFIX) :]
    return text


def clean_action(raw_action: str) -> str:
    """
    Normalizes formatting noise around an action string.

    Args:
        raw_action: Everything the model wrote after ``Action:``.

    Returns:
        The action with one outer code fence, stray backticks and one
        leading ``tool-`` prefix removed, trimmed.
    """
    action = strip_code_fence(raw_action.strip())
    action = strip_backticks(action).strip()
    return strip_namespace_prefix(action).strip()


def parse_response(response_text: str) -> ParsedResponse:
    """
    Extracts a (thought, action) pair from a raw model response.

    Fallbacks are tried in order and the first match wins: a full
    ``Thought: ... Action: ...`` block, a bare ``Action:`` marker, then a
    lone ``Thought:``. An empty action is a valid result that signals the
    model chose not to act.

    Args:
        response_text: The raw model output.

    Returns:
        The trimmed thought and the cleaned action.
    """
    match = _THOUGHT_THEN_ACTION.search(response_text)
    if match:
        return ParsedResponse(match.group(1).strip(), clean_action(match.group(2)))

    match = _ACTION_ONLY.search(response_text)
    if match:
        preceding = response_text[: match.start()].strip()
        thought = ""
        if preceding.lower().startswith(THOUGHT_MARKER):
            thought = preceding[len(THOUGHT_MARKER) :].strip()
        return ParsedResponse(thought, clean_action(match.group(1)))

    stripped = response_text.strip()
    if stripped.lower().startswith(THOUGHT_MARKER):
        return ParsedResponse(stripped[len(THOUGHT_MARKER) :].strip(), "")

    return ParsedResponse("", "")
