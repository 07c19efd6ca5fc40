"""Contracts for the text-generation collaborator and response text extraction."""

import logging
from typing import Any, Mapping, Optional, Protocol, Sequence

from langchain_core.messages import BaseMessage

from react_loop.domain.conversation import Turn

logger = logging.getLogger(__name__)

_MAX_SCAN_DEPTH = 8
_TEXT_KEYS = ("text", "content", "output", "message", "parts", "candidates", "choices")


class TextModel(Protocol):
    """A model handle configured with a system instruction."""

    def generate_text(self, turns: Sequence[Turn], temperature: float) -> Any:
        """Generate candidates for the conversation.

        Args:
            turns: The full conversation, oldest first.
            temperature: Sampling temperature.

        Returns:
            Provider-specific candidates; see ``extract_text``.
        """

        ...


class ModelProvider(Protocol):
    """Hands out model handles for a given system instruction."""

    def get_model(self, system_instruction: str) -> TextModel:
        """Return a text-generation model using ``system_instruction``."""

        ...


def extract_text(candidates: Any) -> str:
    """Best-effort extraction of response text from model candidates.

    Tries known response types first, then scans common container shapes,
    then stringifies scalars. Never raises.

    Args:
        candidates: Whatever the model handle returned.

    Returns:
        The response text, or an empty string when none can be found.
    """

    try:
        text = _structured_text(candidates)
        if text is None:
            text = _scan(candidates, depth=0)
    except Exception:
        logger.exception("Structured text extraction failed")
        text = None
    if text is None:
        text = _stringify(candidates)
    if text is None:
        logger.warning(
            "Could not extract text from model candidates",
            extra={"candidate_type": type(candidates).__name__},
        )
        return ""
    return text


def _structured_text(candidates: Any) -> Optional[str]:
    if isinstance(candidates, str):
        return candidates
    if isinstance(candidates, BaseMessage):
        return _content_text(candidates.content)
    return None


def _content_text(content: Any) -> Optional[str]:
    """Flattens LangChain-style content (a string or a list of blocks)."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        pieces = []
        for block in content:
            if isinstance(block, str):
                pieces.append(block)
            elif isinstance(block, Mapping) and isinstance(block.get("text"), str):
                pieces.append(block["text"])
        return "".join(pieces) if pieces else None
    return None


def _scan(value: Any, depth: int, join_parts: bool = False) -> Optional[str]:
    if depth > _MAX_SCAN_DEPTH or value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, BaseMessage):
        return _content_text(value.content)
    if isinstance(value, Mapping):
        for key in _TEXT_KEYS:
            if key in value:
                text = _scan(value[key], depth + 1, join_parts=key == "parts")
                if text is not None:
                    return text
        return None
    if isinstance(value, (list, tuple)):
        pieces = [_scan(item, depth + 1) for item in value]
        found = [piece for piece in pieces if piece is not None]
        if not found:
            return None
        # Parts of one message are joined; alternative candidates are not.
        return "".join(found) if join_parts else found[0]
    for attribute in _TEXT_KEYS:
        attr_value = getattr(value, attribute, None)
        if attr_value is not None and not callable(attr_value):
            text = _scan(attr_value, depth + 1, join_parts=attribute == "parts")
            if text is not None:
                return text
    return None


def _stringify(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None
