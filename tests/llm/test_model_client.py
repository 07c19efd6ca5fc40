from types import SimpleNamespace

import pytest
from langchain_core.messages import AIMessage

from react_loop.llm.model_client import extract_text


def test_extract_text_from_string_and_message() -> None:
    assert extract_text("Thought: hi") == "Thought: hi"
    assert extract_text(AIMessage(content="Thought: hi")) == "Thought: hi"


def test_extract_text_joins_content_blocks() -> None:
    message = AIMessage(
        content=[{"type": "text", "text": "Thought: a"}, {"type": "text", "text": "b"}]
    )

    assert extract_text(message) == "Thought: ab"


def test_extract_text_from_candidate_parts() -> None:
    """Joins the parts of the first candidate."""
    candidates = {
        "candidates": [
            {"content": {"parts": [{"text": "Thought: x\n"}, {"text": "Action: y"}]}},
            {"content": {"parts": [{"text": "ignored"}]}},
        ]
    }

    assert extract_text(candidates) == "Thought: x\nAction: y"


def test_extract_text_from_choices() -> None:
    response = {"choices": [{"message": {"content": "hello"}}, {"message": {}}]}

    assert extract_text(response) == "hello"


def test_extract_text_from_attributes() -> None:
    assert extract_text(SimpleNamespace(output="from output")) == "from output"


@pytest.mark.parametrize(
    ("candidates", "expected"),
    [(b"bytes", "bytes"), (42, "42"), (None, ""), (object(), ""), ({}, "")],
)
def test_extract_text_fallbacks(candidates, expected) -> None:
    """Never raises; unknown shapes yield an empty string."""
    assert extract_text(candidates) == expected
