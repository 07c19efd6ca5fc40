from react_loop.domain.action import ActionReference
from react_loop.domain.invocation import ErrorKind, InvocationError
from react_loop.engine.action_resolver import (
    extract_final_answer,
    is_finish_action,
    resolve_action,
)


def test_resolve_tool_with_arguments() -> None:
    """Parses a tool id followed by a JSON object."""
    ref = resolve_action('wp/get-option {"option_name": "blogname"}')

    assert ref == ActionReference(tool_id="wp/get-option", args={"option_name": "blogname"})


def test_resolve_tool_without_arguments() -> None:
    ref = resolve_action("wp/list-posts")

    assert isinstance(ref, ActionReference)
    assert ref.args == {}


def test_resolve_invalid_json() -> None:
    """Reports malformed argument JSON."""
    error = resolve_action("wp/get-option {option_name: blogname}")

    assert isinstance(error, InvocationError)
    assert error.kind is ErrorKind.INVALID_JSON_FORMAT
    assert "{option_name: blogname}" in error.message


def test_resolve_invalid_format() -> None:
    error = resolve_action("please call the option tool")

    assert isinstance(error, InvocationError)
    assert error.kind is ErrorKind.INVALID_ACTION_FORMAT


def test_resolve_rejects_finish() -> None:
    """A finish action is never dispatched as a tool."""
    error = resolve_action("finish[done]")

    assert isinstance(error, InvocationError)
    assert error.kind is ErrorKind.FINISH_MISROUTED


def test_extract_final_answer_uses_outer_brackets() -> None:
    """Keeps nested brackets inside the answer."""
    assert extract_final_answer("finish[ see [1] and [2] ]") == "see [1] and [2]"
    assert extract_final_answer("FINISH[ok]") == "ok"
    assert extract_final_answer("wp/list-posts {}") is None
    assert is_finish_action("finish[]")


def test_resolve_unbalanced_json_is_invalid_json() -> None:
    """An unterminated argument object names the offending fragment."""
    error = resolve_action("foo/bar {bad json")

    assert isinstance(error, InvocationError)
    assert error.kind is ErrorKind.INVALID_JSON_FORMAT
    assert error.message.endswith("Received: {bad json")


def test_resolve_numeric_arguments() -> None:
    assert resolve_action('foo/bar {"x":1}') == ActionReference(
        tool_id="foo/bar", args={"x": 1}
    )


def test_resolve_trailing_text_after_json() -> None:
    error = resolve_action("foo/bar {}extra")

    assert isinstance(error, InvocationError)
    assert error.kind is ErrorKind.INVALID_JSON_FORMAT


def test_resolve_rejects_non_finite_constants() -> None:
    """NaN and Infinity are not JSON even though Python's decoder accepts them."""
    for fragment in ('{"x": NaN}', '{"x": Infinity}', '{"x": -Infinity}'):
        error = resolve_action(f"foo/bar {fragment}")

        assert isinstance(error, InvocationError)
        assert error.kind is ErrorKind.INVALID_JSON_FORMAT
