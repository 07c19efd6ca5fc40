from react_loop.domain.invocation import ErrorKind, InvocationResult
from react_loop.engine.observation import (
    ENCODING_FAILED_MARKER,
    TRUNCATION_MARKER,
    ObservationFormatter,
    as_context_text,
)


def test_success_is_serialized_as_json() -> None:
    formatter = ObservationFormatter()

    assert formatter.format(InvocationResult.success({"value": "My Site"})) == (
        '{"value": "My Site"}'
    )


def test_long_result_is_truncated() -> None:
    """A 1000-character serialization keeps an 800-character prefix."""
    formatter = ObservationFormatter(max_chars=800)
    value = "x" * 998  # serializes with quotes to 1000 characters

    observation = formatter.format(InvocationResult.success(value))

    assert observation == ('"' + "x" * 799) + TRUNCATION_MARKER
    assert len(observation) == 800 + len(TRUNCATION_MARKER)


def test_short_result_is_unchanged() -> None:
    """A 799-character serialization passes through."""
    formatter = ObservationFormatter(max_chars=800)
    value = "y" * 797

    observation = formatter.format(InvocationResult.success(value))

    assert len(observation) == 799
    assert TRUNCATION_MARKER not in observation


def test_unencodable_value_becomes_marker() -> None:
    formatter = ObservationFormatter()

    observation = formatter.format(InvocationResult.success(object()))

    assert observation == f"Error: {ENCODING_FAILED_MARKER}"


def test_error_observation_format() -> None:
    """Errors carry the Error: prefix and the kind code."""
    formatter = ObservationFormatter()
    result = InvocationResult.failure(ErrorKind.NOT_FOUND, 'Tool "x" not found.')

    observation = formatter.format(result)

    assert observation == 'Error: Tool "x" not found. (Code: not_found)'
    assert as_context_text(observation).startswith("Observation: Error:")


def test_long_error_is_truncated() -> None:
    formatter = ObservationFormatter(max_chars=10)
    result = InvocationResult.failure(ErrorKind.EXECUTION_ERROR, "z" * 50)

    observation = formatter.format(result)

    assert observation == "Error: " + "z" * 10 + TRUNCATION_MARKER


def test_non_finite_float_becomes_marker() -> None:
    formatter = ObservationFormatter()

    for value in (float("nan"), {"ratio": float("inf")}):
        observation = formatter.format(InvocationResult.success(value))

        assert observation == f"Error: {ENCODING_FAILED_MARKER}"
