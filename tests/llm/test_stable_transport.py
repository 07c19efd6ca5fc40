import pytest

from react_loop.llm.stable_transport import StableTransport, StableTransportError


class TransientError(Exception):
    pass


def test_stable_transport_retries_until_success() -> None:
    """Ensure StableTransport retries eligible exceptions."""

    calls = {"count": 0}

    def flaky_completion(**kwargs):
        calls["count"] += 1
        if calls["count"] < 3:
            raise TransientError("temporary")
        return kwargs["value"]

    transport = StableTransport(
        flaky_completion, retry_exceptions=(TransientError,), max_attempts=3
    )
    result = transport.complete({"value": "ok"})

    assert result == "ok"
    assert calls["count"] == 3


def test_stable_transport_raises_after_retries() -> None:
    """Ensure StableTransport raises after exhausting retries."""

    def failing_completion(**kwargs):
        raise TransientError("always failing")

    transport = StableTransport(
        failing_completion, retry_exceptions=(TransientError,), max_attempts=2
    )

    with pytest.raises(StableTransportError) as excinfo:
        transport.complete({})
    assert isinstance(excinfo.value.__cause__, TransientError)
    assert "after 2 attempts" in str(excinfo.value)


def test_stable_transport_does_not_retry_other_errors() -> None:
    calls = {"count": 0}

    def failing_completion(**kwargs):
        calls["count"] += 1
        raise ValueError("bad request")

    transport = StableTransport(
        failing_completion, retry_exceptions=(TransientError,), max_attempts=3
    )

    with pytest.raises(ValueError):
        transport.complete({})
    assert calls["count"] == 1


def test_stable_transport_single_attempt_passes_through() -> None:
    """Ensure StableTransport does not retry by default."""

    def failing_completion(**kwargs):
        raise TransientError("no retry")

    transport = StableTransport(failing_completion, retry_exceptions=(TransientError,))

    assert transport.max_attempts == 1
    with pytest.raises(TransientError):
        transport.complete({})
