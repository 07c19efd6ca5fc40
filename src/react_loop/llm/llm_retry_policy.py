import httpx
import openai
from tenacity import wait_exponential_jitter

DEFAULT_MAX_ATTEMPTS = 1


def default_retry_exceptions() -> tuple[type[Exception], ...]:
    """Return transport faults that are safe to retry.

    Only connection-level faults qualify: the request never produced a
    generation, so repeating it cannot change the conversation.
    """

    return (
        openai.APIConnectionError,
        httpx.ConnectError,
        httpx.ConnectTimeout,
    )


def default_wait_strategy():
    """Return the default tenacity wait strategy."""

    return wait_exponential_jitter(initial=1.0, max=8.0)
