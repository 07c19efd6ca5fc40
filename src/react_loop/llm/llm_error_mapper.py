"""Classify model-layer faults into stable, loggable reasons."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
import openai
from pydantic_ai.exceptions import ModelHTTPError

from react_loop.domain.error_sanitizer import build_exception_details
from react_loop.domain.exceptions import (
    ApiKeyError,
    ContextLengthError,
    RateLimitError,
)
from react_loop.llm.stable_transport import StableTransportError

_CONTEXT_LENGTH_CODES = {
    "context_length_exceeded",
    "context_window_exceeded",
    "context_length",
    "context_window",
}


@dataclass(frozen=True)
class ModelErrorMapping:
    """Normalized classification of a model fault."""

    reason: str
    error_type: type[Exception]
    details: Dict[str, Any]

    def describe(self) -> str:
        message = self.details.get("message")
        if message:
            return f"{self.reason}: {message}"
        return self.reason


def map_model_error(error: Exception) -> ModelErrorMapping:
    """Map an exception raised while generating text.

    Args:
        error: Exception raised by the model handle.

    Returns:
        ModelErrorMapping describing the failure.
    """

    details: Dict[str, Any] = build_exception_details(error)

    status_code, payload = _status_and_payload(error)
    if status_code is not None:
        details["status_code"] = status_code
        if status_code == 429:
            return ModelErrorMapping("rate_limit_error", RateLimitError, details)
        if status_code in (401, 403):
            return ModelErrorMapping("api_key_error", ApiKeyError, details)
        if _is_context_length_payload(payload):
            return ModelErrorMapping(
                "context_length_error", ContextLengthError, details
            )

    if isinstance(error, RateLimitError):
        return ModelErrorMapping("rate_limit_error", RateLimitError, details)
    if isinstance(error, ApiKeyError):
        return ModelErrorMapping("api_key_error", ApiKeyError, details)
    if isinstance(error, ContextLengthError):
        return ModelErrorMapping("context_length_error", ContextLengthError, details)
    if isinstance(
        error, (StableTransportError, httpx.RequestError, openai.APIConnectionError)
    ):
        return ModelErrorMapping("connection_error", type(error), details)

    error_name = error.__class__.__name__.lower()
    error_message = str(error).lower()
    if "ratelimit" in error_name or "rate limit" in error_message:
        return ModelErrorMapping("rate_limit_error", RateLimitError, details)
    if "authentication" in error_name or "api key" in error_message:
        return ModelErrorMapping("api_key_error", ApiKeyError, details)
    return ModelErrorMapping("model_call_failed", type(error), details)


def _status_and_payload(error: Exception) -> tuple[Optional[int], Any]:
    """Extract an HTTP status code and error body from provider exceptions."""

    if isinstance(error, httpx.HTTPStatusError):
        try:
            payload = error.response.json()
        except ValueError:
            payload = {}
        return error.response.status_code, payload
    if isinstance(error, ModelHTTPError):
        return error.status_code, error.body
    if isinstance(error, openai.APIStatusError):
        return error.status_code, error.body
    return None, None


def _is_context_length_payload(payload: Any) -> bool:
    """Return True when an error body indicates a context-length error."""

    if not isinstance(payload, dict):
        return False
    error_info = payload.get("error", payload)
    if not isinstance(error_info, dict):
        return False
    code = error_info.get("code") or error_info.get("type")
    if isinstance(code, str) and code.strip().lower() in _CONTEXT_LENGTH_CODES:
        return True
    message = error_info.get("message")
    if isinstance(message, str):
        normalized = message.strip().lower()
        return (
            "maximum context length" in normalized
            or "context length exceeded" in normalized
        )
    return False
