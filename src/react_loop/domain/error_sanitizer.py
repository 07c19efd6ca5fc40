"""Redact secrets from fault details and tool arguments before logging."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

REDACTED_VALUE = "<redacted>"
DEFAULT_MAX_STRING_LENGTH = 256
DEFAULT_MAX_ITEMS = 25
DEFAULT_MAX_DEPTH = 3

_SENSITIVE_KEY_FRAGMENTS = (
    "api_key",
    "apikey",
    "authorization",
    "cookie",
    "password",
    "secret",
    "token",
)

_TOKEN_PATTERNS = (
    re.compile(r"sk-[A-Za-z0-9_-]{10,}"),
    re.compile(r"(?i)bearer\s+[A-Za-z0-9._-]{10,}"),
)


def sanitize_text(value: str, max_length: int = DEFAULT_MAX_STRING_LENGTH) -> str:
    """Redact token-like substrings and cap the length of a string.

    Args:
        value: Input text.
        max_length: Maximum length of the returned string.

    Returns:
        The redacted, length-capped text.
    """

    for pattern in _TOKEN_PATTERNS:
        value = pattern.sub(REDACTED_VALUE, value)
    if len(value) <= max_length:
        return value
    return f"{value[:max_length]}...[truncated]"


def sanitize_mapping(
    values: Mapping[str, Any],
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_items: int = DEFAULT_MAX_ITEMS,
) -> Dict[str, Any]:
    """Redact sensitive keys in a (possibly nested) mapping.

    Used for tool arguments and fault metadata that end up in log records.

    Args:
        values: Mapping to sanitize.
        max_depth: Nesting depth after which values are redacted.
        max_items: Maximum entries kept per collection.

    Returns:
        A sanitized copy of the mapping.
    """

    return _sanitize(values, depth=max_depth, max_items=max_items)


def build_exception_details(error: BaseException) -> Dict[str, Any]:
    """Summarize an exception (and its cause) for operator logs.

    Args:
        error: The exception to summarize.

    Returns:
        A dictionary with class names and sanitized messages.
    """

    details: Dict[str, Any] = {"error_class": error.__class__.__name__}
    message = str(error)
    if message:
        details["message"] = sanitize_text(message)
    cause = error.__cause__
    if cause is not None:
        details["cause_class"] = cause.__class__.__name__
        cause_message = str(cause)
        if cause_message:
            details["cause_message"] = sanitize_text(cause_message)
    return details


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in _SENSITIVE_KEY_FRAGMENTS)


def _sanitize(value: Any, depth: int, max_items: int) -> Any:
    if depth <= 0:
        return REDACTED_VALUE
    if isinstance(value, str):
        return sanitize_text(value)
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        sanitized: Dict[str, Any] = {}
        for index, (key, item) in enumerate(value.items()):
            if index >= max_items:
                sanitized["_truncated"] = True
                break
            key_text = str(key)
            if _is_sensitive_key(key_text):
                sanitized[key_text] = REDACTED_VALUE
            else:
                sanitized[key_text] = _sanitize(item, depth - 1, max_items)
        return sanitized
    if isinstance(value, (list, tuple, set)):
        items = [_sanitize(item, depth - 1, max_items) for item in list(value)[:max_items]]
        if len(value) > max_items:
            items.append(REDACTED_VALUE)
        return items
    return sanitize_text(str(value))
