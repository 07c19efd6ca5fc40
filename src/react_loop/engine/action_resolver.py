"""Turn a cleaned action string into a tool reference.

Pure syntax validation: no registry lookup and no I/O.
"""

import json
import re
from typing import Optional, Union

from react_loop.domain.action import ActionReference
from react_loop.domain.invocation import ErrorKind, InvocationError

_FINISH_ACTION = re.compile(r"^finish\[(.*)\]$", re.IGNORECASE | re.DOTALL)
# Anything from the first brace on is the argument fragment, so an
# unbalanced object is reported as bad JSON rather than a bad action.
_TOOL_ACTION = re.compile(
    r"^([a-z0-9\-/]+)(?:\s*(\{.*))?$", re.IGNORECASE | re.DOTALL
)


def _reject_constant(name: str) -> object:
    raise ValueError(f"{name} is not valid JSON")


def is_finish_action(action: str) -> bool:
    return _FINISH_ACTION.match(action.strip()) is not None


def extract_final_answer(action: str) -> Optional[str]:
    """
    Returns the answer of a ``finish[...]`` action.

    The answer is the text between the first ``[`` and the last ``]``.

    Args:
        action: A cleaned action string.

    Returns:
        The trimmed answer, or None if the action is not a finish action.
    """
    text = action.strip()
    if not is_finish_action(text):
        return None
    return text[text.index("[") + 1 : text.rindex("]")].strip()


def resolve_action(action_text: str) -> Union[ActionReference, InvocationError]:
    """
    Parses ``tool_id {json}`` into an ActionReference.

    Args:
        action_text: A cleaned, non-finish action string.

    Returns:
        The parsed reference, or an InvocationError describing why the text
        is not a valid action.
    """
    text = action_text.strip()
    if is_finish_action(text):
        return InvocationError(
            kind=ErrorKind.FINISH_MISROUTED,
            message='The "finish" action should be handled by the main loop.',
        )

    match = _TOOL_ACTION.match(text)
    if match is None:
        return InvocationError(
            kind=ErrorKind.INVALID_ACTION_FORMAT,
            message=(
                'Action format is invalid. Expected: tool_id {"key": "value"} '
                f"or finish[Answer]. Received: {text}"
            ),
        )

    tool_id = match.group(1)
    fragment = (match.group(2) or "").strip()
    if not fragment:
        return ActionReference(tool_id=tool_id, args={})

    try:
        args = json.loads(fragment, parse_constant=_reject_constant)
    except ValueError:
        args = None
    if not isinstance(args, dict):
        return InvocationError(
            kind=ErrorKind.INVALID_JSON_FORMAT,
            message=f"Action arguments is not valid JSON. Received: {fragment}",
        )
    return ActionReference(tool_id=tool_id, args=args)
