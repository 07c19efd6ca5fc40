from react_loop.domain.action import ActionReference
from react_loop.domain.conversation import ConversationContext, Role, Turn
from react_loop.domain.invocation import ErrorKind, InvocationError, InvocationResult
from react_loop.domain.outcome import (
    IterationState,
    LoopOutcome,
    LoopResult,
    OutcomeKind,
)
from react_loop.domain.tool import (
    ToolDescriptor,
    ToolError,
    ToolInvocationRequest,
    ToolKind,
)
from react_loop.domain.transcript import Transcript

__all__ = [
    "ActionReference",
    "ConversationContext",
    "ErrorKind",
    "InvocationError",
    "InvocationResult",
    "IterationState",
    "LoopOutcome",
    "LoopResult",
    "OutcomeKind",
    "Role",
    "ToolDescriptor",
    "ToolError",
    "ToolInvocationRequest",
    "ToolKind",
    "Transcript",
    "Turn",
]
