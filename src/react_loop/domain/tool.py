"""Descriptors for externally registered tools and resources."""

import importlib.util
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from react_loop.domain.exceptions import ReactLoopError


class ToolKind(str, Enum):
    """
    Distinguishes side-effecting tools from read-only resources.
    """

    TOOL = "tool"
    RESOURCE = "resource"


class ToolInvocationRequest(BaseModel):
    """Request passed to both a tool's authorization check and its callback."""

    args: Dict[str, Any] = Field(
        default_factory=dict, description="Arguments decoded from the action line."
    )

    model_config = ConfigDict(frozen=True)

    def get(self, key: str, default: Any = None) -> Any:
        return self.args.get(key, default)


ToolCallable = Callable[[ToolInvocationRequest], Any]


class ToolError(ReactLoopError):
    """
    Raised by a tool callback to report a structured failure.

    Args:
        message: Human-readable error message.
        status_hint: Optional HTTP-style status code.
    """

    def __init__(self, message: str, status_hint: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_hint = status_hint


@dataclass(frozen=True)
class ToolDescriptor:
    """
    Read-only description of a registered tool.

    A descriptor is invocable when it has a direct callback or an
    alternate invocation path. ``requires`` lists importable module names
    the callback depends on; a descriptor whose modules cannot be found is
    registered but inert.
    """

    id: str
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)
    callback: Optional[ToolCallable] = None
    authorization_check: Optional[ToolCallable] = None
    alternate_invocation: Optional[ToolCallable] = None
    kind: ToolKind = ToolKind.TOOL
    requires: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    @property
    def has_alternate_invocation(self) -> bool:
        return self.alternate_invocation is not None

    @property
    def invocable(self) -> bool:
        return self.callback is not None or self.has_alternate_invocation

    @property
    def namespace(self) -> str:
        return self.id.split("/", 1)[0]

    def missing_dependency(self) -> Optional[str]:
        """
        Returns the first required module that cannot be imported.

        Returns:
            The missing module name, or None when all are available.
        """
        for module_name in self.requires:
            try:
                spec = importlib.util.find_spec(module_name)
            except (ImportError, ValueError):
                spec = None
            if spec is None:
                return module_name
        return None

    def invoke(self, request: ToolInvocationRequest) -> Any:
        """
        Executes the tool through its callback or alternate path.

        Args:
            request: The invocation request.

        Returns:
            The JSON-compatible value produced by the tool.
        """
        if self.callback is not None:
            return self.callback(request)
        if self.alternate_invocation is not None:
            return self.alternate_invocation(request)
        raise ToolError(f'Tool "{self.id}" has no invocation target.', status_hint=501)
