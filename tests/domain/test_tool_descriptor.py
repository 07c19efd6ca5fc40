import pytest

from react_loop.domain.tool import (
    ToolDescriptor,
    ToolError,
    ToolInvocationRequest,
    ToolKind,
)


def test_descriptor_prefers_callback() -> None:
    """Uses the direct callback before the alternate path."""
    tool = ToolDescriptor(
        id="demo/echo",
        name="Echo",
        description="Echoes",
        callback=lambda request: {"via": "callback"},
        alternate_invocation=lambda request: {"via": "alternate"},
    )

    assert tool.invoke(ToolInvocationRequest()) == {"via": "callback"}
    assert tool.namespace == "demo"
    assert tool.kind is ToolKind.TOOL


def test_descriptor_falls_back_to_alternate() -> None:
    tool = ToolDescriptor(
        id="demo/echo",
        name="Echo",
        description="Echoes",
        alternate_invocation=lambda request: request.get("text"),
    )

    assert tool.invocable
    assert tool.has_alternate_invocation
    assert tool.invoke(ToolInvocationRequest(args={"text": "hi"})) == "hi"


def test_descriptor_without_target_raises() -> None:
    """Raises a ToolError when nothing can execute the tool."""
    tool = ToolDescriptor(id="demo/inert", name="Inert", description="")

    assert not tool.invocable
    with pytest.raises(ToolError) as excinfo:
        tool.invoke(ToolInvocationRequest())
    assert excinfo.value.status_hint == 501


def test_missing_dependency_reports_first_unimportable_module() -> None:
    tool = ToolDescriptor(
        id="demo/needs",
        name="Needs",
        description="",
        requires=("json", "react_loop_missing_module_xyz"),
    )

    assert tool.missing_dependency() == "react_loop_missing_module_xyz"
