from react_loop.domain.tool import ToolDescriptor
from react_loop.infra.tool_registry import ToolRegistry, ToolSet


def _tool(tool_id: str, **kwargs) -> ToolDescriptor:
    kwargs.setdefault("callback", lambda request: None)
    return ToolDescriptor(id=tool_id, name=tool_id, description="", **kwargs)


def test_register_find_and_unregister() -> None:
    registry = ToolRegistry()
    registry.register(_tool("wp/a"))

    assert registry.find_tool("wp/a") is not None
    registry.unregister("wp/a")
    assert registry.find_tool("wp/a") is None
    registry.unregister("wp/a")


def test_list_tools_applies_access_control() -> None:
    """Filters tools by whitelist or blacklist."""
    registry = ToolRegistry()
    for tool_id in ("wp/a", "wp/b", "wp/c"):
        registry.register(_tool(tool_id))

    assert [tool.id for tool in registry.list_tools()] == ["wp/a", "wp/b", "wp/c"]
    assert [tool.id for tool in registry.list_tools(whitelist=["wp/a", "wp/b"])] == [
        "wp/a",
        "wp/b",
    ]
    assert [tool.id for tool in registry.list_tools(blacklist=["wp/b"])] == [
        "wp/a",
        "wp/c",
    ]


def test_tool_set_probe_controls_availability() -> None:
    """A tool is unavailable while its set is unloaded."""
    state = {"up": False}
    registry = ToolRegistry()
    registry.register(_tool("shop/orders"))
    registry.register(_tool("wp/posts"))
    tool_set = ToolSet("shop", probe=lambda: state["up"])
    registry.register_tool_set(tool_set)

    assert tool_set.loaded is False
    assert not registry.is_available("shop/orders")
    assert registry.is_available("wp/posts")

    state["up"] = True
    registry.refresh()

    assert tool_set.loaded is True
    assert registry.is_available("shop/orders")


def test_failing_probe_marks_set_unloaded() -> None:
    def probe() -> bool:
        raise RuntimeError("plugin crashed")

    registry = ToolRegistry()
    registry.register(_tool("shop/orders"))
    registry.register_tool_set(ToolSet("shop", probe=probe))

    assert not registry.is_available("shop/orders")


def test_inert_and_dependency_missing_tools_are_unavailable() -> None:
    registry = ToolRegistry()
    registry.register(ToolDescriptor(id="wp/inert", name="Inert", description=""))
    registry.register(_tool("wp/needs", requires=("react_loop_absent_xyz",)))
    registry.register(_tool("wp/ok"))

    assert [tool.id for tool in registry.available_tools()] == ["wp/ok"]
    assert not registry.is_available("wp/unknown")


def test_tool_set_gates_only_its_own_namespace() -> None:
    """An unloaded set does not gate namespaces that merely share a prefix."""
    registry = ToolRegistry()
    registry.register(_tool("fs/read"))
    registry.register(_tool("f/read"))
    registry.register(_tool("fsx/read"))
    registry.register_tool_set(ToolSet("fs", probe=lambda: False))

    assert not registry.is_available("fs/read")
    assert registry.is_available("f/read")
    assert registry.is_available("fsx/read")
