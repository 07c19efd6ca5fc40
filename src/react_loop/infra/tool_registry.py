"""Thread-safe registry of tool descriptors and tool-set availability."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from react_loop.domain.tool import ToolDescriptor
from react_loop.infra.library import Library

logger = logging.getLogger(__name__)


@dataclass
class ToolSet:
    """
    A group of tools sharing a namespace and a runtime dependency.

    Args:
        set_id: Identifier; a tool belongs to the set when its namespace
            equals the set id.
        probe: Returns whether the set's dependencies are currently present.
        loaded: Result of the last probe.
    """

    set_id: str
    probe: Callable[[], bool] = lambda: True
    loaded: bool = False


class ToolRegistry(Library[ToolDescriptor]):
    """
    Central registry for tools and resources.

    Registration happens outside the agent loop; the loop only reads. All
    access is guarded by a lock so concurrent requests can share one
    registry.
    """

    def __init__(self) -> None:
        super().__init__(key=lambda tool: tool.id)
        self._registry: Dict[str, ToolDescriptor] = {}
        self._tool_sets: Dict[str, ToolSet] = {}
        self._lock = threading.RLock()

    def register(self, tool: ToolDescriptor) -> None:
        """
        Registers (or replaces) a tool.

        Args:
            tool: The descriptor to register.
        """
        with self._lock:
            self._registry[tool.id] = tool

    def unregister(self, tool_id: str) -> None:
        with self._lock:
            self._registry.pop(tool_id, None)

    def register_tool_set(self, tool_set: ToolSet) -> None:
        """
        Registers a tool set and probes it immediately.

        Args:
            tool_set: The tool set to track.
        """
        with self._lock:
            self._tool_sets[tool_set.set_id] = tool_set
            tool_set.loaded = self._probe(tool_set)

    def refresh(self) -> None:
        """Re-probes every tool set so availability reflects the present."""
        with self._lock:
            for tool_set in self._tool_sets.values():
                tool_set.loaded = self._probe(tool_set)

    def find_tool(self, tool_id: str) -> Optional[ToolDescriptor]:
        """
        Retrieves a tool by exact id.

        Args:
            tool_id: The tool id to fetch.

        Returns:
            The matching descriptor or None.
        """
        with self._lock:
            return self._registry.get(tool_id)

    def list_tools(
        self,
        whitelist: Optional[List[str]] = None,
        blacklist: Optional[List[str]] = None,
    ) -> List[ToolDescriptor]:
        """
        Returns registered tools filtered by access control lists.

        Args:
            whitelist: Tool ids that are allowed.
            blacklist: Tool ids that are forbidden.

        Returns:
            The filtered tools in registration order.
        """
        with self._lock:
            tools = list(self._registry.values())
        return self.apply_access_control(tools, whitelist, blacklist)

    def is_available(self, tool_id: str) -> bool:
        """
        Returns whether a tool can be offered to the model right now.

        A tool is available when it is registered, invocable, its tool set
        (if any) is loaded, and its required modules can be imported.

        Args:
            tool_id: The tool id to check.

        Returns:
            True when the tool is usable.
        """
        with self._lock:
            tool = self._registry.get(tool_id)
            if tool is None:
                return False
            tool_set = self._tool_sets.get(tool.namespace)
            if tool_set is not None and not tool_set.loaded:
                logger.debug(
                    "Tool belongs to unloaded set",
                    extra={"tool_id": tool_id, "set_id": tool_set.set_id},
                )
                return False
        if not tool.invocable:
            logger.debug("Tool has no invocation target", extra={"tool_id": tool_id})
            return False
        missing = tool.missing_dependency()
        if missing is not None:
            logger.debug(
                "Tool depends on unavailable module",
                extra={"tool_id": tool_id, "dependency": missing},
            )
            return False
        return True

    def available_tools(self) -> List[ToolDescriptor]:
        return [tool for tool in self.list_tools() if self.is_available(tool.id)]

    @staticmethod
    def _probe(tool_set: ToolSet) -> bool:
        try:
            return bool(tool_set.probe())
        except Exception:
            logger.exception(
                "Tool set probe failed; marking unloaded",
                extra={"set_id": tool_set.set_id},
            )
            return False
