"""Tool invocation for the agent loop."""

import logging
from typing import Optional, Sequence

from react_loop.config import DEFAULT_ALIAS_PREFIXES
from react_loop.domain.action import ActionReference
from react_loop.domain.error_sanitizer import build_exception_details, sanitize_mapping
from react_loop.domain.exceptions import ToolRegistryError
from react_loop.domain.invocation import ErrorKind, InvocationResult
from react_loop.domain.tool import ToolDescriptor, ToolError, ToolInvocationRequest
from react_loop.infra.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolInvoker:
    """
    Resolves, authorizes and executes tools from a registry.

    Every failure is returned as an InvocationResult; nothing raised by a
    tool escapes ``invoke``.

    Args:
        registry: The tool registry used to resolve tool ids.
        alias_prefixes: Namespace prefixes tried, in order, when the exact
            id is unknown.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        alias_prefixes: Sequence[str] = DEFAULT_ALIAS_PREFIXES,
    ) -> None:
        self.registry = registry
        self.alias_prefixes = tuple(alias_prefixes)

    def lookup(self, tool_id: str) -> Optional[ToolDescriptor]:
        """
        Finds a tool by exact id, then by each alias prefix.

        A prefix is skipped when the id already carries it.

        Args:
            tool_id: The id the model asked for.

        Returns:
            The first matching descriptor, or None.
        """
        tool = self.registry.find_tool(tool_id)
        if tool is not None:
            return tool
        for prefix in self.alias_prefixes:
            if tool_id.startswith(prefix):
                continue
            tool = self.registry.find_tool(prefix + tool_id)
            if tool is not None:
                return tool
        return None

    def invoke(self, ref: ActionReference) -> InvocationResult:
        """
        Executes the referenced tool.

        Args:
            ref: The parsed action.

        Returns:
            The tool value or a classified error.
        """
        try:
            tool = self.lookup(ref.tool_id)
        except ToolRegistryError as exc:
            logger.warning("Tool registry lookup failed", extra={"tool_id": ref.tool_id})
            return InvocationResult.failure(
                ErrorKind.NOT_FOUND,
                f'Tool "{ref.tool_id}" could not be looked up: {exc}',
                status_hint=503,
            )
        if tool is None:
            logger.warning("Tool not found", extra={"tool_id": ref.tool_id})
            return InvocationResult.failure(
                ErrorKind.NOT_FOUND, self._not_found_message(ref.tool_id), status_hint=404
            )

        missing = tool.missing_dependency()
        if missing is not None:
            logger.warning(
                "Tool dependency missing",
                extra={"tool_id": tool.id, "dependency": missing},
            )
            return InvocationResult.failure(
                ErrorKind.DEPENDENCY_MISSING,
                f'Tool "{tool.id}" depends on "{missing}" which is not available. '
                "The providing package may not be installed.",
                status_hint=503,
            )

        request = ToolInvocationRequest(args=ref.args)
        denied = self._authorize(tool, request)
        if denied is not None:
            return denied

        logger.info(
            "Invoking tool",
            extra={"tool_id": tool.id, "tool_args": sanitize_mapping(ref.args)},
        )
        try:
            value = tool.invoke(request)
        except ToolError as exc:
            logger.warning(
                "Tool reported an error",
                extra={"tool_id": tool.id, "status_hint": exc.status_hint},
            )
            return InvocationResult.failure(
                ErrorKind.EXECUTION_ERROR,
                f"Error executing tool: {exc}",
                status_hint=exc.status_hint,
            )
        except Exception as exc:
            logger.exception(
                "Tool execution failed",
                extra={"tool_id": tool.id, "error": build_exception_details(exc)},
            )
            return InvocationResult.failure(
                ErrorKind.EXECUTION_ERROR, f"Error executing tool: {exc}"
            )
        return InvocationResult.success(value)

    def _authorize(
        self, tool: ToolDescriptor, request: ToolInvocationRequest
    ) -> Optional[InvocationResult]:
        """
        Runs the tool's authorization check.

        Only a literal ``True`` grants access; a missing check denies.

        Returns:
            None when access is granted, otherwise the denial result.
        """
        if tool.authorization_check is None:
            logger.warning("Tool has no authorization check", extra={"tool_id": tool.id})
            return InvocationResult.failure(
                ErrorKind.PERMISSION_UNDEFINED,
                f'Permission check not defined for tool "{tool.id}". Access denied.',
                status_hint=500,
            )
        try:
            verdict = tool.authorization_check(request)
        except Exception as exc:
            logger.exception(
                "Authorization check raised",
                extra={"tool_id": tool.id, "error": build_exception_details(exc)},
            )
            return InvocationResult.failure(
                ErrorKind.PERMISSION_DENIED,
                f'Error during permission check for tool "{tool.id}".',
                status_hint=500,
            )
        if verdict is not True:
            logger.warning("Permission denied", extra={"tool_id": tool.id})
            return InvocationResult.failure(
                ErrorKind.PERMISSION_DENIED,
                f'Permission denied for tool "{tool.id}".',
                status_hint=403,
            )
        return None

    def _not_found_message(self, tool_id: str) -> str:
        message = f'Tool "{tool_id}" not found or invalid.'
        try:
            available = [tool.id for tool in self.registry.available_tools()]
        except ToolRegistryError:
            available = []
        if available:
            message += " Available tools: " + ", ".join(available)
        return message
