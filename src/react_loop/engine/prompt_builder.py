"""System instruction construction for the ReAct protocol."""

import json
import logging
from typing import List, Optional, Sequence

from react_loop.domain.exceptions import ToolRegistryError
from react_loop.domain.tool import ToolDescriptor
from react_loop.infra.tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_EXAMPLES = (
    'namespace/get-item {"item_id": 42}',
    "namespace/list-items {}",
)
MAX_TOOL_EXAMPLES = 4

REGISTRY_UNAVAILABLE_NOTICE = "Tool registry not available. No tools available.\n"
NO_TOOLS_NOTICE = "No tools currently available.\n"

_INSTRUCTIONS = """\
You are an assistant running within {environment}. Your goal is to help the user by using the available tools.
Follow the ReAct (Reasoning + Acting) process strictly:

Thought: Briefly explain your reasoning and plan for the *next single step*.
Action: Choose *one* available tool to execute. Format it *exactly* as: `tool_id JSON_Arguments`.
- `tool_id` is the ID listed for the tool.
- `JSON_Arguments` is a *valid JSON object* containing the arguments required by the tool's Input Schema. Use `{{}}` if no arguments are needed by the schema. Pay close attention to required fields in the schema.
{examples}
- If you have the final answer for the user, use the special action: `finish[Your final answer to the user.]`.

IMPORTANT FORMATTING RULES:
- DO NOT use code blocks with backticks (```) around your actions
- DO NOT prefix tool IDs with "tool-" - just use the exact ID as provided
- Write actions directly on a single line without any additional formatting
- CORRECT: namespace/get-item {{"item_id": 42}}
- INCORRECT: ```json
  tool-namespace/get-item {{"item_id": 42}}
  ```

IMPORTANT RULES:
- DO NOT ask the user for clarifying information, just use the tools available to you.
- Before acting, consider the information you have, the information you need, and the tools available to you.
- Some tasks are impossible with the tools available. If you have tried and failed, say so; that is acceptable.
- Do not make up information or assume success if an error occurred.

You will receive an Observation: with the result of your action (often in JSON format, sometimes just a success/error message). Use this observation to refine your thought process for the next step.

Keep iterating Thought -> Action -> Observation until you have the final answer for the user, then use the `finish[answer]` action.
If a tool fails (returns an error in Observation), state that in your Thought and try a different approach or use a different tool.

{tools}
Start your response *always* with "Thought:" followed by a newline, then "Action:" followed by a newline. Do not add any text before "Thought:".
"""


class PromptBuilder:
    """
    Builds the system instruction from the tools currently available.

    Args:
        registry: Registry to read tools from. ``None`` means no registry is
            reachable; the prompt then says so and the loop runs model-only.
        environment: Short description of where the assistant runs.
        examples: Generic action examples always shown to the model.
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry],
        environment: str = "a tool-enabled application environment",
        examples: Sequence[str] = DEFAULT_EXAMPLES,
    ) -> None:
        self.registry = registry
        self.environment = environment
        self.examples = tuple(examples)

    def _available_tools(self) -> Optional[List[ToolDescriptor]]:
        """
        Returns invocable, available tools, or None if the registry is down.
        """
        if self.registry is None:
            return None
        try:
            tools = self.registry.list_tools()
            return [
                tool
                for tool in tools
                if tool.invocable and self.registry.is_available(tool.id)
            ]
        except ToolRegistryError:
            logger.warning("Tool registry unavailable while building prompt")
            return None

    @staticmethod
    def _render_schema(tool: ToolDescriptor) -> str:
        if not tool.input_schema:
            return "{}"
        try:
            return json.dumps(tool.input_schema, indent=4)
        except (TypeError, ValueError):
            return "{}"

    def render_tools(self, tools: Optional[List[ToolDescriptor]]) -> str:
        """
        Serializes tools into the catalog section of the prompt.

        Args:
            tools: Tools to describe, or None when the registry is down.

        Returns:
            The catalog text.
        """
        header = "Available Tools:\n"
        if tools is None:
            return header + REGISTRY_UNAVAILABLE_NOTICE
        if not tools:
            return header + NO_TOOLS_NOTICE
        entries = [
            f"- ID: {tool.id}\n"
            f"  Name: {tool.name}\n"
            f"  Description: {tool.description}\n"
            f"  Input Schema (JSON): {self._render_schema(tool)}\n"
            for tool in tools
        ]
        return header + "".join(entries)

    def render_examples(self, tools: Optional[List[ToolDescriptor]]) -> str:
        examples = list(self.examples)
        tool_examples = [example for tool in tools or [] for example in tool.examples]
        examples.extend(tool_examples[:MAX_TOOL_EXAMPLES])
        return "\n".join(f"- Example: `{example}`" for example in examples)

    def build(self) -> str:
        """
        Builds the full system instruction.

        Returns:
            The instruction text, including the tool catalog.
        """
        tools = self._available_tools()
        prompt = _INSTRUCTIONS.format(
            environment=self.environment,
            examples=self.render_examples(tools),
            tools=self.render_tools(tools),
        )
        return prompt.strip()
