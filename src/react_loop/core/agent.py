from typing import Iterable, List, Optional, Tuple

from react_loop.config import Config
from react_loop.config_provider import ConfigProvider
from react_loop.core.service import AgentRunRequest, AgentRunResponse, AgentService
from react_loop.domain.tool import ToolDescriptor
from react_loop.engine.react_loop import ReActLoop
from react_loop.infra.file_tools import register_builtin_tools
from react_loop.infra.tool_registry import ToolRegistry
from react_loop.llm.langchain_model import LangChainModelProvider
from react_loop.llm.llm_service import PydanticAIModelProvider
from react_loop.llm.model_client import ModelProvider


def build_provider(config: Config) -> ModelProvider:
    """Returns the model provider for the configured backend."""
    if config.get_model_backend() == "langchain":
        return LangChainModelProvider.from_config(config)
    return PydanticAIModelProvider(config)


class Agent:
    """
    Wires configuration, tool registry, model provider and loop together.
    """

    def __init__(
        self,
        config: Config | None = None,
        registry: ToolRegistry | None = None,
        provider: ModelProvider | None = None,
    ):
        self.config = config or ConfigProvider().load()

        # Built-in tools are only registered on a registry we own.
        if registry is None:
            registry = ToolRegistry()
            register_builtin_tools(
                registry,
                root=self.config.get_tool_root(),
                app_dir=self.config.get_app_dir(),
            )
        self.registry = registry

        self.provider = provider or build_provider(self.config)
        self.loop = ReActLoop.from_config(self.config, self.registry)
        self.service = AgentService(
            loop=self.loop,
            provider=self.provider,
            required_capability=self.config.get_required_capability(),
        )

    def ask(
        self,
        query: str,
        capabilities: Iterable[str],
        max_iterations: Optional[int] = None,
    ) -> AgentRunResponse:
        """
        Runs a query through the transport boundary.
        """
        return self.service.handle(
            AgentRunRequest(query=query), capabilities, max_iterations=max_iterations
        )

    def tool_status(self) -> List[Tuple[ToolDescriptor, bool]]:
        """
        Lists registered tools with their current availability.
        """
        self.registry.refresh()
        return [
            (tool, self.registry.is_available(tool.id))
            for tool in self.registry.list_tools()
        ]
