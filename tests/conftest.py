from typing import Any, Callable, Dict, List, Sequence

import pytest

from react_loop.domain.conversation import Turn
from react_loop.domain.tool import ToolDescriptor, ToolInvocationRequest
from react_loop.infra.tool_registry import ToolRegistry


class ScriptedModel:
    """
    Deterministic model handle that replays canned responses.

    Args:
        responses: Returned in order; an Exception instance is raised instead.
    """

    def __init__(self, responses: Sequence[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[List[Turn]] = []
        self.temperatures: List[float] = []

    def generate_text(self, turns: Sequence[Turn], temperature: float) -> Any:
        self.calls.append(list(turns))
        self.temperatures.append(temperature)
        if not self._responses:
            raise AssertionError("ScriptedModel ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class ScriptedProvider:
    """Hands out one ScriptedModel and records the system instruction."""

    def __init__(self, model: ScriptedModel) -> None:
        self.model = model
        self.instructions: List[str] = []

    def get_model(self, system_instruction: str) -> ScriptedModel:
        self.instructions.append(system_instruction)
        return self.model


class RepeatingModel(ScriptedModel):
    """Returns the same response forever."""

    def __init__(self, response: str) -> None:
        super().__init__([])
        self._response = response

    def generate_text(self, turns: Sequence[Turn], temperature: float) -> Any:
        self.calls.append(list(turns))
        self.temperatures.append(temperature)
        return self._response


def allow(request: ToolInvocationRequest) -> bool:
    return True


@pytest.fixture
def scripted() -> Callable[..., ScriptedProvider]:
    """Builds a provider around a ScriptedModel for the given responses."""

    def _build(*responses: Any) -> ScriptedProvider:
        return ScriptedProvider(ScriptedModel(responses))

    return _build


@pytest.fixture
def repeating() -> Callable[[str], ScriptedProvider]:
    """Builds a provider whose model repeats one response."""

    def _build(response: str) -> ScriptedProvider:
        return ScriptedProvider(RepeatingModel(response))

    return _build


@pytest.fixture
def option_store() -> Dict[str, str]:
    return {"blogname": "My Site", "admin_email": "admin@example.com"}


@pytest.fixture
def registry(option_store: Dict[str, str]) -> ToolRegistry:
    """Registry holding a single ``wp/get-option`` resource."""

    def get_option(request: ToolInvocationRequest) -> Dict[str, str]:
        return {"value": option_store[request.get("option_name")]}

    registry = ToolRegistry()
    registry.register(
        ToolDescriptor(
            id="wp/get-option",
            name="Get Option",
            description="Reads a site option.",
            input_schema={
                "type": "object",
                "properties": {"option_name": {"type": "string"}},
                "required": ["option_name"],
            },
            callback=get_option,
            authorization_check=allow,
        )
    )
    return registry
