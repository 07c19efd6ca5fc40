from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from uuid import uuid4

from openai import AsyncOpenAI
from pydantic import SecretStr
from pydantic_ai import Agent, ModelSettings
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from react_loop.config import Config
from react_loop.domain.conversation import Role, Turn
from react_loop.llm.llm_request import TextGenerationRequest
from react_loop.llm.llm_retry_policy import (
    DEFAULT_MAX_ATTEMPTS,
    default_retry_exceptions,
    default_wait_strategy,
)
from react_loop.llm.model_selector import ModelSelector
from react_loop.llm.stable_transport import StableTransport

logger = logging.getLogger(__name__)

# pydantic-ai model string prefixes for non-OpenAI providers.
_PROVIDER_PREFIXES = {"anthropic": "anthropic", "google": "google-gla"}

_ROLE_NAMES = {Role.USER: "user", Role.MODEL: "assistant"}

ModelBuilder = Callable[[TextGenerationRequest], Union[OpenAIChatModel, str]]


class PydanticAITextModel:
    """Text-generation handle implemented via PydanticAI.

    Each call runs a fresh PydanticAI agent with plain-text output; the
    conversation is rendered into a single prompt.
    """

    def __init__(
        self,
        system_instruction: str,
        model: str,
        model_builder: ModelBuilder,
        api_base: Optional[str] = None,
        api_key: Optional[SecretStr] = None,
        transport_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        """Initialize the handle.

        Args:
            system_instruction: System prompt sent with every call.
            model: Model identifier.
            model_builder: Builds the PydanticAI model for a request.
            api_base: Optional OpenAI-compatible base URL.
            api_key: Optional API key.
            transport_attempts: Attempts for connection faults.
        """

        self.system_instruction = system_instruction
        self.model = model
        self._model_builder = model_builder
        self._api_base = api_base
        self._api_key = api_key
        self._transport = StableTransport(
            lambda **call_args: self._run_agent(**call_args),
            retry_exceptions=default_retry_exceptions(),
            max_attempts=transport_attempts,
            wait_strategy=default_wait_strategy(),
        )

    def generate_text(self, turns: Sequence[Turn], temperature: float) -> str:
        """Generate the next model response for the conversation.

        Args:
            turns: Conversation turns, oldest first.
            temperature: Sampling temperature.

        Returns:
            The response text.
        """

        request = TextGenerationRequest(
            messages=self._to_messages(turns),
            model=self.model,
            temperature=temperature,
            metadata={"id": str(uuid4()), "turns": len(turns)},
            api_base=self._api_base,
            api_key=self._api_key,
        )
        system_prompt, user_prompt = self._render_prompts(request.messages)
        return self._transport.complete(
            {
                "request": request,
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
            }
        )

    def _to_messages(self, turns: Sequence[Turn]) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": self.system_instruction}]
        messages.extend(
            {"role": _ROLE_NAMES[turn.role], "content": turn.text} for turn in turns
        )
        return messages

    def _render_prompts(
        self, messages: List[Dict[str, str]]
    ) -> tuple[Optional[str], str]:
        """Render role messages into system + user prompts.

        Args:
            messages: Role/content messages.

        Returns:
            Tuple of (system_prompt, user_prompt).
        """

        system_parts: list[str] = []
        non_system: list[Dict[str, str]] = []
        for message in messages:
            role = (message.get("role") or "").strip()
            content = (message.get("content") or "").strip()
            if not content:
                continue
            if role == "system":
                system_parts.append(content)
            else:
                non_system.append({"role": role, "content": content})

        system_prompt = "\n\n".join(system_parts).strip() or None

        if len(non_system) == 1 and non_system[0].get("role") == "user":
            return system_prompt, non_system[0]["content"]

        rendered = [
            f"{(msg.get('role') or 'user').capitalize()}: {msg.get('content', '')}"
            for msg in non_system
        ]
        return system_prompt, "\n\n".join(rendered).strip()

    def _run_agent(
        self,
        request: TextGenerationRequest,
        system_prompt: Optional[str],
        user_prompt: str,
    ) -> str:
        """Run PydanticAI once and return the text output.

        Isolated for testability: unit tests patch this method.

        Args:
            request: Internal request.
            system_prompt: Optional system prompt.
            user_prompt: Rendered conversation.

        Returns:
            The generated text.
        """

        agent = Agent(
            self._model_builder(request),
            system_prompt=system_prompt or (),
            output_type=str,
        )
        log_extra = {"request_id": request.metadata.get("id"), "model": request.model}
        logger.info("Model request start", extra=log_extra)
        result = agent.run_sync(
            user_prompt,
            model_settings=ModelSettings(temperature=request.temperature),
        )
        logger.info("Model request complete", extra=log_extra)

        output = result.output
        if not isinstance(output, str):
            raise TypeError(f"Unexpected PydanticAI output type: {type(output)}")
        return output


class PydanticAIModelProvider:
    """Hands out PydanticAI text models configured from ``Config``."""

    def __init__(
        self,
        config: Config,
        model_builder: Optional[ModelBuilder] = None,
        selector: Optional[ModelSelector] = None,
        api_max_retries: int = 2,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Runtime configuration.
            model_builder: Optional override for building the PydanticAI model.
            selector: Chooses the model for the configured provider.
            api_max_retries: Retries performed by the OpenAI SDK itself.
        """

        self.config = config
        self._model_builder = model_builder
        self._selector = selector or ModelSelector()
        self._api_max_retries = max(0, int(api_max_retries))

    def get_model(self, system_instruction: str) -> PydanticAITextModel:
        """Return a text model using ``system_instruction``.

        Raises:
            ValueError: If no model can be selected for the provider.
        """

        config = self.config
        model = self._selector.select_model(
            config.get_model_provider(), config.get_model_name()
        )
        if config.use_litellm_proxy():
            api_base = config.get_litellm_proxy_url()
            api_key = config.get_litellm_proxy_api_key()
        else:
            api_base = None
            api_key = config.get_openai_api_key()
        return PydanticAITextModel(
            system_instruction=system_instruction,
            model=model,
            model_builder=self._build_model,
            api_base=api_base,
            api_key=SecretStr(api_key) if api_key else None,
            transport_attempts=config.get_model_transport_attempts(),
        )

    def _build_model(self, request: TextGenerationRequest) -> Union[OpenAIChatModel, str]:
        """Build the PydanticAI model for a request.

        Args:
            request: Request describing the target model and credentials.

        Returns:
            An OpenAIChatModel for direct or proxy usage, or a provider-
            prefixed model string that PydanticAI resolves itself.
        """

        if self._model_builder is not None:
            return self._model_builder(request)

        provider = self.config.get_model_provider().lower()
        if provider != "openai" and not request.api_base:
            prefix = _PROVIDER_PREFIXES.get(provider, provider)
            return f"{prefix}:{request.model}"

        api_key = self._resolve_api_key(request.api_key) or os.environ.get(
            "OPENAI_API_KEY"
        )
        if api_key is None:
            return OpenAIChatModel(request.model)

        client_kwargs: Dict[str, Any] = {
            "api_key": api_key,
            "max_retries": self._api_max_retries,
        }
        if request.api_base:
            client_kwargs["base_url"] = request.api_base

        openai_client = AsyncOpenAI(**client_kwargs)
        provider_obj = OpenAIProvider(openai_client=openai_client)
        return OpenAIChatModel(request.model, provider=provider_obj)

    @staticmethod
    def _resolve_api_key(api_key: Optional[Any]) -> Optional[str]:
        """Resolve a secret or plain API key to a string."""

        if api_key is None:
            return None
        if isinstance(api_key, SecretStr):
            return api_key.get_secret_value()
        return str(api_key)
