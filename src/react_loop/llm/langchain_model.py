"""Model handles backed by any LangChain chat model."""

import logging
from typing import List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from react_loop.config import Config
from react_loop.domain.conversation import Role, Turn
from react_loop.llm.model_selector import ModelSelector

logger = logging.getLogger(__name__)


def to_langchain_messages(
    system_instruction: str, turns: Sequence[Turn]
) -> List[BaseMessage]:
    """
    Converts the conversation into LangChain messages.

    Args:
        system_instruction: Prepended as a system message.
        turns: Conversation turns, oldest first.

    Returns:
        The ordered message list.
    """
    messages: List[BaseMessage] = [SystemMessage(content=system_instruction)]
    for turn in turns:
        if turn.role is Role.USER:
            messages.append(HumanMessage(content=turn.text))
        else:
            messages.append(AIMessage(content=turn.text))
    return messages


class LangChainTextModel:
    """
    Text-generation handle wrapping a LangChain chat model.

    Args:
        chat_model: The chat model to invoke.
        system_instruction: System prompt sent with every call.
    """

    def __init__(self, chat_model: BaseChatModel, system_instruction: str) -> None:
        self.chat_model = chat_model
        self.system_instruction = system_instruction

    def generate_text(self, turns: Sequence[Turn], temperature: float) -> BaseMessage:
        """
        Invokes the chat model on the full conversation.

        Args:
            turns: Conversation turns, oldest first.
            temperature: Sampling temperature forwarded to the provider.

        Returns:
            The AI message produced by the chat model.
        """
        messages = to_langchain_messages(self.system_instruction, turns)
        logger.info("Chat model request", extra={"turns": len(turns)})
        return self.chat_model.invoke(messages, temperature=temperature)


class LangChainModelProvider:
    """
    Hands out LangChain-backed model handles.

    Args:
        chat_model: Chat model shared by every handle.
    """

    def __init__(self, chat_model: BaseChatModel) -> None:
        self.chat_model = chat_model

    @classmethod
    def from_config(
        cls, config: Config, selector: Optional[ModelSelector] = None
    ) -> "LangChainModelProvider":
        """
        Builds a provider around ChatOpenAI from configuration.

        Args:
            config: Runtime configuration.
            selector: Chooses the model name.

        Returns:
            The configured provider.
        """
        selector = selector or ModelSelector()
        model = selector.select_model("openai", config.get_model_name())
        if config.use_litellm_proxy():
            chat_model = ChatOpenAI(
                model=model,
                api_key=config.get_litellm_proxy_api_key(),  # type: ignore[arg-type]
                base_url=config.get_litellm_proxy_url(),
                temperature=config.get_temperature(),
            )
        else:
            chat_model = ChatOpenAI(
                model=model,
                api_key=config.get_openai_api_key(),  # type: ignore[arg-type]
                temperature=config.get_temperature(),
            )
        return cls(chat_model)

    def get_model(self, system_instruction: str) -> LangChainTextModel:
        return LangChainTextModel(self.chat_model, system_instruction)
