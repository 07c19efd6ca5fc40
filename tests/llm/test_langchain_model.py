from unittest.mock import MagicMock

from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from react_loop.config import Config
from react_loop.domain.conversation import ConversationContext
from react_loop.llm.langchain_model import (
    LangChainModelProvider,
    LangChainTextModel,
    to_langchain_messages,
)
from react_loop.llm.model_client import extract_text


def _turns():
    context = ConversationContext()
    context.add_user("q")
    context.add_model("Thought: t\nAction: a {}")
    context.add_user("Observation: {}")
    return context.turns


def test_to_langchain_messages() -> None:
    messages = to_langchain_messages("sys", _turns())

    assert [type(message) for message in messages] == [
        SystemMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]
    assert messages[0].content == "sys"
    assert messages[3].content == "Observation: {}"


def test_langchain_model_invokes_chat_model() -> None:
    """Sends the full conversation and forwards the temperature."""
    chat_model = MagicMock()
    chat_model.invoke.return_value = AIMessage(content="Action: finish[ok]")
    model = LangChainTextModel(chat_model, "sys")

    result = model.generate_text(_turns(), 0.0)

    messages = chat_model.invoke.call_args.args[0]
    assert len(messages) == 4
    assert chat_model.invoke.call_args.kwargs == {"temperature": 0.0}
    assert extract_text(result) == "Action: finish[ok]"


def test_langchain_provider_with_fake_chat_model() -> None:
    provider = LangChainModelProvider(
        FakeListChatModel(responses=["Thought: done\nAction: finish[My Site]"])
    )

    model = provider.get_model("sys")

    assert model.system_instruction == "sys"
    assert extract_text(model.generate_text(_turns(), 0.0)) == (
        "Thought: done\nAction: finish[My Site]"
    )


def test_langchain_provider_from_config() -> None:
    config = Config(
        openai_api_key="sk-test-key-123456",
        model_name="gpt-4o-mini",
        model_backend="langchain",
    )

    provider = LangChainModelProvider.from_config(config)

    assert isinstance(provider.chat_model, ChatOpenAI)
    assert provider.chat_model.model_name == "gpt-4o-mini"
