from pathlib import Path

from react_loop.config import Config
from react_loop.core.agent import Agent, build_provider
from react_loop.infra.file_tools import READ_FILE_ID, WRITE_FILE_ID
from react_loop.llm.langchain_model import LangChainModelProvider
from react_loop.llm.llm_service import PydanticAIModelProvider


def _config(tmp_path: Path, **kwargs) -> Config:
    return Config(tool_root=tmp_path, app_dir=tmp_path / ".react_loop", **kwargs)


def test_agent_reads_file_end_to_end(tmp_path: Path, scripted) -> None:
    """Runs the built-in read tool through the full stack."""
    (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")
    provider = scripted(
        'Thought: read it\nAction: fs/read-file {"path": "notes.txt"}',
        "Thought: got it\nAction: finish[hello]",
    )
    agent = Agent(config=_config(tmp_path), provider=provider)

    response = agent.ask("What is in notes.txt?", ["manage_options"])

    assert response.success is True
    assert response.answer == "hello"
    assert '"content": "hello"' in provider.model.calls[1][-1].text
    assert "fs/read-file" in provider.instructions[0]


def test_agent_honours_configured_capability(tmp_path: Path, scripted) -> None:
    agent = Agent(
        config=_config(tmp_path, required_capability="use_agent"),
        provider=scripted(),
    )

    response = agent.ask("q", ["manage_options"])

    assert response.success is False


def test_agent_tool_status(tmp_path: Path, scripted) -> None:
    agent = Agent(config=_config(tmp_path), provider=scripted())

    status = {tool.id: available for tool, available in agent.tool_status()}

    assert status == {READ_FILE_ID: True, WRITE_FILE_ID: True}


def test_build_provider_by_backend(tmp_path: Path) -> None:
    default = build_provider(_config(tmp_path))
    langchain = build_provider(
        _config(tmp_path, model_backend="langchain", openai_api_key="sk-test-123456")
    )

    assert isinstance(default, PydanticAIModelProvider)
    assert isinstance(langchain, LangChainModelProvider)
