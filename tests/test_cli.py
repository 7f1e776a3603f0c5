"""Tests for the open-cli command."""

import pytest
from click.testing import CliRunner

import main
from clients.llm_client import LLMClientError
from services.chat_session import ChatSession


class FakeLLM:
    model = "test/model"

    def __init__(self, reply="It prints hello.", error=None):
        self.reply = reply
        self.error = error
        self.contexts = []

    async def send_with_context(self, history, context):
        self.contexts.append(context)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture(autouse=True)
def api_key(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test-0123456789")


@pytest.fixture
def patched_session(monkeypatch, fake_llm):
    def build(settings, path):
        return ChatSession(fake_llm, settings, project_root=path)

    monkeypatch.setattr(main, "_build_session", build)


def test_single_question(runner, project, fake_llm, patched_session):
    result = runner.invoke(
        main.cli, ["-m", "test/model", "-p", str(project), "-q", "what", "does", "main.py", "do"]
    )

    assert result.exit_code == 0, result.output
    assert "It prints hello." in result.output
    assert "1 files in context" in result.output
    assert "FILE: main.py" in fake_llm.contexts[0]


def test_single_question_api_failure(runner, project, monkeypatch):
    llm = FakeLLM(error=LLMClientError("bad key", 401))
    monkeypatch.setattr(main, "_build_session", lambda s, p: ChatSession(llm, s, project_root=p))

    result = runner.invoke(main.cli, ["-m", "test/model", "-p", str(project), "-q", "hi"])

    assert result.exit_code == 1
    assert "Authentication failed" in result.output


def test_chat_commands(runner, project, patched_session):
    result = runner.invoke(
        main.cli,
        ["-m", "test/model", "-p", str(project)],
        input="files\nexplain parser.ts\ncontext\nquit\n",
    )

    assert result.exit_code == 0, result.output
    assert "Found 6 project files" in result.output
    assert "parser.ts (" in result.output
    assert "It prints hello." in result.output
    assert "src/parser.ts" in result.output
    assert "Session ended - 2 messages exchanged" in result.output


def test_chat_ends_on_eof(runner, project, patched_session):
    result = runner.invoke(main.cli, ["-m", "test/model", "-p", str(project)], input="")

    assert result.exit_code == 0
    assert "Goodbye" in result.output


def test_missing_api_key(runner, project, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    monkeypatch.delenv("LLM_API_KEY", raising=False)

    result = runner.invoke(main.cli, ["-m", "test/model", "-p", str(project), "-q", "hi"])

    assert result.exit_code == 1
    assert "API key not found" in result.output


def test_malformed_api_key(runner, project, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "not-a-key")

    result = runner.invoke(main.cli, ["-m", "test/model", "-p", str(project), "-q", "hi"])

    assert result.exit_code == 1
    assert "looks invalid" in result.output


def test_model_is_required(runner):
    result = runner.invoke(main.cli, ["-q", "hi"])

    assert result.exit_code == 2
    assert "--model" in result.output


def test_format_size():
    assert main._format_size(512) == "512B"
    assert main._format_size(4096) == "4KB"


def test_context_count_is_shown_before_the_reply(runner, project, patched_session):
    result = runner.invoke(
        main.cli, ["-m", "test/model", "-p", str(project), "-q", "explain", "main.py", "and", "config.json"]
    )

    assert result.exit_code == 0, result.output
    assert result.output.index("2 files in context") < result.output.index("It prints hello.")


def test_question_flag_needs_words(runner, project, patched_session):
    result = runner.invoke(main.cli, ["-m", "test/model", "-p", str(project), "-q"])

    assert result.exit_code == 2
    assert "needs the question text" in result.output


def test_chat_continues_after_failed_turn(runner, project, monkeypatch):
    llm = FakeLLM(error=LLMClientError("Unexpected response format: <html>", 200))
    monkeypatch.setattr(main, "_build_session", lambda s, p: ChatSession(llm, s, project_root=p))

    result = runner.invoke(
        main.cli, ["-m", "test/model", "-p", str(project)], input="hi\nfiles\nquit\n"
    )

    assert result.exit_code == 0, result.output
    assert "Error getting response" in result.output
    assert "Found 6 project files" in result.output
