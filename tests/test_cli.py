"""Tests for the simchat CLI."""
import asyncio

import pytest
from typer.testing import CliRunner

from simchat.cli import app as cli_app
from simchat.config import FALLBACK_MESSAGE
from simchat.memory.sqlite import SQLiteConversationStore

runner = CliRunner()


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("SIMCHAT_TRANSPORT", "SIMCHAT_ENDPOINT_URL", "SIMCHAT_API_KEY",
                 "OPENAI_API_KEY", "SIMCHAT_TIMEOUT", "SIMCHAT_MEMORY_BACKEND"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SIMCHAT_MEMORY_PATH", str(tmp_path / "chat.db"))
    return monkeypatch


def test_config_masks_secrets(cli_env):
    cli_env.setenv("SIMCHAT_API_KEY", "supersecretkey")

    result = runner.invoke(cli_app.app, ["config"])

    assert result.exit_code == 0
    assert "supersecretkey" not in result.output
    assert "supe..." in result.output


def test_ask_without_endpoint_fails(cli_env):
    result = runner.invoke(cli_app.app, ["ask", "Hi", "--name", "Ada"])

    assert result.exit_code == 1
    assert "SIMCHAT_ENDPOINT_URL" in result.output


def test_ask_prints_reply(cli_env, make_transport):
    transport = make_transport("Hello from Ada")
    cli_env.setattr(cli_app, "get_transport", lambda settings, console=None: transport)

    result = runner.invoke(cli_app.app, ["ask", "Hi", "--name", "Ada"])

    assert result.exit_code == 0
    assert "Hello from Ada" in result.output
    assert transport.closed is True


def test_ask_failure_prints_fallback(cli_env, make_transport):
    transport = make_transport(RuntimeError("down"))
    cli_env.setattr(cli_app, "get_transport", lambda settings, console=None: transport)

    result = runner.invoke(cli_app.app, ["ask", "Hi", "--name", "Ada"])

    assert result.exit_code == 0
    assert FALLBACK_MESSAGE in result.output


def test_chat_session_persists_to_sqlite(cli_env, make_transport):
    cli_env.setenv("SIMCHAT_MEMORY_BACKEND", "sqlite")
    transport = make_transport("Nice to meet you, friend.")
    cli_env.setattr(cli_app, "get_transport", lambda settings, console=None: transport)

    result = runner.invoke(
        cli_app.app,
        ["chat", "--name", "Ada", "--agent-id", "ada-1", "--persist"],
        input="Hello\n/quit\n",
    )
    assert result.exit_code == 0
    assert "Nice to meet you, friend." in result.output

    history = runner.invoke(cli_app.app, ["history", "ada-1"])
    assert history.exit_code == 0
    assert "Hello" in history.output
    assert "Nice to meet you" in history.output


def test_chat_resumes_chosen_conversation(cli_env, make_transport):
    cli_env.setenv("SIMCHAT_MEMORY_BACKEND", "sqlite")
    transport = make_transport("Welcome back, friend.")
    cli_env.setattr(cli_app, "get_transport", lambda settings, console=None: transport)

    result = runner.invoke(
        cli_app.app,
        ["chat", "--name", "Ada", "--agent-id", "ada-1", "--persist",
         "--conversation-id", "conv-7"],
        input="Hello again\n/quit\n",
    )
    assert result.exit_code == 0
    assert "Welcome back, friend." in result.output
    assert transport.requests[0][1]["conversation_id"] == "conv-7"

    history = runner.invoke(cli_app.app, ["history", "ada-1"])
    assert history.exit_code == 0
    assert "conv-7" in history.output
    assert "Hello again" in history.output


def test_history_for_unknown_agent_creates_no_conversation(cli_env, tmp_path):
    cli_env.setenv("SIMCHAT_MEMORY_BACKEND", "sqlite")

    result = runner.invoke(cli_app.app, ["history", "nobody"])

    assert result.exit_code == 0
    assert "No stored messages" in result.output

    async def _lookup():
        store = SQLiteConversationStore(path=tmp_path / "chat.db")
        await store.connect()
        try:
            return await store.find_conversation("nobody")
        finally:
            await store.disconnect()

    assert asyncio.run(_lookup()) is None
