"""Pytest configuration and shared fixtures."""
import asyncio
import os
from typing import Any

import pytest

from simchat.chat.models import (
    AgentProfile,
    ChatTurn,
    CompletionError,
    CompletionOk,
    CompletionResult,
)
from simchat.transport.base import ChatTransport


class ScriptedTransport(ChatTransport):
    """Transport returning pre-scripted replies, one per request.

    A reply may be a string (success), a CompletionResult, or an
    exception to raise. When a gate is given, each request waits on it.
    """

    def __init__(
        self,
        replies: list[Any] | None = None,
        gate: asyncio.Event | None = None,
        timeout: float | None = None,
    ):
        super().__init__(timeout=timeout)
        self._replies = list(replies or [])
        self._gate = gate
        self.requests: list[tuple[list[ChatTurn], dict[str, Any]]] = []
        self.closed = False

    async def _complete(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        **kwargs: Any
    ) -> CompletionResult:
        self.requests.append((history, kwargs))
        if self._gate is not None:
            await self._gate.wait()

        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, (CompletionOk, CompletionError)):
            return reply
        return CompletionOk(content=reply)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "endpoint": os.getenv("SIMCHAT_ENDPOINT_URL"),
    }


@pytest.fixture
def agent():
    """A tutor persona used across tests."""
    return AgentProfile(
        id="agent-123",
        name="Ada",
        type="Tutor",
        subject="mathematics",
        prompt="Explain step by step.",
    )


@pytest.fixture
def make_transport():
    """Factory for ScriptedTransport instances."""
    def _make(*replies: Any, gate: asyncio.Event | None = None, timeout: float | None = None):
        return ScriptedTransport(list(replies), gate=gate, timeout=timeout)
    return _make
