import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Sequence
from typing import Any

from ..chat.models import (
    AgentProfile,
    ChatTurn,
    CompletionError,
    CompletionResult,
    ErrorKind,
)

logger = logging.getLogger(__name__)


class ChatTransport(ABC):
    """Abstract base class for chat transports.

    This module hides the design decision of how a turn reaches the model.
    Implementations must handle:
    - Request body construction for their endpoint
    - Response parsing into a CompletionResult
    - Mapping transport failures onto ErrorKind values

    Transports addressing a stored persona set requires_agent_id; complete()
    then answers INVALID_REQUEST for an agent without an id.

    A transport performs exactly one request per call to complete().
    There are no retries and no backoff.

    Supports async context manager protocol for proper resource cleanup:
        async with transport:
            result = await transport.complete(history, agent)
    """

    requires_agent_id: bool = False

    def __init__(self, timeout: float | None = None):
        self._timeout = timeout

    @property
    def timeout(self) -> float | None:
        """Seconds to wait for one completion, or None to wait indefinitely."""
        return self._timeout

    async def complete(
        self,
        history: Sequence[ChatTurn],
        agent: AgentProfile,
        **kwargs: Any
    ) -> CompletionResult:
        """Request the assistant reply for one turn.

        Args:
            history: Full prior conversation with the new user message appended
            agent: Persona answering the turn
            **kwargs: Transport-specific parameters

        Returns:
            CompletionOk with the full reply, or CompletionError. Transport
            failures never raise; asyncio.CancelledError propagates so the
            owner of the task decides what a cancellation means.
        """
        if self.requires_agent_id and not agent.id:
            return CompletionError(
                kind=ErrorKind.INVALID_REQUEST,
                detail=f"{type(self).__name__} requires an agent with an id",
            )
        try:
            return await self._with_timeout(self._complete(list(history), agent, **kwargs))
        except TimeoutError:
            logger.warning("Completion request timed out after %ss", self._timeout)
            return CompletionError(
                kind=ErrorKind.TIMEOUT,
                detail=f"Request timeout after {self._timeout} seconds",
            )

    async def _with_timeout(self, coro: Awaitable[CompletionResult]) -> CompletionResult:
        if self._timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=self._timeout)

    @abstractmethod
    async def _complete(
        self,
        history: list[ChatTurn],
        agent: AgentProfile,
        **kwargs: Any
    ) -> CompletionResult:
        """Perform the request. Implementations map their own errors."""

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "ChatTransport":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup,
        a known race in httpx/anyio teardown:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
