"""Conversation session: one chat view's turn lifecycle.

Wires a ChatTransport into a TurnAccumulator. Each accepted user message
produces exactly one request; its outcome is delivered to the accumulator
as a single assistant message.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..chat.accumulator import TurnAccumulator
from ..chat.models import (
    AgentProfile,
    ChatTurn,
    CompletionError,
    CompletionResult,
    ConnectionStatus,
    ErrorKind,
    Message,
    TurnPhase,
)
from ..config import FALLBACK_MESSAGE
from ..memory.base import ConversationStore
from ..transport.base import ChatTransport
from .history import prepare_history, strip_welcome_message

logger = logging.getLogger(__name__)

MessageCallback = Callable[[Message], Awaitable[None] | None]


class ConversationSession:
    """Turn lifecycle for a single conversation.

    Per turn: idle -> sending -> {delivered | errored | cancelled} -> idle.

    A send_message call made while a turn is in flight is dropped, not
    queued. All failures other than cancellation are replaced by
    FALLBACK_MESSAGE so the conversation never stalls.
    """

    def __init__(
        self,
        transport: ChatTransport,
        agent: AgentProfile,
        accumulator: TurnAccumulator | None = None,
        store: ConversationStore | None = None,
        conversation_id: str | None = None,
        is_owner: bool = False,
        shape_history: bool = False,
        on_user_message: MessageCallback | None = None,
        on_ai_message_complete: MessageCallback | None = None,
    ):
        """Initialize the session.

        Args:
            transport: Transport used for every turn
            agent: Persona answering the conversation
            accumulator: Message buffer (a fresh one if omitted)
            store: Optional persistence for finalized messages
            conversation_id: Existing conversation to resume
            is_owner: Whether the persona's owner is chatting
            shape_history: Trim and deduplicate history before each request
            on_user_message: Called with each accepted user message
            on_ai_message_complete: Called with each finalized assistant message
        """
        self._transport = transport
        self._agent = agent
        self._accumulator = accumulator or TurnAccumulator()
        self._store = store
        self._conversation_id = conversation_id
        self._is_owner = is_owner
        self._shape_history = shape_history
        self._on_user_message = on_user_message
        self._on_ai_message_complete = on_ai_message_complete

        self._status = ConnectionStatus.DISCONNECTED
        self._processing = False
        self._last_outcome = TurnPhase.IDLE
        self._pending: asyncio.Task[CompletionResult] | None = None

    @property
    def agent(self) -> AgentProfile:
        return self._agent

    @property
    def accumulator(self) -> TurnAccumulator:
        return self._accumulator

    @property
    def connection_status(self) -> ConnectionStatus:
        """Cosmetic status; the transport holds no persistent connection."""
        return self._status

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def phase(self) -> TurnPhase:
        return TurnPhase.SENDING if self._processing else TurnPhase.IDLE

    @property
    def last_outcome(self) -> TurnPhase:
        """Terminal phase of the most recent turn (IDLE before any turn)."""
        return self._last_outcome

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def messages(self) -> list[Message]:
        return self._accumulator.get_all_messages()

    async def connect(self) -> None:
        """Resolve dependencies and restore stored history, if any."""
        self._status = ConnectionStatus.CONNECTING
        try:
            if self._store is not None:
                agent_key = self._agent.id or self._agent.name
                if self._conversation_id is None:
                    self._conversation_id = await self._store.get_or_create_conversation(agent_key)
                else:
                    await self._store.ensure_conversation(self._conversation_id, agent_key)
                stored = await self._store.get_messages(self._conversation_id)
                self._accumulator.load_history(stored)
                logger.info("Loaded %d messages for %s", len(stored), self._agent.name)
        except Exception:
            self._status = ConnectionStatus.ERROR
            raise
        self._status = ConnectionStatus.CONNECTED

    async def close(self) -> None:
        self.cancel()
        await self._transport.close()
        self._status = ConnectionStatus.DISCONNECTED

    async def __aenter__(self) -> "ConversationSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def cancel(self) -> None:
        """Abort the in-flight request. The turn ends without an assistant message."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    def reset(self) -> None:
        """Clear all messages, e.g. when switching conversation context."""
        self._accumulator.reset_messages()

    async def send_message(self, text: str, **request_kwargs: Any) -> Message | None:
        """Run one turn.

        Args:
            text: User message
            **request_kwargs: Passed to the transport

        Returns:
            The finalized assistant message, or None when the call was
            dropped or the request was cancelled
        """
        # No await may precede this guard: it is what drops concurrent calls
        if not text or not text.strip() or self._processing:
            return None
        if self._transport.requires_agent_id and not self._agent.id:
            logger.warning("Dropping message: %s has no agent id", self._agent.name)
            return None
        self._processing = True

        try:
            logger.info("Sending message to %s", self._agent.name)
            user_message = self._accumulator.add_user_message(text)
            if user_message is not None:
                await self._persist(user_message, self._on_user_message)

            history = self._request_history()
            self._accumulator.start_ai_message()

            result = await self._request(history, request_kwargs)

            if isinstance(result, CompletionError) and result.kind == ErrorKind.CANCELLED:
                logger.info("Turn cancelled for %s", self._agent.name)
                self._accumulator.complete_ai_message()
                self._last_outcome = TurnPhase.CANCELLED
                return None

            if isinstance(result, CompletionError):
                logger.error("Turn failed (%s): %s", result.kind.value, result.detail)
                self._accumulator.add_ai_text_delta(FALLBACK_MESSAGE)
                self._last_outcome = TurnPhase.ERRORED
            else:
                self._accumulator.add_ai_text_delta(result.content)
                self._last_outcome = TurnPhase.DELIVERED

            ai_message = self._accumulator.complete_ai_message()
            if ai_message is not None:
                await self._persist(ai_message, self._on_ai_message_complete)
            return ai_message
        finally:
            if self._accumulator.is_ai_speaking:
                self._accumulator.complete_ai_message()
            self._pending = None
            self._processing = False

    def _request_history(self) -> list[ChatTurn]:
        turns = [ChatTurn.from_message(m) for m in self._accumulator.messages]
        turns = strip_welcome_message(turns)
        if self._shape_history:
            turns = prepare_history(turns, is_owner=self._is_owner)
        return turns

    async def _request(self, history: list[ChatTurn], request_kwargs: dict[str, Any]) -> CompletionResult:
        # Last call wins
        self.cancel()

        kwargs = dict(request_kwargs)
        if self._is_owner:
            kwargs.setdefault("is_owner", True)
        if self._conversation_id is not None:
            kwargs.setdefault("conversation_id", self._conversation_id)

        pending = asyncio.create_task(self._transport.complete(history, self._agent, **kwargs))
        self._pending = pending
        try:
            return await pending
        except asyncio.CancelledError:
            # Only cancel() is silent; cancellation of the caller propagates
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return CompletionError(kind=ErrorKind.CANCELLED, detail="Request was cancelled")
        except Exception as e:
            logger.exception("Transport raised during completion")
            return CompletionError(kind=ErrorKind.INVALID_RESPONSE, detail=str(e))

    async def _persist(self, message: Message, callback: MessageCallback | None) -> None:
        try:
            if self._store is not None and self._conversation_id is not None:
                await self._store.add_message(self._conversation_id, message)
            if callback is not None:
                outcome = callback(message)
                if inspect.isawaitable(outcome):
                    await outcome
        except Exception:
            logger.exception("Failed to record message %s", message.id)
