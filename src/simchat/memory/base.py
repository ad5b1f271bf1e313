"""Abstract base class for conversation stores.

This module defines the interface for persisting finalized chat messages.
The abstraction hides:
- Storage format (rows, dicts)
- Persistence mechanism (file, database, in-memory)
- Connection management
"""

from abc import ABC, abstractmethod

from ..chat.models import Message


class ConversationStore(ABC):
    """Abstract conversation store.

    Only finalized messages are stored; partial messages stay in the
    accumulator.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def find_conversation(self, agent_id: str) -> str | None:
        """Return the conversation id for an agent without creating one."""

    @abstractmethod
    async def get_or_create_conversation(self, agent_id: str) -> str:
        """Return the conversation id for an agent, creating one if needed."""

    @abstractmethod
    async def ensure_conversation(self, conversation_id: str, agent_id: str) -> None:
        """Register a caller-chosen conversation id; no-op if it exists."""

    @abstractmethod
    async def add_message(self, conversation_id: str, message: Message) -> None:
        """Append a finalized message to a conversation."""

    @abstractmethod
    async def get_messages(self, conversation_id: str) -> list[Message]:
        """Get all messages of a conversation, oldest first."""

    @abstractmethod
    async def clear(self, conversation_id: str) -> None:
        """Delete all messages of a conversation."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
