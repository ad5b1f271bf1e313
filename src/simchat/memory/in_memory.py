"""In-memory conversation store.

Simple dict-based storage for session-only memory.
Data is lost when the application exits.
"""

from uuid import uuid4

from ..chat.models import Message
from .base import ConversationStore


class InMemoryConversationStore(ConversationStore):
    """In-memory conversation store (session-only)."""

    def __init__(self):
        self._conversations: dict[str, str] = {}
        self._messages: dict[str, list[Message]] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def find_conversation(self, agent_id: str) -> str | None:
        return self._conversations.get(agent_id)

    async def get_or_create_conversation(self, agent_id: str) -> str:
        if agent_id not in self._conversations:
            await self.ensure_conversation(str(uuid4()), agent_id)
        return self._conversations[agent_id]

    async def ensure_conversation(self, conversation_id: str, agent_id: str) -> None:
        self._conversations.setdefault(agent_id, conversation_id)
        self._messages.setdefault(conversation_id, [])

    async def add_message(self, conversation_id: str, message: Message) -> None:
        if not message.is_complete:
            raise ValueError("Only complete messages can be stored")
        self._messages.setdefault(conversation_id, []).append(message)

    async def get_messages(self, conversation_id: str) -> list[Message]:
        return list(self._messages.get(conversation_id, []))

    async def clear(self, conversation_id: str) -> None:
        if conversation_id in self._messages:
            self._messages[conversation_id] = []

    @property
    def backend_type(self) -> str:
        return "memory"
