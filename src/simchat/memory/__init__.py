"""Conversation persistence for simchat.

Stores finalized messages so a conversation can be resumed.
"""

from .base import ConversationStore
from .factory import create_conversation_store
from .in_memory import InMemoryConversationStore

__all__ = [
    "ConversationStore",
    "InMemoryConversationStore",
    "create_conversation_store",
]
