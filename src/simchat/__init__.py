"""
simchat: turn-based chat sessions with configurable AI personas.

A session pairs a transport (one request per user turn) with an
accumulator that owns the conversation's message history.
"""

__version__ = "0.1.0"

from .chat import (
    AgentProfile,
    ConnectionStatus,
    Message,
    MessageRole,
    TurnAccumulator,
    TurnPhase,
)
from .conversation import ConversationSession
from .transport import ChatTransport, create_chat_transport

__all__ = [
    "AgentProfile",
    "ChatTransport",
    "ConnectionStatus",
    "ConversationSession",
    "Message",
    "MessageRole",
    "TurnAccumulator",
    "TurnPhase",
    "create_chat_transport",
]
