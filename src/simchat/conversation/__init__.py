from .history import (
    dedupe_assistant_messages,
    is_welcome_message,
    prepare_history,
    strip_welcome_message,
)
from .session import ConversationSession

__all__ = [
    "ConversationSession",
    "dedupe_assistant_messages",
    "is_welcome_message",
    "prepare_history",
    "strip_welcome_message",
]
