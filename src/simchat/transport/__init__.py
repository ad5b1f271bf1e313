from .base import ChatTransport
from .factory import create_chat_transport
from .http import AdvisorTransport, EdgeFunctionTransport, HttpChatTransport
from .openai import OpenAITransport

__all__ = [
    "AdvisorTransport",
    "ChatTransport",
    "EdgeFunctionTransport",
    "HttpChatTransport",
    "OpenAITransport",
    "create_chat_transport",
]
