from typing import Any

from .base import ChatTransport
from .http import AdvisorTransport, EdgeFunctionTransport
from .openai import OpenAITransport


def create_chat_transport(kind: str, **config: Any) -> ChatTransport:
    """Create a chat transport instance.

    Args:
        kind: Transport type ('edge', 'advisor', 'openai')
        **config: Transport-specific configuration
            For edge / advisor:
                - url: str (required)
                - api_key: str | None
                - timeout: float | None
            For advisor additionally:
                - save_to_database: bool (default: True)
                - min_similarity: float (default: 0.7)
                - max_results: int (default: 5)
            For openai:
                - api_key: str (required)
                - model: str (default: 'gpt-4o-mini')
                - timeout: float | None

    Returns:
        Initialized transport

    Raises:
        ValueError: If transport type is not supported
        TypeError: If required configuration is missing

    Examples:
        >>> transport = create_chat_transport(
        ...     "edge",
        ...     url="https://example.supabase.co/functions/v1/chat-completion",
        ... )
    """
    kind_lower = kind.lower()

    if kind_lower == "edge":
        if not config.get("url"):
            raise TypeError("Edge transport requires 'url' in config")
        return EdgeFunctionTransport(**config)

    if kind_lower == "advisor":
        if not config.get("url"):
            raise TypeError("Advisor transport requires 'url' in config")
        return AdvisorTransport(**config)

    if kind_lower == "openai":
        if not config.get("api_key"):
            raise TypeError("OpenAI transport requires 'api_key' in config")
        return OpenAITransport(**config)

    raise ValueError(
        f"Unsupported transport: {kind}. "
        f"Supported transports: 'edge', 'advisor', 'openai'"
    )
