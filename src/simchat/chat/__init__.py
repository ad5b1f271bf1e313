from .accumulator import FragmentAccumulator, TurnAccumulator
from .models import (
    AgentProfile,
    ChatTurn,
    CompletionError,
    CompletionOk,
    CompletionResponse,
    CompletionResult,
    ConnectionStatus,
    ErrorKind,
    Message,
    MessageRole,
    TurnPhase,
    TurnState,
)

__all__ = [
    "AgentProfile",
    "ChatTurn",
    "CompletionError",
    "CompletionOk",
    "CompletionResponse",
    "CompletionResult",
    "ConnectionStatus",
    "ErrorKind",
    "FragmentAccumulator",
    "Message",
    "MessageRole",
    "TurnAccumulator",
    "TurnPhase",
    "TurnState",
]
