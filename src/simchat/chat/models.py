"""Data models for chat conversations.

These models define messages, turn state and the typed result of a
completion request, independent of the transport used to obtain it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_message_id() -> str:
    return uuid4().hex


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"

    @classmethod
    def normalize(cls, value: "str | MessageRole") -> "MessageRole":
        """Map legacy role names onto a MessageRole.

        Persona output was historically stored with role ``system``;
        it is treated as ``assistant``.
        """
        if isinstance(value, MessageRole):
            return value
        if value == "system":
            return cls.ASSISTANT
        return cls(value)


class ConnectionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class TurnPhase(str, Enum):
    """Phase of the turn currently owned by a session.

    idle -> sending -> {delivered | errored | cancelled} -> idle
    """

    IDLE = "idle"
    SENDING = "sending"
    DELIVERED = "delivered"
    ERRORED = "errored"
    CANCELLED = "cancelled"


class Message(BaseModel):
    """A single chat message held by an accumulator."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_message_id)
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=utcnow)
    is_complete: bool = True

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            return MessageRole.normalize(value)
        return value


class TurnState(BaseModel):
    """Transient state of the turn in progress."""

    current_user_message: str | None = None
    current_ai_message: str | None = None
    is_ai_speaking: bool = False


class ChatTurn(BaseModel):
    """Role/content pair as sent over the wire."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> Any:
        if isinstance(value, str):
            return MessageRole.normalize(value)
        return value

    @classmethod
    def from_message(cls, message: Message) -> "ChatTurn":
        return cls(role=message.role, content=message.content)

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class AgentProfile(BaseModel):
    """A configurable chat persona (Sim)."""

    id: str | None = None
    name: str
    type: str = Field(default="Advisor", description="Persona kind, e.g. Tutor or Advisor")
    subject: str | None = None
    description: str | None = None
    prompt: str | None = Field(default=None, description="Persona instructions")
    teaching_style: str | None = None
    grade_level: str | None = None
    learning_objective: str | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the camelCase keys the edge function expects."""
        payload = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "subject": self.subject,
            "description": self.description,
            "prompt": self.prompt,
            "teachingStyle": self.teaching_style,
            "gradeLevel": self.grade_level,
            "learningObjective": self.learning_objective,
        }
        return {key: value for key, value in payload.items() if value is not None}


class CompletionResponse(BaseModel):
    """Success body returned by a chat-completion endpoint."""

    content: str
    usage: dict[str, Any] | None = None
    image: str | None = None


class ErrorKind(str, Enum):
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"
    EMPTY_RESPONSE = "empty_response"
    NETWORK = "network"
    INVALID_RESPONSE = "invalid_response"
    INVALID_REQUEST = "invalid_request"


class CompletionOk(BaseModel):
    """Successful completion: the full assistant reply for one turn."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    content: str
    usage: dict[str, Any] | None = None


class CompletionError(BaseModel):
    """Failed completion."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    kind: ErrorKind
    detail: str = ""
    status_code: int | None = None


CompletionResult = CompletionOk | CompletionError
