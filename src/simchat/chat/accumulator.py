"""In-memory message accumulators for a single conversation view.

An accumulator holds finalized message history plus at most one
in-progress message per role. Partial messages are exposed for
real-time display but never stored in history until finalized.
"""

import logging
from collections.abc import Iterable

from .models import Message, MessageRole, TurnState, new_message_id

logger = logging.getLogger(__name__)

CURRENT_USER_ID = "current_user"
CURRENT_AI_ID = "current_ai"
CURRENT_ID = "current"


class TurnAccumulator:
    """Accumulates user and assistant messages turn by turn.

    All inputs are sanitized to no-ops rather than raising.
    """

    def __init__(self, history: Iterable[Message] | None = None):
        self._messages: list[Message] = []
        self._state = TurnState()
        self._ai_message_id: str | None = None
        if history is not None:
            self.load_history(history)

    @property
    def messages(self) -> list[Message]:
        """Finalized messages, oldest first."""
        return list(self._messages)

    @property
    def turn_state(self) -> TurnState:
        return self._state.model_copy()

    @property
    def is_ai_speaking(self) -> bool:
        return self._state.is_ai_speaking

    def load_history(self, messages: Iterable[Message]) -> None:
        """Replace history with already finalized messages."""
        self._messages = [m for m in messages if m.is_complete]
        self._state = TurnState()
        self._ai_message_id = None

    def add_user_message(self, content: str) -> Message | None:
        """Append a finalized user message.

        Returns the new message, or None if the content was blank.
        """
        if not content or not content.strip():
            return None

        message = Message(role=MessageRole.USER, content=content, is_complete=True)
        self._messages.append(message)
        logger.debug("User message %s appended", message.id)
        return message

    def set_user_partial(self, text: str) -> None:
        """Replace the in-progress user transcript."""
        self._state.current_user_message = text or None

    def complete_user_message(self) -> Message | None:
        text = self._state.current_user_message or ""
        self._state.current_user_message = None
        return self.add_user_message(text)

    def start_ai_message(self) -> str:
        """Begin an assistant message, discarding any previous partial content.

        Returns:
            Id the message will carry once completed
        """
        self._state.current_ai_message = ""
        self._state.is_ai_speaking = True
        self._ai_message_id = new_message_id()
        return self._ai_message_id

    def add_ai_text_delta(self, delta: str) -> None:
        if not delta:
            return
        if self._state.current_ai_message is None:
            self.start_ai_message()
        self._state.current_ai_message = (self._state.current_ai_message or "") + delta

    def complete_ai_message(self) -> Message | None:
        """Finalize the in-progress assistant message.

        Empty content is discarded. The partial buffer and speaking
        flag are always cleared.
        """
        content = self._state.current_ai_message or ""
        message_id = self._ai_message_id or new_message_id()

        self._state.current_ai_message = None
        self._state.is_ai_speaking = False
        self._ai_message_id = None

        if not content.strip():
            logger.debug("Discarding empty assistant message")
            return None

        message = Message(
            id=message_id,
            role=MessageRole.ASSISTANT,
            content=content,
            is_complete=True,
        )
        self._messages.append(message)
        return message

    def reset_messages(self) -> None:
        logger.debug("Resetting all messages")
        self._messages = []
        self._state = TurnState()
        self._ai_message_id = None

    def get_all_messages(self) -> list[Message]:
        """History plus any partial message as a synthetic last entry."""
        result = list(self._messages)
        if self._state.current_user_message:
            result.append(Message(
                id=CURRENT_USER_ID,
                role=MessageRole.USER,
                content=self._state.current_user_message,
                is_complete=False,
            ))
        if self._state.current_ai_message:
            result.append(Message(
                id=CURRENT_AI_ID,
                role=MessageRole.ASSISTANT,
                content=self._state.current_ai_message,
                is_complete=False,
            ))
        return result


class FragmentAccumulator:
    """Accumulates fragments from a single interleaved stream.

    Used where user and assistant text arrive on one channel (voice
    transcripts). A fragment whose role differs from the current
    message finalizes the current message and starts a new one.
    """

    def __init__(self):
        self._messages: list[Message] = []
        self._role: MessageRole | None = None
        self._content = ""

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def add_fragment(self, fragment: str, from_user: bool) -> None:
        role = MessageRole.USER if from_user else MessageRole.ASSISTANT
        if self._role is not None and self._role != role:
            self.complete_current()
        if self._role is None:
            self._role = role
            self._content = fragment
        else:
            self._content += fragment

    def complete_current(self) -> Message | None:
        role, content = self._role, self._content.strip()
        self._role = None
        self._content = ""
        if role is None or not content:
            return None

        message = Message(role=role, content=content, is_complete=True)
        self._messages.append(message)
        return message

    def get_all_messages(self) -> list[Message]:
        result = list(self._messages)
        if self._role is not None and self._content.strip():
            result.append(Message(
                id=CURRENT_ID,
                role=self._role,
                content=self._content,
                is_complete=False,
            ))
        return result

    def reset_messages(self) -> None:
        self._messages = []
        self._role = None
        self._content = ""
