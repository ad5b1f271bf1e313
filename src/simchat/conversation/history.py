"""Shaping of conversation history before it is sent with a turn.

Welcome and introduction replies are UI text: they are useful on screen
but repeated introductions in the request context make the persona
re-introduce itself mid-conversation.
"""

import re
from collections.abc import Sequence

from ..chat.models import ChatTurn, MessageRole
from ..config import MIN_ASSISTANT_REPLY_LENGTH, OWNER_HISTORY_LIMIT, VISITOR_HISTORY_LIMIT

_INTRO_PATTERNS = [
    re.compile(r"hello!?\s*i'?m\s+(a\s+)?(sim|digital assistant|assistant|ai|clone|version)(\s+of|\s+representing|\s+for)?\s+", re.I),
    re.compile(r"welcome\s+(back|again)?", re.I),
    re.compile(r"i'?m\s+(here\s+to|ready\s+to|excited\s+to|happy\s+to)\s+(help|assist|chat|talk|connect)", re.I),
]

_HELP_OFFER_PATTERNS = [
    re.compile(r"what\s+can\s+i\s+(do\s+for\s+you|help\s+(you\s+with|with)|assist\s+you\s+with)\s+today", re.I),
    re.compile(r"how\s+can\s+i\s+(help|assist|serve)\s+you\s+today", re.I),
    re.compile(r"how\s+(may|might|can)\s+i\s+(help|assist|serve)\s+you", re.I),
    re.compile(r"what\s+(would\s+you\s+like|do\s+you\s+want)\s+to\s+(talk|chat|discuss)\s+about", re.I),
    re.compile(r"is\s+there\s+something\s+(specific|particular)\s+you'd\s+like\s+to\s+(know|learn|discuss)", re.I),
]

WELCOME_PATTERNS = _INTRO_PATTERNS + _HELP_OFFER_PATTERNS


def is_welcome_message(text: str) -> bool:
    """Check whether an assistant reply reads as a greeting or help offer."""
    return any(pattern.search(text) for pattern in WELCOME_PATTERNS)


def _normalized(text: str) -> str:
    return re.sub(r"\s+", " ", text.lower()).strip()


def strip_welcome_message(history: Sequence[ChatTurn]) -> list[ChatTurn]:
    """Drop a leading assistant message (the greeting shown before any input)."""
    turns = list(history)
    if turns and turns[0].role == MessageRole.ASSISTANT:
        return turns[1:]
    return turns


def dedupe_assistant_messages(messages: Sequence[ChatTurn]) -> list[ChatTurn]:
    """Filter redundant assistant replies.

    Drops empty replies, exact duplicates (ignoring case and whitespace),
    every welcome message except the last one, and replies shorter than
    MIN_ASSISTANT_REPLY_LENGTH.
    """
    last_welcome = -1
    for i, message in enumerate(messages):
        if is_welcome_message(message.content.strip()):
            last_welcome = i

    seen: set[str] = set()
    kept: list[ChatTurn] = []
    for i, message in enumerate(messages):
        content = message.content.strip()
        if not content:
            continue

        key = _normalized(content)
        if key in seen:
            continue
        if i != last_welcome and is_welcome_message(content):
            continue
        if len(content) < MIN_ASSISTANT_REPLY_LENGTH:
            continue

        seen.add(key)
        kept.append(message)
    return kept


def prepare_history(history: Sequence[ChatTurn], is_owner: bool = False) -> list[ChatTurn]:
    """Trim and clean history for a request.

    Keeps the most recent OWNER_HISTORY_LIMIT (owner) or
    VISITOR_HISTORY_LIMIT (visitor) entries. User messages are never
    filtered; assistant messages go through dedupe_assistant_messages.
    Chronological order is preserved.

    Args:
        history: Conversation so far, oldest first
        is_owner: Whether the persona's owner is chatting

    Returns:
        Filtered history, oldest first
    """
    limit = OWNER_HISTORY_LIMIT if is_owner else VISITOR_HISTORY_LIMIT
    recent = list(history)[-limit:]

    assistant_positions = [i for i, turn in enumerate(recent) if turn.role == MessageRole.ASSISTANT]
    assistant_turns = [recent[i] for i in assistant_positions]
    kept = dedupe_assistant_messages(assistant_turns)

    # Map kept assistant turns back to their original positions
    kept_positions: set[int] = set()
    cursor = 0
    for position, turn in zip(assistant_positions, assistant_turns):
        if cursor < len(kept) and kept[cursor] is turn:
            kept_positions.add(position)
            cursor += 1

    return [
        turn for i, turn in enumerate(recent)
        if turn.role == MessageRole.USER or i in kept_positions
    ]
