"""SQLite conversation store.

Provides persistent conversation storage using a SQLite database.
Uses aiosqlite for async access.
"""

from datetime import datetime
from pathlib import Path
from uuid import uuid4

import aiosqlite

from ..chat.models import Message, utcnow
from .base import ConversationStore


class SQLiteConversationStore(ConversationStore):
    """SQLite-backed conversation store.

    Stores one conversation per agent and its finalized messages.
    """

    def __init__(self, path: str | Path = "./simchat.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteConversationStore is not connected")
        return self._connection

    async def connect(self) -> None:
        """Open the database and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        conn = self._conn()
        await conn.execute("""
            CREATE TABLE IF NOT EXISTS conversations (
                conversation_id TEXT PRIMARY KEY,
                agent_id TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        await conn.execute("""
            CREATE TABLE IF NOT EXISTS messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                conversation_id TEXT NOT NULL,
                message_id TEXT NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                FOREIGN KEY (conversation_id)
                    REFERENCES conversations(conversation_id) ON DELETE CASCADE
            )
        """)

        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_conversations_agent
            ON conversations(agent_id, created_at)
        """)

        await conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_messages_conversation
            ON messages(conversation_id, seq)
        """)

        await conn.commit()

    async def disconnect(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def find_conversation(self, agent_id: str) -> str | None:
        async with self._conn().execute(
            """
            SELECT conversation_id FROM conversations
            WHERE agent_id = ?
            ORDER BY created_at ASC, rowid ASC
            LIMIT 1
            """,
            (agent_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row is not None else None

    async def get_or_create_conversation(self, agent_id: str) -> str:
        existing = await self.find_conversation(agent_id)
        if existing is not None:
            return existing

        conversation_id = str(uuid4())
        await self.ensure_conversation(conversation_id, agent_id)
        return conversation_id

    async def ensure_conversation(self, conversation_id: str, agent_id: str) -> None:
        conn = self._conn()
        await conn.execute(
            "INSERT OR IGNORE INTO conversations (conversation_id, agent_id, created_at) VALUES (?, ?, ?)",
            (conversation_id, agent_id, utcnow().isoformat())
        )
        await conn.commit()

    async def add_message(self, conversation_id: str, message: Message) -> None:
        if not message.is_complete:
            raise ValueError("Only complete messages can be stored")

        conn = self._conn()
        await conn.execute("""
            INSERT INTO messages (conversation_id, message_id, role, content, timestamp)
            VALUES (?, ?, ?, ?, ?)
        """, (
            conversation_id,
            message.id,
            message.role.value,
            message.content,
            message.timestamp.isoformat()
        ))
        await conn.commit()

    async def get_messages(self, conversation_id: str) -> list[Message]:
        async with self._conn().execute(
            """
            SELECT message_id, role, content, timestamp
            FROM messages
            WHERE conversation_id = ?
            ORDER BY seq ASC
            """,
            (conversation_id,)
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            Message(
                id=message_id,
                role=role,
                content=content,
                timestamp=datetime.fromisoformat(ts),
                is_complete=True,
            )
            for message_id, role, content, ts in rows
        ]

    async def clear(self, conversation_id: str) -> None:
        conn = self._conn()
        await conn.execute(
            "DELETE FROM messages WHERE conversation_id = ?",
            (conversation_id,)
        )
        await conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"
