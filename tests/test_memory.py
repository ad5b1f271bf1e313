"""Unit tests for conversation stores."""
import pytest

from simchat.chat import Message, MessageRole
from simchat.memory import (
    ConversationStore,
    InMemoryConversationStore,
    create_conversation_store,
)
from simchat.memory.sqlite import SQLiteConversationStore


def _messages() -> list[Message]:
    return [
        Message(role=MessageRole.USER, content="Hi"),
        Message(role=MessageRole.ASSISTANT, content="Hello"),
    ]


class TestConversationStoreInterface:

    def test_store_is_abstract(self):
        with pytest.raises(TypeError):
            ConversationStore()  # type: ignore


class TestInMemoryStore:

    @pytest.mark.asyncio
    async def test_one_conversation_per_agent(self):
        store = InMemoryConversationStore()

        first = await store.get_or_create_conversation("agent-1")
        again = await store.get_or_create_conversation("agent-1")
        other = await store.get_or_create_conversation("agent-2")

        assert first == again
        assert first != other

    @pytest.mark.asyncio
    async def test_add_get_clear(self):
        store = InMemoryConversationStore()
        conversation_id = await store.get_or_create_conversation("agent-1")
        for message in _messages():
            await store.add_message(conversation_id, message)

        assert [m.content for m in await store.get_messages(conversation_id)] == ["Hi", "Hello"]

        await store.clear(conversation_id)
        assert await store.get_messages(conversation_id) == []

    @pytest.mark.asyncio
    async def test_find_does_not_create(self):
        store = InMemoryConversationStore()

        assert await store.find_conversation("agent-1") is None
        assert await store.find_conversation("agent-1") is None

        created = await store.get_or_create_conversation("agent-1")
        assert await store.find_conversation("agent-1") == created

    @pytest.mark.asyncio
    async def test_ensure_registers_chosen_id(self):
        store = InMemoryConversationStore()

        await store.ensure_conversation("conv-1", "agent-1")
        await store.ensure_conversation("conv-1", "agent-1")

        assert await store.get_or_create_conversation("agent-1") == "conv-1"
        assert await store.get_messages("conv-1") == []

    @pytest.mark.asyncio
    async def test_partial_message_is_rejected(self):
        store = InMemoryConversationStore()
        with pytest.raises(ValueError):
            await store.add_message("c", Message(role="assistant", content="hal", is_complete=False))


class TestSQLiteStore:

    @pytest.mark.asyncio
    async def test_round_trip_across_connections(self, tmp_path):
        path = tmp_path / "chat.db"
        originals = _messages()

        store = SQLiteConversationStore(path=path)
        await store.connect()
        try:
            conversation_id = await store.get_or_create_conversation("agent-1")
            for message in originals:
                await store.add_message(conversation_id, message)
        finally:
            await store.disconnect()

        reopened = SQLiteConversationStore(path=path)
        await reopened.connect()
        try:
            assert await reopened.get_or_create_conversation("agent-1") == conversation_id
            stored = await reopened.get_messages(conversation_id)
        finally:
            await reopened.disconnect()

        assert [(m.id, m.role, m.content) for m in stored] == [
            (m.id, m.role, m.content) for m in originals
        ]
        assert all(m.is_complete for m in stored)
        assert stored[0].timestamp == originals[0].timestamp

    @pytest.mark.asyncio
    async def test_clear(self, tmp_path):
        store = SQLiteConversationStore(path=tmp_path / "chat.db")
        await store.connect()
        try:
            conversation_id = await store.get_or_create_conversation("agent-1")
            await store.add_message(conversation_id, _messages()[0])
            await store.clear(conversation_id)
            assert await store.get_messages(conversation_id) == []
        finally:
            await store.disconnect()

    @pytest.mark.asyncio
    async def test_messages_under_chosen_conversation_id(self, tmp_path):
        store = SQLiteConversationStore(path=tmp_path / "chat.db")
        await store.connect()
        try:
            await store.ensure_conversation("conv-1", "agent-1")
            await store.ensure_conversation("conv-1", "agent-1")
            for message in _messages():
                await store.add_message("conv-1", message)

            assert [m.content for m in await store.get_messages("conv-1")] == ["Hi", "Hello"]
            assert await store.find_conversation("agent-1") == "conv-1"
            assert await store.get_or_create_conversation("agent-1") == "conv-1"
        finally:
            await store.disconnect()

    @pytest.mark.asyncio
    async def test_find_unknown_agent_creates_nothing(self, tmp_path):
        store = SQLiteConversationStore(path=tmp_path / "chat.db")
        await store.connect()
        try:
            assert await store.find_conversation("nobody") is None
            async with store._conn().execute("SELECT COUNT(*) FROM conversations") as cursor:
                (count,) = await cursor.fetchone()
            assert count == 0
        finally:
            await store.disconnect()

    @pytest.mark.asyncio
    async def test_use_before_connect_raises(self, tmp_path):
        store = SQLiteConversationStore(path=tmp_path / "chat.db")
        with pytest.raises(RuntimeError, match="not connected"):
            await store.get_messages("c")


class TestStoreFactory:

    def test_create_memory_store(self):
        store = create_conversation_store("memory")
        assert store.backend_type == "memory"

    def test_create_sqlite_store(self, tmp_path):
        store = create_conversation_store("sqlite", path=tmp_path / "x.db")
        assert store.backend_type == "sqlite"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unsupported memory backend"):
            create_conversation_store("redis")
