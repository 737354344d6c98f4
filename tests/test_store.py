import pytest

from conversational_assistant.conversation_database.sqlalchemy import (
    SQLAlchemyConversationDatabase,
    SQLAlchemyMessageDatabase,
    build_session_factory,
    init_models,
)
from conversational_assistant.conversation_database.store import ConversationStore
from conversational_assistant.errors import NotFound, ValidationFailed
from conversational_assistant.llms.base import Roles


async def _exercise_store(store: ConversationStore) -> None:
    conversation = await store.create_conversation("alice")
    assert conversation.title == "New Conversation"
    assert conversation.model == "gpt-4o"
    assert conversation.create_timestamp == conversation.update_timestamp

    first = await store.append_message(conversation.id, Roles.USER, "hi")
    second = await store.append_message(conversation.id, Roles.ASSISTANT, "hello", model="gpt-4o", token_count=7)
    third = await store.append_message(conversation.id, Roles.USER, "again")

    messages = await store.get_conversation_messages(conversation.id, "alice")
    assert [m.id for m in messages] == [first.id, second.id, third.id]
    assert messages[1].model == "gpt-4o"
    assert messages[1].token_count == 7
    assert messages[0].model is None

    assert await store.get_conversation(conversation.id, "bob") is None
    with pytest.raises(NotFound):
        await store.get_conversation_messages(conversation.id, "bob")

    updated = await store.update_conversation(conversation.id, "alice", title="Greetings")
    assert updated.title == "Greetings"
    assert updated.update_timestamp >= conversation.update_timestamp
    assert (await store.get_conversation(conversation.id, "alice")).title == "Greetings"
    assert await store.update_conversation(conversation.id, "bob", title="Stolen") is None

    assert await store.delete_conversation(conversation.id, "bob") is False
    assert await store.delete_conversation(conversation.id, "alice") is True
    assert await store.get_conversation(conversation.id, "alice") is None
    assert await store.list_messages(conversation.id) == []
    with pytest.raises(NotFound):
        await store.append_message(conversation.id, Roles.USER, "too late")


@pytest.mark.asyncio
async def test_in_memory_store_round_trip(store):
    await _exercise_store(store)


@pytest.mark.asyncio
async def test_sqlalchemy_store_round_trip(tmp_path):
    engine, session_factory = build_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    await init_models(engine)
    try:
        store = ConversationStore(
            SQLAlchemyConversationDatabase(session_factory), SQLAlchemyMessageDatabase(session_factory)
        )
        await _exercise_store(store)
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_list_conversations_is_owner_scoped_and_most_recent_first(store, monkeypatch):
    import conversational_assistant.conversation_database.store as store_module

    clock = iter([1000, 2000, 3000, 4000])
    monkeypatch.setattr(store_module, "get_current_timestamp", lambda: next(clock))

    older = await store.create_conversation("alice", title="Older")
    newer = await store.create_conversation("alice", title="Newer")
    await store.create_conversation("bob", title="Bob's")
    await store.update_conversation(older.id, "alice", title="Older, renamed")

    listed = await store.list_conversations("alice")

    assert [c.id for c in listed] == [older.id, newer.id]


@pytest.mark.asyncio
async def test_same_millisecond_messages_keep_append_order(store, monkeypatch):
    import conversational_assistant.conversation_database.store as store_module

    monkeypatch.setattr(store_module, "get_current_timestamp", lambda: 5000)
    conversation = await store.create_conversation("alice")
    contents = [f"message {i}" for i in range(5)]
    for content in contents:
        await store.append_message(conversation.id, Roles.USER, content)

    assert [m.content for m in await store.list_messages(conversation.id)] == contents


@pytest.mark.asyncio
async def test_create_and_update_reject_blank_title(store):
    with pytest.raises(ValidationFailed):
        await store.create_conversation("alice", title="   ")

    conversation = await store.create_conversation("alice", title="Fine", model="gpt-4o-mini")
    assert conversation.model == "gpt-4o-mini"
    with pytest.raises(ValidationFailed):
        await store.update_conversation(conversation.id, "alice", title="")


@pytest.mark.asyncio
async def test_sqlalchemy_append_to_conversation_deleted_after_check_is_not_found(tmp_path, monkeypatch):
    engine, session_factory = build_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'chat.db'}")
    await init_models(engine)
    try:
        conversation_db = SQLAlchemyConversationDatabase(session_factory)
        store = ConversationStore(conversation_db, SQLAlchemyMessageDatabase(session_factory))
        conversation = await store.create_conversation("alice")
        await store.delete_conversation(conversation.id, "alice")

        async def stale_lookup(conversation_id):
            return conversation

        monkeypatch.setattr(conversation_db, "get_conversation_by_id", stale_lookup)

        with pytest.raises(NotFound):
            await store.append_message(conversation.id, Roles.USER, "hello")
    finally:
        await engine.dispose()
