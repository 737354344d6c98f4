from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conversational_assistant.conversation_database.data_models.conversation import Conversation, ConversationDatabase
from conversational_assistant.conversation_database.sqlalchemy.models import ConversationRow
from conversational_assistant.conversation_database.sqlalchemy.session import session_scope


def _to_model(row: ConversationRow) -> Conversation:
    return Conversation(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        model=row.model,
        create_timestamp=row.create_timestamp,
        update_timestamp=row.update_timestamp,
    )


class SQLAlchemyConversationDatabase(ConversationDatabase):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        async with session_scope(self.session_factory) as db:
            db.add(ConversationRow(**conversation.model_dump()))
        return conversation

    async def get_conversations_by_user_id(self, user_id: str) -> list[Conversation]:
        async with session_scope(self.session_factory) as db:
            result = await db.execute(
                select(ConversationRow)
                .where(ConversationRow.user_id == user_id)
                .order_by(ConversationRow.update_timestamp.desc())
            )
            return [_to_model(row) for row in result.scalars()]

    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None:
        async with session_scope(self.session_factory) as db:
            row = await db.get(ConversationRow, conversation_id)
            return _to_model(row) if row is not None else None

    async def update_conversation(self, conversation: Conversation) -> Conversation:
        async with session_scope(self.session_factory) as db:
            row = await db.get(ConversationRow, conversation.id)
            if row is None:
                raise KeyError(conversation.id)
            row.title = conversation.title
            row.model = conversation.model
            row.update_timestamp = conversation.update_timestamp
        return conversation

    async def delete_conversation(self, conversation_id: str) -> bool:
        async with session_scope(self.session_factory) as db:
            result = await db.execute(delete(ConversationRow).where(ConversationRow.id == conversation_id))
            return (result.rowcount or 0) > 0
