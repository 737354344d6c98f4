from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from conversational_assistant.conversation_database.data_models.message import Message, MessageDatabase
from conversational_assistant.conversation_database.sqlalchemy.models import MessageRow
from conversational_assistant.conversation_database.sqlalchemy.session import session_scope
from conversational_assistant.errors import NotFound
from conversational_assistant.llms.base import Roles


def _to_model(row: MessageRow) -> Message:
    return Message(
        id=row.id,
        conversation_id=row.conversation_id,
        role=Roles(row.role),
        content=row.content,
        create_timestamp=row.create_timestamp,
        model=row.model,
        token_count=row.token_count,
    )


class SQLAlchemyMessageDatabase(MessageDatabase):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def create_message(self, message: Message) -> Message:
        try:
            async with session_scope(self.session_factory) as db:
                db.add(
                    MessageRow(
                        id=message.id,
                        conversation_id=message.conversation_id,
                        role=message.role.value,
                        content=message.content,
                        model=message.model,
                        token_count=message.token_count,
                        create_timestamp=message.create_timestamp,
                    )
                )
        except IntegrityError as exc:
            # The conversation was deleted after the caller checked it
            raise NotFound(f"Conversation {message.conversation_id} not found") from exc
        return message

    async def get_messages_by_conversation_id(self, conversation_id: str) -> list[Message]:
        async with session_scope(self.session_factory) as db:
            result = await db.execute(
                select(MessageRow)
                .where(MessageRow.conversation_id == conversation_id)
                .order_by(MessageRow.create_timestamp, MessageRow.seq)
            )
            return [_to_model(row) for row in result.scalars()]

    async def delete_messages_by_conversation_id(self, conversation_id: str) -> int:
        async with session_scope(self.session_factory) as db:
            result = await db.execute(delete(MessageRow).where(MessageRow.conversation_id == conversation_id))
            return result.rowcount or 0
