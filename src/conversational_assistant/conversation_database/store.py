"""
Owner-scoped store interface over the conversation and message repositories.

'ConversationStore' is the only storage surface the messaging pipeline and the
controller talk to. It composes a 'ConversationDatabase' and a
'MessageDatabase' and adds the rules the raw repositories do not know about:

    - every conversation read or write is scoped by the owner's user id, and a
      mismatch looks exactly like a missing conversation ('None' / 'NotFound');
    - messages can only be appended to a conversation that exists at write time;
    - a conversation title is never empty.
"""

from conversational_assistant.conversation_database.data_models.conversation import (
    DEFAULT_CONVERSATION_TITLE,
    Conversation,
    ConversationDatabase,
)
from conversational_assistant.conversation_database.data_models.message import Message, MessageDatabase
from conversational_assistant.errors import NotFound, ValidationFailed
from conversational_assistant.llms.base import Roles
from conversational_assistant.routing.router import DEFAULT_MODEL
from conversational_assistant.utils.database import generate_uid
from conversational_assistant.utils.time import get_current_timestamp


class ConversationStore:
    def __init__(
        self,
        conversation_db: ConversationDatabase,
        message_db: MessageDatabase,
        default_model: str = DEFAULT_MODEL,
    ):
        self.conversation_db = conversation_db
        self.message_db = message_db
        self.default_model = default_model

    async def create_conversation(self, owner_id: str, title: str | None = None, model: str | None = None) -> Conversation:
        if title is not None and not title.strip():
            raise ValidationFailed("Conversation title must not be empty")
        create_time = get_current_timestamp()
        return await self.conversation_db.create_conversation(
            Conversation(
                id=generate_uid(),
                user_id=owner_id,
                title=title or DEFAULT_CONVERSATION_TITLE,
                model=model or self.default_model,
                create_timestamp=create_time,
                update_timestamp=create_time,
            )
        )

    async def list_conversations(self, owner_id: str) -> list[Conversation]:
        return await self.conversation_db.get_conversations_by_user_id(owner_id)

    async def get_conversation(self, conversation_id: str, owner_id: str) -> Conversation | None:
        conversation = await self.conversation_db.get_conversation_by_id(conversation_id)
        if conversation is None or conversation.user_id != owner_id:
            return None
        return conversation

    async def list_messages(self, conversation_id: str) -> list[Message]:
        """Return the conversation's message log, oldest first.

        Ownership is not checked here; callers resolve the conversation through
        'get_conversation' first.
        """
        return await self.message_db.get_messages_by_conversation_id(conversation_id)

    async def get_conversation_messages(self, conversation_id: str, owner_id: str) -> list[Message]:
        if await self.get_conversation(conversation_id, owner_id) is None:
            raise NotFound(f"Conversation {conversation_id} not found")
        return await self.list_messages(conversation_id)

    async def append_message(
        self,
        conversation_id: str,
        role: Roles,
        content: str,
        model: str | None = None,
        token_count: int | None = None,
    ) -> Message:
        if await self.conversation_db.get_conversation_by_id(conversation_id) is None:
            raise NotFound(f"Conversation {conversation_id} not found")
        return await self.message_db.create_message(
            Message(
                id=generate_uid(),
                conversation_id=conversation_id,
                role=role,
                content=content,
                create_timestamp=get_current_timestamp(),
                model=model,
                token_count=token_count,
            )
        )

    async def update_conversation(
        self,
        conversation_id: str,
        owner_id: str,
        title: str | None = None,
        model: str | None = None,
    ) -> Conversation | None:
        if title is not None and not title.strip():
            raise ValidationFailed("Conversation title must not be empty")
        conversation = await self.get_conversation(conversation_id, owner_id)
        if conversation is None:
            return None
        updated = conversation.model_copy(
            update={
                "title": title if title is not None else conversation.title,
                "model": model if model is not None else conversation.model,
                "update_timestamp": get_current_timestamp(),
            }
        )
        try:
            return await self.conversation_db.update_conversation(updated)
        except KeyError:
            # Deleted between the lookup and the write
            return None

    async def delete_conversation(self, conversation_id: str, owner_id: str) -> bool:
        if await self.get_conversation(conversation_id, owner_id) is None:
            return False
        await self.message_db.delete_messages_by_conversation_id(conversation_id)
        return await self.conversation_db.delete_conversation(conversation_id)
