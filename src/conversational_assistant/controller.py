"""
Conversational assistant controller (Facade).

'ConversationController' is the single entry point the HTTP and websocket
boundary calls into. It wraps the owner-scoped 'ConversationStore', the
'MessagingPipeline' that handles new messages, and the 'PrefixRouter' whose
table clients preview.

Every operation takes the authenticated user id and raises 'NotFound' when the
conversation is missing or owned by someone else.
"""

from typing import Any

from pydantic import BaseModel

from conversational_assistant.conversation_database.data_models.conversation import Conversation
from conversational_assistant.conversation_database.data_models.message import Message
from conversational_assistant.conversation_database.store import ConversationStore
from conversational_assistant.errors import NotFound
from conversational_assistant.pipeline.pipeline import MessagingPipeline, SubmissionResult
from conversational_assistant.routing.router import PrefixRouter, RoutingTableEntry


class MessageInput(BaseModel):
    # Left untyped so non-string content is reported as 'ValidationFailed' by the pipeline
    content: Any = None


class ConversationInput(BaseModel):
    title: str | None = None
    model: str | None = None


class ConversationUpdate(BaseModel):
    title: str | None = None
    model: str | None = None


class ClientConversation(BaseModel):
    conversation: Conversation
    messages: list[Message]


class ConversationController:
    def __init__(self, store: ConversationStore, pipeline: MessagingPipeline, router: PrefixRouter):
        self.store = store
        self.pipeline = pipeline
        self.router = router

    async def get_conversations(self, user_id: str) -> list[Conversation]:
        return await self.store.list_conversations(user_id)

    async def create_conversation(self, user_input: ConversationInput, user_id: str) -> Conversation:
        return await self.store.create_conversation(user_id, title=user_input.title, model=user_input.model)

    async def get_conversation(self, conversation_id: str, user_id: str) -> ClientConversation:
        conversation = await self.store.get_conversation(conversation_id, user_id)
        if conversation is None:
            raise NotFound(f"Conversation {conversation_id} not found")
        messages = await self.store.list_messages(conversation_id)
        return ClientConversation(conversation=conversation, messages=messages)

    async def update_conversation(
        self, conversation_id: str, conversation_updates: ConversationUpdate, user_id: str
    ) -> Conversation:
        conversation = await self.store.update_conversation(
            conversation_id, user_id, title=conversation_updates.title, model=conversation_updates.model
        )
        if conversation is None:
            raise NotFound(f"Conversation {conversation_id} not found")
        return conversation

    async def delete_conversation(self, conversation_id: str, user_id: str) -> None:
        if not await self.store.delete_conversation(conversation_id, user_id):
            raise NotFound(f"Conversation {conversation_id} not found")

    async def get_messages(self, conversation_id: str, user_id: str) -> list[Message]:
        return await self.store.get_conversation_messages(conversation_id, user_id)

    async def submit_message(self, conversation_id: str, user_input: MessageInput, user_id: str) -> SubmissionResult:
        return await self.pipeline.submit(conversation_id, user_id, user_input.content)

    def get_routing_table(self) -> list[RoutingTableEntry]:
        return self.router.routing_table()
