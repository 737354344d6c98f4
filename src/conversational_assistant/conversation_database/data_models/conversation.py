"""
Conversation data model and storage interface.

The 'ConversationDatabase' ABC is the pluggable storage backend for conversation
records. Concrete implementations ('InMemoryConversationDatabase',
'SQLAlchemyConversationDatabase') are interchangeable at construction time,
keeping the pipeline and API layer free of storage-specific code.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

DEFAULT_CONVERSATION_TITLE = "New Conversation"


class Conversation(BaseModel):
    """
    A titled conversation owned by a user.

    'title' starts as the placeholder and is overwritten once after the first
    exchange. 'model' is the conversation's selected default model.
    """

    id: str
    user_id: str
    title: str
    model: str
    create_timestamp: int
    update_timestamp: int


class ConversationDatabase(ABC):
    """Abstract repository for 'Conversation' records."""

    @abstractmethod
    async def create_conversation(self, conversation: Conversation) -> Conversation:
        pass

    @abstractmethod
    async def get_conversations_by_user_id(self, user_id: str) -> list[Conversation]:
        """Return the user's conversations, most recently updated first."""
        pass

    @abstractmethod
    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None:
        pass

    @abstractmethod
    async def update_conversation(self, conversation: Conversation) -> Conversation:
        pass

    @abstractmethod
    async def delete_conversation(self, conversation_id: str) -> bool:
        pass
