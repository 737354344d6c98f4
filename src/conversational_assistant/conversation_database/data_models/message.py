"""
Message data model and storage interface.

Messages are append-only: once written their content never changes. A
conversation's log is ordered by 'create_timestamp'; backends must keep
insertion order for messages written within the same millisecond.

The 'MessageDatabase' ABC is the pluggable storage backend. Concrete
implementations: 'InMemoryMessageDatabase', 'SQLAlchemyMessageDatabase'.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from conversational_assistant.llms.base import Roles


class Message(BaseModel):
    """
    A single message within a conversation.

    'model' and 'token_count' are only set on assistant messages; 'model' names
    the model that produced the reply.
    """

    id: str
    conversation_id: str
    role: Roles
    content: str
    create_timestamp: int
    model: str | None = None
    token_count: int | None = None


class MessageDatabase(ABC):
    """Abstract repository for 'Message' records."""

    @abstractmethod
    async def create_message(self, message: Message) -> Message:
        """Store the message. Backends that enforce the conversation reference raise 'NotFound' when it is gone."""
        pass

    @abstractmethod
    async def get_messages_by_conversation_id(self, conversation_id: str) -> list[Message]:
        """Return the conversation's messages, oldest first."""
        pass

    @abstractmethod
    async def delete_messages_by_conversation_id(self, conversation_id: str) -> int:
        """Delete every message of the conversation and return how many were removed."""
        pass
