from conversational_assistant.conversation_database.data_models.conversation import (
    DEFAULT_CONVERSATION_TITLE,
    Conversation,
    ConversationDatabase,
)
from conversational_assistant.conversation_database.data_models.message import Message, MessageDatabase
from conversational_assistant.conversation_database.store import ConversationStore

__all__ = [
    "DEFAULT_CONVERSATION_TITLE",
    "Conversation",
    "ConversationDatabase",
    "ConversationStore",
    "Message",
    "MessageDatabase",
]
