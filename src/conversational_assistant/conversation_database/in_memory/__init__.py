from conversational_assistant.conversation_database.in_memory.conversation import InMemoryConversationDatabase
from conversational_assistant.conversation_database.in_memory.message import InMemoryMessageDatabase

__all__ = ["InMemoryConversationDatabase", "InMemoryMessageDatabase"]
