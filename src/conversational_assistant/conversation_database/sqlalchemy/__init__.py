from conversational_assistant.conversation_database.sqlalchemy.conversation import SQLAlchemyConversationDatabase
from conversational_assistant.conversation_database.sqlalchemy.message import SQLAlchemyMessageDatabase
from conversational_assistant.conversation_database.sqlalchemy.session import build_session_factory, init_models

__all__ = [
    "SQLAlchemyConversationDatabase",
    "SQLAlchemyMessageDatabase",
    "build_session_factory",
    "init_models",
]
