from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ConversationRow(Base):
    __tablename__ = "conversations"

    id = Column(String(64), primary_key=True)
    # Owning user; every query is scoped by it
    user_id = Column(String(255), nullable=False, index=True)
    title = Column(String, nullable=False)
    model = Column(String(255), nullable=False)
    create_timestamp = Column(BigInteger, nullable=False)
    update_timestamp = Column(BigInteger, nullable=False)


class MessageRow(Base):
    __tablename__ = "messages"

    # Insertion counter; breaks ties between messages written in the same millisecond
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, nullable=False, index=True)
    conversation_id = Column(
        String(64), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # user | assistant
    role = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    # Model that produced the reply; assistant messages only
    model = Column(String(255), nullable=True)
    token_count = Column(Integer, nullable=True)
    create_timestamp = Column(BigInteger, nullable=False)
