from conversational_assistant.conversation_database.data_models.conversation import Conversation, ConversationDatabase


class InMemoryConversationDatabase(ConversationDatabase):
    """Dict-backed conversation repository. State lives for the lifetime of the process."""

    def __init__(self) -> None:
        self.conversations: dict[str, Conversation] = {}

    async def create_conversation(self, conversation: Conversation) -> Conversation:
        self.conversations[conversation.id] = conversation.model_copy()
        return conversation

    async def get_conversations_by_user_id(self, user_id: str) -> list[Conversation]:
        owned = [c.model_copy() for c in self.conversations.values() if c.user_id == user_id]
        return sorted(owned, key=lambda c: c.update_timestamp, reverse=True)

    async def get_conversation_by_id(self, conversation_id: str) -> Conversation | None:
        conversation = self.conversations.get(conversation_id)
        return conversation.model_copy() if conversation else None

    async def update_conversation(self, conversation: Conversation) -> Conversation:
        if conversation.id not in self.conversations:
            raise KeyError(conversation.id)
        self.conversations[conversation.id] = conversation.model_copy()
        return conversation

    async def delete_conversation(self, conversation_id: str) -> bool:
        return self.conversations.pop(conversation_id, None) is not None
