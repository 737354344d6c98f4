from conversational_assistant.conversation_database.data_models.message import Message, MessageDatabase


class InMemoryMessageDatabase(MessageDatabase):
    """
    List-backed message repository.

    Messages are kept per conversation in insertion order; the stable sort on
    'create_timestamp' keeps same-millisecond writes in append order.
    """

    def __init__(self) -> None:
        self.messages: dict[str, list[Message]] = {}

    async def create_message(self, message: Message) -> Message:
        self.messages.setdefault(message.conversation_id, []).append(message.model_copy())
        return message

    async def get_messages_by_conversation_id(self, conversation_id: str) -> list[Message]:
        messages = self.messages.get(conversation_id, [])
        return [m.model_copy() for m in sorted(messages, key=lambda m: m.create_timestamp)]

    async def delete_messages_by_conversation_id(self, conversation_id: str) -> int:
        return len(self.messages.pop(conversation_id, []))
