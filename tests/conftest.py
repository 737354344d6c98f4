import asyncio

import pytest
from fastapi.testclient import TestClient

from conversational_assistant.api.app import build_services, create_app
from conversational_assistant.completion.gateway import TITLE_SYSTEM_PROMPT, CompletionGateway
from conversational_assistant.config import Settings
from conversational_assistant.conversation_database.in_memory import (
    InMemoryConversationDatabase,
    InMemoryMessageDatabase,
)
from conversational_assistant.conversation_database.store import ConversationStore
from conversational_assistant.llms.base import LLM, LLMCompletion, LLMMessage, Roles
from conversational_assistant.pipeline.pipeline import MessagingPipeline
from conversational_assistant.realtime.hub import RealtimeHub
from conversational_assistant.routing.router import PrefixRouter


class FakeLLM(LLM):
    """Records every request. Replies 'reply to: <last message>' unless told otherwise."""

    def __init__(self, title: str = "Hello World Program", delay: float = 0.0):
        super().__init__("gpt-4o")
        self.title = title
        self.delay = delay
        self.fail_with: Exception | None = None
        self.reply: str | None = None
        self.calls: list[dict] = []

    async def generate(self, conversation, model=None, temperature=None, max_tokens=None):
        self.calls.append(
            {"conversation": list(conversation), "model": model, "temperature": temperature, "max_tokens": max_tokens}
        )
        is_title = bool(conversation) and conversation[0].content == TITLE_SYSTEM_PROMPT
        if self.delay:
            await asyncio.sleep(self.delay)
        if is_title:
            return LLMCompletion(content=self.title, model=model or self.model_name, token_count=5)
        if self.fail_with is not None:
            raise self.fail_with
        content = self.reply if self.reply is not None else f"reply to: {conversation[-1].content}"
        return LLMCompletion(content=content, model=model or self.model_name, token_count=42)

    @property
    def reply_calls(self) -> list[dict]:
        return [call for call in self.calls if call["conversation"][0].content != TITLE_SYSTEM_PROMPT]

    @property
    def title_calls(self) -> list[dict]:
        return [call for call in self.calls if call["conversation"][0].content == TITLE_SYSTEM_PROMPT]


class FakeConnection:
    def __init__(self, fail: bool = False):
        self.sent: list[str] = []
        self.is_open = True
        self.fail = fail

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)


class StalledConnection(FakeConnection):
    """Accepts frames until 'stall' is set; after that 'send_text' never completes."""

    def __init__(self):
        super().__init__()
        self.stall = False

    async def send_text(self, data: str) -> None:
        if self.stall:
            await asyncio.Event().wait()
        await super().send_text(data)


def user_message(content: str) -> LLMMessage:
    return LLMMessage(role=Roles.USER, content=content)


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def store():
    return ConversationStore(InMemoryConversationDatabase(), InMemoryMessageDatabase())


@pytest.fixture
def hub():
    return RealtimeHub()


@pytest.fixture
def pipeline(store, llm, hub):
    return MessagingPipeline(store, PrefixRouter(), CompletionGateway(llm), notifier=hub)


@pytest.fixture(scope="function")
def client(llm):
    settings = Settings()
    app = create_app(settings=settings, services=build_services(settings, llm=llm))
    with TestClient(app) as test_client:
        yield test_client
