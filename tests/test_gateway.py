import asyncio

import pytest

from conftest import FakeLLM
from conversational_assistant.completion.gateway import (
    FALLBACK_TITLE,
    TITLE_SYSTEM_PROMPT,
    CompletionGateway,
    FirstExchange,
    HistoryEntry,
)
from conversational_assistant.errors import ErrorKind, GenerationFailed
from conversational_assistant.llms.base import Roles


def _history(count: int) -> list[HistoryEntry]:
    roles = [Roles.USER, Roles.ASSISTANT]
    return [HistoryEntry(role=roles[i % 2], content=f"m{i}") for i in range(count)]


@pytest.mark.asyncio
async def test_complete_sends_system_prompt_window_and_current_turn(llm):
    gateway = CompletionGateway(llm)

    completion = await gateway.complete("Be brief.", _history(14), "latest", "gpt-4o")

    sent = llm.calls[0]["conversation"]
    assert sent[0].role == Roles.SYSTEM
    assert sent[0].content == "Be brief."
    assert [m.content for m in sent[1:-1]] == [f"m{i}" for i in range(4, 14)]
    assert sent[-1].role == Roles.USER
    assert sent[-1].content == "latest"
    assert llm.calls[0]["temperature"] == 0.7
    assert llm.calls[0]["max_tokens"] == 4000
    assert completion.content == "reply to: latest"
    assert completion.model == "gpt-4o"
    assert completion.token_count == 42


@pytest.mark.asyncio
async def test_complete_without_system_prompt_or_history(llm):
    await CompletionGateway(llm).complete(None, [], "hi", "gpt-4o")

    sent = llm.calls[0]["conversation"]
    assert len(sent) == 1
    assert sent[0].role == Roles.USER


def test_window_honours_configured_size(llm):
    assert len(CompletionGateway(llm, history_window=3).window(_history(8))) == 3
    assert CompletionGateway(llm, history_window=0).window(_history(8)) == []
    assert len(CompletionGateway(llm).window(_history(4))) == 4


@pytest.mark.asyncio
async def test_complete_wraps_provider_errors(llm):
    llm.fail_with = RuntimeError("rate limited")

    with pytest.raises(GenerationFailed) as excinfo:
        await CompletionGateway(llm).complete(None, [], "hi", "gpt-4o")

    assert excinfo.value.kind is ErrorKind.GENERATION_FAILED
    assert "rate limited" in excinfo.value.message
    assert isinstance(excinfo.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_complete_rejects_empty_reply(llm):
    llm.reply = "   "

    with pytest.raises(GenerationFailed):
        await CompletionGateway(llm).complete(None, [], "hi", "gpt-4o")


@pytest.mark.asyncio
async def test_complete_times_out():
    gateway = CompletionGateway(FakeLLM(delay=0.5), timeout=0.01)

    with pytest.raises(GenerationFailed) as excinfo:
        await gateway.complete(None, [], "hi", "gpt-4o")

    assert isinstance(excinfo.value.__cause__, asyncio.TimeoutError)


@pytest.mark.asyncio
async def test_summarize_title_uses_title_settings(llm):
    gateway = CompletionGateway(llm, title_model="gpt-4o-mini")

    title = await gateway.summarize_title(FirstExchange(user_content="write a hello world", assistant_content="..."))

    assert title == "Hello World Program"
    call = llm.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 20
    assert call["conversation"][0].content == TITLE_SYSTEM_PROMPT
    assert call["conversation"][1].content == "User message:\nwrite a hello world\n\nAssistant reply:\n..."


@pytest.mark.asyncio
async def test_summarize_title_strips_quotes():
    gateway = CompletionGateway(FakeLLM(title='"Python “Hello” World"'))

    assert await gateway.summarize_title(FirstExchange(user_content="hi", assistant_content="hello")) == (
        "Python Hello World"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("title", ["", "  ", '""', "''"])
async def test_summarize_title_falls_back_on_blank_title(title):
    gateway = CompletionGateway(FakeLLM(title=title))

    assert await gateway.summarize_title(FirstExchange(user_content="hi", assistant_content="hello")) == FALLBACK_TITLE


@pytest.mark.asyncio
async def test_summarize_title_never_raises(monkeypatch, llm):
    async def broken_generate(*args, **kwargs):
        raise RuntimeError("provider down")

    monkeypatch.setattr(llm, "generate", broken_generate)

    title = await CompletionGateway(llm).summarize_title(FirstExchange(user_content="hi", assistant_content="hello"))

    assert title == FALLBACK_TITLE


@pytest.mark.asyncio
async def test_summarize_title_skips_provider_for_empty_message(llm):
    title = await CompletionGateway(llm).summarize_title(FirstExchange(user_content=" ", assistant_content="hello"))

    assert title == FALLBACK_TITLE
    assert llm.calls == []


@pytest.mark.asyncio
async def test_title_request_includes_start_of_reply_as_context(llm):
    gateway = CompletionGateway(llm)

    await gateway.summarize_title(FirstExchange(user_content="tell me a story", assistant_content="x" * 2000))
    await gateway.summarize_title(FirstExchange(user_content="tell me a story", assistant_content="  "))

    with_reply, without_reply = (call["conversation"][1].content for call in llm.calls)
    assert with_reply == "User message:\ntell me a story\n\nAssistant reply:\n" + "x" * 500
    assert without_reply == "tell me a story"
