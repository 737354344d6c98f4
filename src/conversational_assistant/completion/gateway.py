"""
Completion gateway.

'CompletionGateway' sits between the messaging pipeline and an 'LLM' backend.
It owns three concerns the pipeline should not care about:

    - context windowing: only the most recent 'history_window' entries of the
      prior message log are sent, oldest first, followed by the current turn;
    - deadlines: every provider call runs under 'timeout' seconds so one slow
      request cannot hold a conversation's serialization slot indefinitely;
    - error normalisation: provider errors, timeouts and empty replies surface
      as 'GenerationFailed' from 'complete'. 'summarize_title' never raises and
      falls back to 'FALLBACK_TITLE' instead.
"""

import asyncio
from collections.abc import Sequence

from loguru import logger
from pydantic import BaseModel

from conversational_assistant.conversation_database.data_models.conversation import DEFAULT_CONVERSATION_TITLE
from conversational_assistant.errors import GenerationFailed
from conversational_assistant.llms.base import LLM, LLMMessage, Roles

FALLBACK_TITLE = DEFAULT_CONVERSATION_TITLE

TITLE_SYSTEM_PROMPT = (
    "Generate a short, descriptive title (4-6 words) for a conversation based on the user's first message. "
    "The assistant's reply, when given, is context only. Do not use quotes or special characters."
)

# Only the start of the reply is sent; the title is about the user's request
_TITLE_REPLY_CHARS = 500

_QUOTE_CHARS = str.maketrans("", "", "\"“”«»`")


class HistoryEntry(BaseModel):
    role: Roles
    content: str


class Completion(BaseModel):
    content: str
    model: str
    token_count: int | None = None


class FirstExchange(BaseModel):
    user_content: str
    assistant_content: str


class CompletionGateway:
    """
    Windowed, deadline-bounded access to the completion provider.

    Attributes:
        llm: The backend serving both replies and titles.
        history_window: Maximum number of prior messages sent as context.
        timeout: Per-call deadline in seconds. None disables it and leaves only
            the provider's own timeout.
        title_model: Model used for title generation; defaults to the
            backend's default model.
    """

    def __init__(
        self,
        llm: LLM,
        history_window: int = 10,
        timeout: float | None = None,
        title_model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        title_temperature: float = 0.3,
        title_max_tokens: int = 20,
    ):
        self.llm = llm
        self.history_window = history_window
        self.timeout = timeout
        self.title_model = title_model or llm.model_name
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.title_temperature = title_temperature
        self.title_max_tokens = title_max_tokens

    def window(self, history: Sequence[HistoryEntry]) -> list[HistoryEntry]:
        if self.history_window <= 0:
            return []
        return list(history[-self.history_window :])

    async def complete(
        self,
        system_prompt: str | None,
        history: Sequence[HistoryEntry],
        user_content: str,
        model: str,
    ) -> Completion:
        conversation: list[LLMMessage] = []
        if system_prompt:
            conversation.append(LLMMessage(role=Roles.SYSTEM, content=system_prompt))
        conversation += [LLMMessage(role=entry.role, content=entry.content) for entry in self.window(history)]
        conversation.append(LLMMessage(role=Roles.USER, content=user_content))

        try:
            async with asyncio.timeout(self.timeout):
                reply = await self.llm.generate(
                    conversation, model=model, temperature=self.temperature, max_tokens=self.max_tokens
                )
        except TimeoutError as exc:
            logger.error(f"Completion with model {model} exceeded {self.timeout}s")
            raise GenerationFailed(f"Completion timed out after {self.timeout}s") from exc
        except Exception as exc:
            logger.error(f"Completion provider error for model {model}: {exc}")
            raise GenerationFailed(f"Failed to generate AI response: {exc}") from exc

        if not reply.content.strip():
            raise GenerationFailed("Completion provider returned an empty response")
        return Completion(content=reply.content, model=reply.model, token_count=reply.token_count)

    async def summarize_title(self, first_exchange: FirstExchange) -> str:
        if not first_exchange.user_content.strip():
            return FALLBACK_TITLE

        try:
            async with asyncio.timeout(self.timeout):
                reply = await self.llm.generate(
                    [
                        LLMMessage(role=Roles.SYSTEM, content=TITLE_SYSTEM_PROMPT),
                        LLMMessage(role=Roles.USER, content=_title_request(first_exchange)),
                    ],
                    model=self.title_model,
                    temperature=self.title_temperature,
                    max_tokens=self.title_max_tokens,
                )
        except Exception as exc:
            logger.warning(f"Title generation failed, using fallback title: {exc}")
            return FALLBACK_TITLE

        title = reply.content.translate(_QUOTE_CHARS).strip().strip("'").strip()
        return title or FALLBACK_TITLE


def _title_request(first_exchange: FirstExchange) -> str:
    reply = first_exchange.assistant_content.strip()
    if not reply:
        return first_exchange.user_content
    return (
        f"User message:\n{first_exchange.user_content}\n\n"
        f"Assistant reply:\n{reply[:_TITLE_REPLY_CHARS]}"
    )
