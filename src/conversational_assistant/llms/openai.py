"""
OpenAI chat completions backend.

'OpenAILLM' wraps 'openai.AsyncOpenAI'. Provider errors ('openai.APIError' and
its subclasses, timeouts) propagate unchanged; normalising them into the
pipeline's error taxonomy is the completion gateway's job.
"""

from typing import Any

from loguru import logger
from openai import AsyncOpenAI

from conversational_assistant.llms.base import LLM, LLMCompletion, LLMMessage, Roles


class OpenAILLM(LLM):
    """
    LLM backend for the OpenAI API (or any OpenAI-compatible endpoint via 'base_url').

    Attributes:
        temperature: Default sampling temperature.
        max_tokens: Default cap on completion tokens.
        client: The underlying 'AsyncOpenAI' client. Created once and shared by
            all requests.
    """

    def __init__(
        self,
        model_name: str = "gpt-4o",
        temperature: float = 0.7,
        max_tokens: int = 4000,
        openai_api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 60.0,
        client: Any = None,
    ) -> None:
        super().__init__(model_name)
        self.temperature = temperature
        self.max_tokens = max_tokens
        if client is None:
            client_kwargs: dict[str, Any] = {"api_key": openai_api_key, "timeout": timeout}
            if base_url:
                client_kwargs["base_url"] = base_url
            client = AsyncOpenAI(**client_kwargs)
        self.client = client

    async def generate(
        self,
        conversation: list[LLMMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMCompletion:
        model = model or self.model_name
        response = await self.client.chat.completions.create(
            model=model,
            messages=[{"role": message.role.value, "content": message.content} for message in conversation],
            temperature=self.temperature if temperature is None else temperature,
            max_tokens=self.max_tokens if max_tokens is None else max_tokens,
        )
        content = response.choices[0].message.content or ""
        token_count = response.usage.total_tokens if response.usage else None
        logger.debug(f"OpenAI completion: model={model} tokens={token_count}")
        return LLMCompletion(content=content, role=Roles.ASSISTANT, model=model, token_count=token_count)
