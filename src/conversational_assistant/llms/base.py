"""
Core LLM abstractions and message data models.

Every completion backend implements the 'LLM' ABC. The shared message format
('LLMMessage') is backend-agnostic so the completion gateway never needs to know
which provider serves a request beyond the model identifier string.

'LLMCompletion' extends 'LLMMessage' with the model that produced the reply and
the provider-reported token usage, which the pipeline stores on assistant
messages.
"""

from abc import ABC, abstractmethod
from enum import StrEnum

from pydantic import BaseModel


class Roles(StrEnum):
    """Conversation roles as used by the OpenAI chat completions API."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class LLMMessage(BaseModel):
    """A single message in a conversation sent to or received from an LLM."""

    content: str = ""
    role: Roles = Roles.ASSISTANT


class LLMCompletion(LLMMessage):
    """
    A complete assistant reply.

    'token_count' is the total usage reported by the provider (prompt plus
    completion) and is None when the provider does not report usage.
    """

    model: str
    token_count: int | None = None


class LLM(ABC):
    """
    Abstract base class for language model backends.

    Concrete implementations adapt a specific API client to a common interface.
    'model_name' is the default model; callers may override it per request,
    together with the sampling parameters.
    """

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name

    @abstractmethod
    async def generate(
        self,
        conversation: list[LLMMessage],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMCompletion:
        """Return a single complete response for the given conversation."""
        pass
