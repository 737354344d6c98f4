"""
Messaging pipeline.

'MessagingPipeline.submit' turns one inbound user message into a stored
user/assistant message pair. Each run moves through

    RECEIVED -> USER_PERSISTED -> ROUTED -> GENERATING -> ASSISTANT_PERSISTED
             -> TITLE_MAYBE_UPDATED -> NOTIFIED -> DONE

with FAILED reachable from every non-terminal state. Validation and ownership
are checked before anything is written. Once the run holds the conversation's
serialization slot the user message is persisted unconditionally, so a failed
generation leaves the user's input in the log and no assistant message behind;
a retry re-reads that unchanged history.

Runs for the same conversation are serialized in arrival order: the slot is
taken before the user message is written and released once the new pair has
been handed to the notifier, so every run's history contains the previous
run's assistant reply. The notifier only schedules delivery; a slow watcher
never holds the slot.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

from loguru import logger
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from conversational_assistant.completion.gateway import CompletionGateway, FirstExchange, HistoryEntry
from conversational_assistant.conversation_database.data_models.conversation import Conversation
from conversational_assistant.conversation_database.data_models.message import Message
from conversational_assistant.conversation_database.store import ConversationStore
from conversational_assistant.errors import NotFound, ValidationFailed
from conversational_assistant.llms.base import Roles
from conversational_assistant.pipeline.locks import ConversationLocks
from conversational_assistant.routing.router import PrefixRouter


class PipelineState(StrEnum):
    RECEIVED = "received"
    USER_PERSISTED = "user_persisted"
    ROUTED = "routed"
    GENERATING = "generating"
    ASSISTANT_PERSISTED = "assistant_persisted"
    TITLE_MAYBE_UPDATED = "title_maybe_updated"
    NOTIFIED = "notified"
    DONE = "done"
    FAILED = "failed"


class SubmissionResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_message: Message
    assistant_message: Message

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Notifier(Protocol):
    """Schedules fan-out of a new message pair and returns without waiting for delivery."""

    async def broadcast_message(self, conversation_id: str, payload: Any) -> None: ...


@dataclass
class PipelineRun:
    conversation_id: str
    states: list[PipelineState] = field(default_factory=lambda: [PipelineState.RECEIVED])

    @property
    def state(self) -> PipelineState:
        return self.states[-1]

    def advance(self, state: PipelineState) -> None:
        self.states.append(state)
        logger.debug(f"Conversation {self.conversation_id}: {state}")


class MessagingPipeline:
    """
    Orchestrates router, store, completion gateway and notifier for single messages.

    Attributes:
        notifier: Receives the new message pair for fan-out to the
            conversation's watchers, usually the 'RealtimeHub'. None disables
            notification.
        locks: The per-conversation serialization slots.
    """

    def __init__(
        self,
        store: ConversationStore,
        router: PrefixRouter,
        gateway: CompletionGateway,
        notifier: Notifier | None = None,
        locks: ConversationLocks | None = None,
    ):
        self.store = store
        self.router = router
        self.gateway = gateway
        self.notifier = notifier
        self.locks = locks or ConversationLocks()

    async def submit(
        self, conversation_id: str, owner_id: str, content: Any, run: PipelineRun | None = None
    ) -> SubmissionResult:
        """Run one message through the pipeline.

        Pass a fresh 'PipelineRun' as 'run' to observe the state transitions.
        """
        run = run or PipelineRun(conversation_id)
        try:
            if not isinstance(content, str) or not content.strip():
                raise ValidationFailed("Message content is required")
            conversation = await self.store.get_conversation(conversation_id, owner_id)
            if conversation is None:
                raise NotFound(f"Conversation {conversation_id} not found")

            async with self.locks.hold(conversation_id):
                return await self._run(run, conversation, owner_id, content)
        except Exception:
            run.advance(PipelineState.FAILED)
            raise

    async def _run(self, run: PipelineRun, conversation: Conversation, owner_id: str, content: str) -> SubmissionResult:
        user_message = await self.store.append_message(conversation.id, Roles.USER, content)
        run.advance(PipelineState.USER_PERSISTED)

        decision = self.router.route(content)
        run.advance(PipelineState.ROUTED)

        messages = await self.store.list_messages(conversation.id)
        history = [
            HistoryEntry(role=message.role, content=message.content)
            for message in messages
            if message.id != user_message.id
        ]
        run.advance(PipelineState.GENERATING)
        completion = await self.gateway.complete(decision.system_prompt, history, decision.cleaned_message, decision.model)

        assistant_message = await self.store.append_message(
            conversation.id,
            Roles.ASSISTANT,
            completion.content,
            model=completion.model,
            token_count=completion.token_count,
        )
        run.advance(PipelineState.ASSISTANT_PERSISTED)

        if len(messages) == 1:
            await self._update_title(conversation, owner_id, user_message.content, completion.content)
            run.advance(PipelineState.TITLE_MAYBE_UPDATED)

        result = SubmissionResult(user_message=user_message, assistant_message=assistant_message)
        if self.notifier is not None:
            await self.notifier.broadcast_message(conversation.id, result.to_payload())
        run.advance(PipelineState.NOTIFIED)
        run.advance(PipelineState.DONE)
        return result

    async def _update_title(self, conversation: Conversation, owner_id: str, user_content: str, assistant_content: str) -> None:
        title = await self.gateway.summarize_title(
            FirstExchange(user_content=user_content, assistant_content=assistant_content)
        )
        try:
            updated = await self.store.update_conversation(conversation.id, owner_id, title=title)
        except Exception as exc:
            logger.warning(f"Could not store title for conversation {conversation.id}: {exc}")
            return
        if updated is None:
            logger.warning(f"Conversation {conversation.id} disappeared before its title was stored")
