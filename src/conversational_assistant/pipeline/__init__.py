from conversational_assistant.pipeline.locks import ConversationLocks
from conversational_assistant.pipeline.pipeline import (
    MessagingPipeline,
    Notifier,
    PipelineRun,
    PipelineState,
    SubmissionResult,
)

__all__ = [
    "ConversationLocks",
    "MessagingPipeline",
    "Notifier",
    "PipelineRun",
    "PipelineState",
    "SubmissionResult",
]
