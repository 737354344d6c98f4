from conversational_assistant.completion.gateway import (
    FALLBACK_TITLE,
    Completion,
    CompletionGateway,
    FirstExchange,
    HistoryEntry,
)

__all__ = ["FALLBACK_TITLE", "Completion", "CompletionGateway", "FirstExchange", "HistoryEntry"]
