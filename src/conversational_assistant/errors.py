"""
Error taxonomy for the messaging pipeline.

Every failure the pipeline or the realtime hub reports is an 'AssistantError'
subclass carrying an 'ErrorKind'. Callers branch on the kind rather than on the
message text:

    try:
        result = await pipeline.submit(...)
    except AssistantError as error:
        match error.kind:
            case ErrorKind.GENERATION_FAILED:
                ...

'NotFound' is used for both missing conversations and owner mismatches so the
existence of another user's conversation is never revealed.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    GENERATION_FAILED = "generation_failed"
    MALFORMED_FRAME = "malformed_frame"


class AssistantError(Exception):
    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(AssistantError):
    kind = ErrorKind.NOT_FOUND


class ValidationFailed(AssistantError):
    kind = ErrorKind.VALIDATION_FAILED


class GenerationFailed(AssistantError):
    """The completion provider errored, timed out, or returned no content."""

    kind = ErrorKind.GENERATION_FAILED


class MalformedFrame(AssistantError):
    kind = ErrorKind.MALFORMED_FRAME
