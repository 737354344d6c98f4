from fastapi import Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from conversational_assistant.errors import AssistantError, ErrorKind


def status_for(error: AssistantError) -> int:
    match error.kind:
        case ErrorKind.NOT_FOUND:
            return status.HTTP_404_NOT_FOUND
        case ErrorKind.VALIDATION_FAILED | ErrorKind.MALFORMED_FRAME:
            return status.HTTP_400_BAD_REQUEST
        case ErrorKind.GENERATION_FAILED:
            return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_assistant_error(request: Request, exc: AssistantError) -> JSONResponse:
    if exc.kind is ErrorKind.GENERATION_FAILED:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_for(exc), content={"message": exc.message, "kind": exc.kind.value})
