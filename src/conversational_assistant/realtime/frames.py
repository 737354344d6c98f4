"""
Realtime wire frames.

Every frame is a JSON object with a 'type' discriminator. Field names are
camelCase on the wire ('conversationId', 'userId', 'clientId') and snake_case
in Python. 'typing' and 'message' payloads ('data') are opaque to the hub.

    connection  server -> client  confirmation sent once after registration
    typing      both ways         typing indicator, re-broadcast to watchers
    message     server -> client  new user/assistant message pair
    error       server -> client  the client sent something unparseable
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from conversational_assistant.errors import MalformedFrame


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ConnectionData(_WireModel):
    client_id: str
    message: str


class ErrorData(_WireModel):
    message: str


class ConnectionFrame(_WireModel):
    type: Literal["connection"] = "connection"
    data: ConnectionData


class TypingFrame(_WireModel):
    type: Literal["typing"] = "typing"
    user_id: str = Field(min_length=1)
    conversation_id: str = Field(min_length=1)
    data: Any = None


class MessageFrame(_WireModel):
    type: Literal["message"] = "message"
    conversation_id: str
    data: Any = None


class ErrorFrame(_WireModel):
    type: Literal["error"] = "error"
    data: ErrorData


OutboundFrame = Annotated[
    Union[ConnectionFrame, TypingFrame, MessageFrame, ErrorFrame],
    Field(discriminator="type"),
]

_frame_adapter: TypeAdapter[ConnectionFrame | TypingFrame | MessageFrame | ErrorFrame] = TypeAdapter(OutboundFrame)


def parse_inbound_frame(raw: str | bytes) -> ConnectionFrame | TypingFrame | MessageFrame | ErrorFrame:
    """Validate a raw client frame, raising 'MalformedFrame' when it is not one of the known kinds."""
    try:
        return _frame_adapter.validate_json(raw)
    except ValidationError as exc:
        raise MalformedFrame(f"Invalid realtime frame: {exc.error_count()} validation error(s)") from exc
