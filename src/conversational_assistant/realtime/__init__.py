from conversational_assistant.realtime.frames import (
    ConnectionFrame,
    ErrorFrame,
    MessageFrame,
    OutboundFrame,
    TypingFrame,
    parse_inbound_frame,
)
from conversational_assistant.realtime.hub import Connection, RealtimeClient, RealtimeHub

__all__ = [
    "Connection",
    "ConnectionFrame",
    "ErrorFrame",
    "MessageFrame",
    "OutboundFrame",
    "RealtimeClient",
    "RealtimeHub",
    "TypingFrame",
    "parse_inbound_frame",
]
