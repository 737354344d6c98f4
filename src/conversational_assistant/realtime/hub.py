"""
Realtime hub.

'RealtimeHub' keeps a registry of live connections and which conversation each
one is watching. A connection starts with no user and no conversation; its
first 'typing' frame sets both, and later ones may move it to another
conversation.

Delivery is fire-and-forget: broadcasts are scheduled as background sends that
the caller never waits on. Sends to a connection that is no longer open are
skipped silently, and a send that fails or exceeds 'send_timeout' drops the
client from the registry; a watcher that misses a frame reconciles by
refetching. The registry is only ever mutated by the hub itself.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger

from conversational_assistant.errors import MalformedFrame
from conversational_assistant.realtime.frames import (
    ConnectionData,
    ConnectionFrame,
    ErrorData,
    ErrorFrame,
    MessageFrame,
    TypingFrame,
    parse_inbound_frame,
)
from conversational_assistant.utils.database import generate_uid

CONNECTION_GREETING = "Connected to Learning VI"
MALFORMED_FRAME_MESSAGE = "Invalid message format"


class Connection(Protocol):
    """The transport side of a realtime client, e.g. a websocket."""

    @property
    def is_open(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...


@dataclass
class RealtimeClient:
    client_id: str
    connection: Connection
    user_id: str | None = None
    conversation_id: str | None = None


class RealtimeHub:
    """
    Registry of live realtime clients and the conversations they watch.

    Attributes:
        greeting: Message carried by the 'connection' frame sent on register.
        send_timeout: Seconds a single send may take before the client is
            treated as dead and dropped.
    """

    def __init__(self, greeting: str = CONNECTION_GREETING, send_timeout: float = 10.0) -> None:
        self.greeting = greeting
        self.send_timeout = send_timeout
        self.clients: dict[str, RealtimeClient] = {}
        self._deliveries: set[asyncio.Task[None]] = set()

    async def register(self, connection: Connection) -> str | None:
        """Register a connection and send it the confirmation frame.

        Returns the new client id, or None when the confirmation could not be
        delivered and the client was dropped again.
        """
        client_id = generate_uid()
        self.clients[client_id] = RealtimeClient(client_id=client_id, connection=connection)
        logger.info(f"Realtime client {client_id} connected")
        await self.send_to_client(
            client_id, ConnectionFrame(data=ConnectionData(client_id=client_id, message=self.greeting))
        )
        if client_id not in self.clients:
            return None
        return client_id

    def unregister(self, client_id: str) -> None:
        if self.clients.pop(client_id, None) is not None:
            logger.info(f"Realtime client {client_id} disconnected")

    def watchers(self, conversation_id: str) -> list[RealtimeClient]:
        return [client for client in self.clients.values() if client.conversation_id == conversation_id]

    async def handle_frame(self, client_id: str, raw: str | bytes) -> None:
        client = self.clients.get(client_id)
        if client is None:
            return

        try:
            frame = parse_inbound_frame(raw)
        except MalformedFrame as exc:
            logger.warning(f"Malformed frame from realtime client {client_id}: {exc}")
            await self.send_to_client(client_id, ErrorFrame(data=ErrorData(message=MALFORMED_FRAME_MESSAGE)))
            return

        match frame:
            case TypingFrame():
                client.user_id = frame.user_id
                client.conversation_id = frame.conversation_id
                self._broadcast(
                    frame.conversation_id,
                    TypingFrame(user_id=frame.user_id, conversation_id=frame.conversation_id, data=frame.data),
                    exclude_client_id=client_id,
                )
            case _:
                logger.debug(f"Unhandled realtime frame type {frame.type!r} from client {client_id}")

    async def broadcast_message(self, conversation_id: str, payload: Any) -> None:
        """Queue a 'message' frame for every watcher of the conversation, the sender included.

        Returns once the sends are scheduled; it never waits for delivery.
        """
        self._broadcast(conversation_id, MessageFrame(conversation_id=conversation_id, data=payload))

    async def send_to_client(self, client_id: str, frame: ConnectionFrame | TypingFrame | MessageFrame | ErrorFrame) -> None:
        client = self.clients.get(client_id)
        if client is not None:
            await self._send(client, frame.to_wire())

    async def flush(self) -> None:
        """Wait until every scheduled delivery has completed, failed or timed out."""
        while self._deliveries:
            await asyncio.gather(*self._deliveries)

    def _broadcast(
        self,
        conversation_id: str,
        frame: TypingFrame | MessageFrame,
        exclude_client_id: str | None = None,
    ) -> None:
        text = frame.to_wire()
        for client in self.watchers(conversation_id):
            if client.client_id != exclude_client_id:
                delivery = asyncio.create_task(self._send(client, text))
                self._deliveries.add(delivery)
                delivery.add_done_callback(self._deliveries.discard)

    async def _send(self, client: RealtimeClient, text: str) -> None:
        if not client.connection.is_open:
            return
        try:
            async with asyncio.timeout(self.send_timeout):
                await client.connection.send_text(text)
        except TimeoutError:
            logger.warning(f"Send to realtime client {client.client_id} timed out after {self.send_timeout}s, dropping it")
            self.unregister(client.client_id)
        except Exception as exc:
            logger.warning(f"Send to realtime client {client.client_id} failed, dropping it: {exc}")
            self.unregister(client.client_id)
