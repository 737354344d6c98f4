from fastapi import APIRouter, Depends, Request, Response, WebSocket, status
from loguru import logger

from conversational_assistant.api.auth.base import AuthProvider
from conversational_assistant.controller import (
    ClientConversation,
    ConversationController,
    ConversationInput,
    ConversationUpdate,
    MessageInput,
)
from conversational_assistant.conversation_database.data_models.conversation import Conversation
from conversational_assistant.conversation_database.data_models.message import Message
from conversational_assistant.pipeline.pipeline import SubmissionResult
from conversational_assistant.realtime.hub import RealtimeHub
from conversational_assistant.realtime.websocket import WebSocketConnection
from conversational_assistant.routing.router import RoutingTableEntry


def get_controller(request: Request) -> ConversationController:
    return request.app.state.controller


def build_api_router(auth_provider: AuthProvider) -> APIRouter:
    router = APIRouter()
    current_user = Depends(auth_provider.get_current_user_id)
    controller_dependency = Depends(get_controller)

    @router.get("/conversations", response_model=list[Conversation])
    async def list_conversations(
        user_id: str = current_user, controller: ConversationController = controller_dependency
    ) -> list[Conversation]:
        return await controller.get_conversations(user_id)

    @router.post("/conversations", response_model=Conversation, status_code=status.HTTP_201_CREATED)
    async def create_conversation(
        user_input: ConversationInput | None = None,
        user_id: str = current_user,
        controller: ConversationController = controller_dependency,
    ) -> Conversation:
        return await controller.create_conversation(user_input or ConversationInput(), user_id)

    @router.get("/conversations/{conversation_id}", response_model=ClientConversation)
    async def get_conversation(
        conversation_id: str, user_id: str = current_user, controller: ConversationController = controller_dependency
    ) -> ClientConversation:
        return await controller.get_conversation(conversation_id, user_id)

    @router.patch("/conversations/{conversation_id}", response_model=Conversation)
    async def update_conversation(
        conversation_id: str,
        updates: ConversationUpdate,
        user_id: str = current_user,
        controller: ConversationController = controller_dependency,
    ) -> Conversation:
        return await controller.update_conversation(conversation_id, updates, user_id)

    @router.delete("/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_conversation(
        conversation_id: str, user_id: str = current_user, controller: ConversationController = controller_dependency
    ) -> Response:
        await controller.delete_conversation(conversation_id, user_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/conversations/{conversation_id}/messages", response_model=list[Message])
    async def list_messages(
        conversation_id: str, user_id: str = current_user, controller: ConversationController = controller_dependency
    ) -> list[Message]:
        return await controller.get_messages(conversation_id, user_id)

    @router.post("/conversations/{conversation_id}/messages", response_model=SubmissionResult)
    async def submit_message(
        conversation_id: str,
        user_input: MessageInput,
        user_id: str = current_user,
        controller: ConversationController = controller_dependency,
    ) -> SubmissionResult:
        return await controller.submit_message(conversation_id, user_input, user_id)

    @router.get("/models/routing", response_model=list[RoutingTableEntry])
    async def routing_table(controller: ConversationController = controller_dependency) -> list[RoutingTableEntry]:
        return controller.get_routing_table()

    return router


realtime_router = APIRouter()


@realtime_router.websocket("/ws")
async def realtime_endpoint(websocket: WebSocket) -> None:
    hub: RealtimeHub = websocket.app.state.hub
    await websocket.accept()
    client_id = await hub.register(WebSocketConnection(websocket))
    if client_id is None:
        logger.warning("Realtime connection dropped before it could be confirmed")
        return
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(f"Realtime client {client_id} closed the connection")
                break
            await hub.handle_frame(client_id, message.get("text") or message.get("bytes") or "")
    finally:
        hub.unregister(client_id)
