"""
Application assembly.

'build_services' wires storage, routing, completion, realtime fan-out and the
messaging pipeline into one 'ConversationController'. 'create_app' mounts the
HTTP routes under '/api' and the realtime endpoint at '/ws'.

Storage backend:
    DATABASE_URL set   -> SQLAlchemy (tables are created on startup)
    DATABASE_URL unset -> in-memory, lost on restart
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from conversational_assistant.api.auth.base import AuthProvider
from conversational_assistant.api.auth.header import HeaderAuthProvider
from conversational_assistant.api.errors import handle_assistant_error
from conversational_assistant.api.routes import build_api_router, realtime_router
from conversational_assistant.completion.gateway import CompletionGateway
from conversational_assistant.config import Settings
from conversational_assistant.controller import ConversationController
from conversational_assistant.conversation_database.data_models.conversation import ConversationDatabase
from conversational_assistant.conversation_database.data_models.message import MessageDatabase
from conversational_assistant.conversation_database.in_memory import (
    InMemoryConversationDatabase,
    InMemoryMessageDatabase,
)
from conversational_assistant.conversation_database.sqlalchemy import (
    SQLAlchemyConversationDatabase,
    SQLAlchemyMessageDatabase,
    build_session_factory,
    init_models,
)
from conversational_assistant.conversation_database.store import ConversationStore
from conversational_assistant.errors import AssistantError
from conversational_assistant.llms.base import LLM
from conversational_assistant.llms.openai import OpenAILLM
from conversational_assistant.pipeline.pipeline import MessagingPipeline
from conversational_assistant.realtime.hub import RealtimeHub
from conversational_assistant.routing.router import PrefixRouter
from conversational_assistant.utils.logging import configure_logging


@dataclass
class Services:
    controller: ConversationController
    hub: RealtimeHub
    engine: AsyncEngine | None = None


def build_llm(settings: Settings) -> LLM:
    logger.info(f"LLM backend: OpenAI ({settings.default_model})")
    return OpenAILLM(
        model_name=settings.default_model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        openai_api_key=settings.require_openai_api_key(),
        base_url=settings.openai_base_url,
    )


def build_services(settings: Settings, llm: LLM | None = None) -> Services:
    engine: AsyncEngine | None = None
    conversation_db: ConversationDatabase
    message_db: MessageDatabase
    if settings.database_url:
        engine, session_factory = build_session_factory(settings.database_url)
        conversation_db = SQLAlchemyConversationDatabase(session_factory)
        message_db = SQLAlchemyMessageDatabase(session_factory)
        logger.info(f"Storage: SQLAlchemy ({engine.url.render_as_string(hide_password=True)})")
    else:
        conversation_db = InMemoryConversationDatabase()
        message_db = InMemoryMessageDatabase()
        logger.info("Storage: in-memory")

    store = ConversationStore(conversation_db, message_db, default_model=settings.default_model)
    router = PrefixRouter(default_model=settings.default_model)
    gateway = CompletionGateway(
        llm or build_llm(settings),
        history_window=settings.history_window,
        timeout=settings.generation_timeout,
        title_model=settings.title_model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    hub = RealtimeHub()
    pipeline = MessagingPipeline(store, router, gateway, notifier=hub)
    return Services(controller=ConversationController(store, pipeline, router), hub=hub, engine=engine)


def create_app(
    settings: Settings | None = None,
    services: Services | None = None,
    auth_provider: AuthProvider | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    services = services or build_services(settings)
    auth_provider = auth_provider or HeaderAuthProvider()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if services.engine is not None:
            await init_models(services.engine)
        yield
        await services.hub.flush()
        if services.engine is not None:
            await services.engine.dispose()

    app = FastAPI(title="Conversational Assistant", lifespan=lifespan)
    app.state.controller = services.controller
    app.state.hub = services.hub
    app.add_exception_handler(AssistantError, handle_assistant_error)  # type: ignore[arg-type]
    auth_provider.bind_to_app(app)
    app.include_router(build_api_router(auth_provider), prefix="/api")
    app.include_router(realtime_router)
    return app
