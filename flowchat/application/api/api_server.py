from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog
import uvicorn

from flowchat.domain.session.cache_session_store import CacheSessionStore, SessionCache
from flowchat.infrastructure.config.settings import ConfigRegistry
from flowchat.infrastructure.observability.logging import setup_logging_from_settings
from flowchat.application.processor import Processor, UssdProcessor, ChatProcessor
from flowchat.application.registry import FlowRegistry
from .route.flows import router

logger = structlog.get_logger(__name__)


def _build_processor(
    processor_class: type,
    config_registry: ConfigRegistry,
    config_name: str,
    cache: SessionCache
) -> Processor:
    processor = processor_class(config_registry, config_name)
    ttl = processor.settings.session_ttl
    processor.use_session_store(CacheSessionStore.factory(cache, ttl.for_gateway))
    return processor


def create_app(
    registry: FlowRegistry,
    config_registry: Optional[ConfigRegistry] = None,
    cache: Optional[SessionCache] = None,
    configure_logging: bool = False
) -> FastAPI:
    """HTTP surface for the registered flows.

    Settings named "ussd" and "chat" in the config registry apply to their
    transport; both fall back to the default entry.
    """
    config_registry = config_registry or ConfigRegistry()
    cache = cache or SessionCache()
    settings = config_registry.get()

    if configure_logging:
        setup_logging_from_settings(settings)

    app = FastAPI(title="FlowChat Conversation Server")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.registry = registry
    app.state.cache = cache
    app.state.ussd_processor = _build_processor(UssdProcessor, config_registry, "ussd", cache)
    app.state.chat_processor = _build_processor(ChatProcessor, config_registry, "chat", cache)

    app.include_router(router)

    logger.info("Conversation server created", flows=registry.names(), service=settings.service_name)
    return app


def serve(
    registry: FlowRegistry,
    config_registry: Optional[ConfigRegistry] = None,
    host: str = "0.0.0.0",
    port: int = 8000
) -> None:
    """Run the conversation server with uvicorn"""
    app = create_app(registry, config_registry, configure_logging=True)
    uvicorn.run(app, host=host, port=port)
