"""
Processors assemble the turn pipeline:

    gateway -> session -> pagination -> middleware (user stages) -> executor

Callers add their own stages with ``use_middleware`` (inside the user
stack) or with ``insert_before`` / ``insert_after`` around any named stage.
The gateway stays outermost and the executor innermost; the gateway,
session and pagination stages keep that relative order. Inserting before
``executor`` appends to the user stack.
"""
from typing import Any, Callable, Optional, Type, Union
import structlog

from flowchat.domain.errors import ConfigurationError
from flowchat.domain.flow.context import ConversationContext
from flowchat.domain.flow.flow import Flow
from flowchat.infrastructure.config.settings import ConfigRegistry, FlowChatSettings
from flowchat.infrastructure.observability.logging import bind_turn_context, clear_turn_context
from flowchat.application.gateway.gateway import BaseGateway, UssdGateway, ChatGateway
from flowchat.application.pipeline.middleware import MiddlewareStack
from flowchat.application.pipeline.session import SessionMiddleware
from flowchat.application.pipeline.pagination import PaginationMiddleware
from flowchat.application.pipeline.executor import FlowExecutor

logger = structlog.get_logger(__name__)

CORE_STAGES = ("gateway", "session", "pagination")
EXECUTOR_STAGE = "executor"


class Processor:
    """Runs one turn of a flow through the middleware pipeline"""

    gateway_class: Type[BaseGateway] = BaseGateway
    preserve_rich_responses = False

    def __init__(
        self,
        settings: Optional[Union[FlowChatSettings, ConfigRegistry]] = None,
        config_name: Optional[str] = None
    ):
        if isinstance(settings, ConfigRegistry):
            settings = settings.get(config_name)
        self.settings: FlowChatSettings = settings or FlowChatSettings()

        self.session_store: Optional[Callable[[ConversationContext], Any]] = None
        self.middleware = MiddlewareStack("middleware")
        self.stack = MiddlewareStack("pipeline")
        self.stack.use("gateway", self.gateway_class)
        self.stack.use("session", SessionMiddleware)
        self.stack.use(
            "pagination",
            PaginationMiddleware,
            settings=self.settings.pagination,
            preserve_rich_responses=self.preserve_rich_responses
        )
        self.stack.use("middleware", self.middleware)

    def use_gateway(self, gateway_class: Type[BaseGateway]) -> "Processor":
        self.stack.replace("gateway", gateway_class)
        return self

    def use_session_store(self, factory: Callable[[ConversationContext], Any]) -> "Processor":
        """Set the factory that opens the session store for a turn's context"""
        self.session_store = factory
        return self

    def use_middleware(self, name: str, middleware: Any, **options) -> "Processor":
        """Append a user stage; user stages run just before the executor"""
        self.middleware.use(name, middleware, **options)
        return self

    def insert_before(self, target: str, name: str, middleware: Any, **options) -> "Processor":
        """Place a stage right before ``target``; ``executor`` is a valid target"""
        if target == "gateway":
            raise ConfigurationError("the gateway is the outermost stage, nothing can run before it")
        if target == EXECUTOR_STAGE:
            self.middleware.use(name, middleware, **options)
            return self
        self._stack_for(target).insert_before(target, name, middleware, **options)
        return self

    def insert_after(self, target: str, name: str, middleware: Any, **options) -> "Processor":
        if target == EXECUTOR_STAGE:
            raise ConfigurationError("the executor is the innermost stage, nothing can run after it")
        self._stack_for(target).insert_after(target, name, middleware, **options)
        return self

    def run(self, flow_class: Type[Flow], action: str, request: Any) -> Any:
        """Process one inbound turn and return the gateway's reply"""

        self._check_layout()
        self.stack.configure("session", session_store=self.session_store)

        context = ConversationContext(settings=self.settings)
        context.flow_class = flow_class
        context.action = action
        context.request = request

        bind_turn_context(flow=flow_class.__name__, action=action)
        logger.debug("Running turn", processor=type(self).__name__, stages=self.stack.names + self.middleware.names)
        try:
            handler = self.stack.build(FlowExecutor(max_restarts=self.settings.max_flow_restarts))
            return handler(context)
        finally:
            clear_turn_context()

    def _stack_for(self, target: str) -> MiddlewareStack:
        if target in self.stack:
            return self.stack
        if target in self.middleware:
            return self.middleware
        raise ConfigurationError(f"no stage named '{target}'")

    def _check_layout(self):
        names = self.stack.names
        missing = [stage for stage in CORE_STAGES if stage not in names]
        if missing:
            raise ConfigurationError(f"pipeline is missing core stages: {', '.join(missing)}")
        if names[0] != "gateway":
            raise ConfigurationError("the gateway must be the outermost stage")

        positions = [names.index(stage) for stage in CORE_STAGES]
        if positions != sorted(positions):
            raise ConfigurationError(f"core stages must run in order: {' -> '.join(CORE_STAGES)}")


class UssdProcessor(Processor):
    gateway_class = UssdGateway


class ChatProcessor(Processor):
    # Replies that fit keep their buttons and media
    gateway_class = ChatGateway
    preserve_rich_responses = True
