from typing import Any, Callable, Optional
import structlog

from flowchat.domain.errors import ConfigurationError, FlowContractError
from flowchat.domain.flow.context import ConversationContext
from flowchat.infrastructure.observability.logging import bind_turn_context
from .middleware import Middleware, Handler

logger = structlog.get_logger(__name__)


class SessionMiddleware(Middleware):
    """Attaches the session for the turn's session id"""

    name = "session"

    def __init__(self, app: Handler, session_store: Optional[Callable[[ConversationContext], Any]] = None):
        super().__init__(app)
        self.session_store = session_store

    def dispatch(self, context: ConversationContext, call_next: Handler) -> Any:
        if not context.session_id:
            raise FlowContractError("the transport adapter did not provide a session id")
        if self.session_store is None:
            raise ConfigurationError("no session store configured, call use_session_store() first")

        context.session = self.session_store(context)
        bind_turn_context(session_id=context.session_id)

        logger.debug("Session loaded", session_id=context.session_id, exists=context.session.exists())
        return call_next(context)
