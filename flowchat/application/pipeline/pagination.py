from typing import Optional
import structlog

from flowchat.domain.flow.context import ConversationContext
from flowchat.domain.flow.renderer import TextRenderer
from flowchat.domain.models.conversation import FlowResponse, PaginationState, ResponseKind
from flowchat.domain.pagination.paginator import Paginator
from flowchat.domain.session.keys import PAGINATION_KEY
from flowchat.infrastructure.config.settings import PaginationSettings
from .middleware import Middleware, Handler

logger = structlog.get_logger(__name__)


class PaginationMiddleware(Middleware):
    """Keeps every outgoing message within the page budget.

    Navigation inputs are answered from the stored pagination state without
    running the flow. Any other input runs the flow and, when the rendered
    response is too long, serves its first page.
    """

    name = "pagination"

    def __init__(
        self,
        app: Handler,
        settings: Optional[PaginationSettings] = None,
        preserve_rich_responses: bool = False
    ):
        super().__init__(app)
        self.settings = settings or PaginationSettings()
        self.preserve_rich_responses = preserve_rich_responses

    def dispatch(self, context: ConversationContext, call_next: Handler) -> FlowResponse:
        # Built per turn so misconfiguration fails where pagination runs
        paginator = Paginator.from_settings(self.settings)
        session = context.session

        stored = session.get(PAGINATION_KEY)
        if stored is not None and paginator.is_navigation(context.input):
            state = PaginationState.deserialize(stored)
            if context.input == paginator.next_option:
                state = paginator.next(state)
            else:
                state = paginator.back(state)

            logger.info("Serving page", session_id=context.session_id, page=state.page)
            return self._serve(context, paginator, state)

        if stored is not None:
            logger.debug("Clearing pagination state", session_id=context.session_id)
            session.delete(PAGINATION_KEY)

        response = call_next(context)
        full_text = TextRenderer(response.message, response.choices, response.media).render().rstrip()

        if paginator.fits(full_text):
            if self.preserve_rich_responses:
                return response
            return FlowResponse(kind=response.kind, message=full_text)

        logger.info(
            "Content exceeds page size, paginating",
            session_id=context.session_id,
            length=len(full_text),
            page_size=paginator.page_size
        )
        state = paginator.start(full_text, response.kind)
        return self._serve(context, paginator, state)

    def _serve(self, context: ConversationContext, paginator: Paginator, state: PaginationState) -> FlowResponse:
        kind, text = paginator.render(state)

        if kind == ResponseKind.TERMINAL:
            # Last page of a final message: the conversation is over
            context.session.destroy()
        else:
            context.session.set(PAGINATION_KEY, state)

        return FlowResponse(kind=kind, message=text)
