"""
Transport adapters.

The gateway is the outermost stage. It turns the inbound request into the
turn's context, picks the flow app for its transport and converts the final
response into the transport's reply.
"""
from typing import Any, Optional, Type
import structlog

from flowchat.domain.errors import FlowContractError
from flowchat.domain.flow.app import BaseApp, UssdApp, ChatApp
from flowchat.domain.flow.context import ConversationContext
from flowchat.domain.flow.renderer import InteractiveRenderer
from flowchat.domain.models.conversation import FlowResponse, PlatformMetadata, ResponseKind
from flowchat.application.pipeline.middleware import Middleware, Handler
from flowchat.infrastructure.observability.logging import bind_turn_context
from .schema.turns import TurnRequest, UssdReply, ChatReply

logger = structlog.get_logger(__name__)


class BaseGateway(Middleware):
    """Common request decoding for provider-neutral turns"""

    name = "gateway"
    gateway_name = "unknown"
    app_class: Type[BaseApp] = BaseApp

    def dispatch(self, context: ConversationContext, call_next: Handler) -> Any:
        request = self.parse_request(context.request)

        context.session_id = request.session_id
        context.input = self.normalize_input(request.input)
        context.metadata = self.build_metadata(request)
        context.app_class = self.app_class
        bind_turn_context(session_id=request.session_id, gateway=self.gateway_name)

        logger.info(
            "Turn received",
            gateway=self.gateway_name,
            session_id=request.session_id,
            has_input=context.input is not None
        )

        response = call_next(context)
        return self.build_reply(context, response)

    def parse_request(self, request: Any) -> TurnRequest:
        if isinstance(request, TurnRequest):
            return request
        if isinstance(request, dict):
            return TurnRequest.model_validate(request)
        raise FlowContractError(f"{type(self).__name__} cannot read a {type(request).__name__} request")

    def normalize_input(self, raw: Optional[str]) -> Optional[str]:
        return raw

    def build_metadata(self, request: TurnRequest) -> PlatformMetadata:
        return PlatformMetadata(
            gateway=self.gateway_name,
            msisdn=request.msisdn,
            message_id=request.message_id,
            timestamp=request.timestamp
        )

    def build_reply(self, context: ConversationContext, response: FlowResponse) -> Any:
        return response


class UssdGateway(BaseGateway):
    """Text-only USSD sessions"""

    gateway_name = "ussd"
    app_class = UssdApp

    def normalize_input(self, raw: Optional[str]) -> Optional[str]:
        # Dialing the service code arrives as empty input
        if raw is None or not raw.strip():
            return None
        return raw.strip()

    def build_reply(self, context: ConversationContext, response: FlowResponse) -> UssdReply:
        return UssdReply(
            session_id=context.session_id,
            msisdn=context.metadata.msisdn,
            message=response.message or "",
            continue_session=response.kind == ResponseKind.PROMPT
        )


class ChatGateway(BaseGateway):
    """Rich chat sessions with contact, location and media metadata"""

    gateway_name = "chat"
    app_class = ChatApp

    def normalize_input(self, raw: Optional[str]) -> Optional[str]:
        if raw is None:
            return None
        return raw.strip()

    def build_metadata(self, request: TurnRequest) -> PlatformMetadata:
        return PlatformMetadata(
            gateway=self.gateway_name,
            msisdn=request.msisdn,
            message_id=request.message_id,
            timestamp=request.timestamp,
            contact_name=request.contact_name,
            location=request.location,
            media=request.media
        )

    def build_reply(self, context: ConversationContext, response: FlowResponse) -> ChatReply:
        message = InteractiveRenderer(response.message, response.choices, response.media).render()
        return ChatReply(session_id=context.session_id, kind=response.kind, message=message)
