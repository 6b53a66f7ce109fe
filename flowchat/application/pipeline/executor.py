from typing import Optional
import structlog

from flowchat.domain.errors import FlowContractError
from flowchat.domain.flow.context import ConversationContext
from flowchat.domain.models.conversation import FlowResponse
from flowchat.domain.models.signals import PromptSignal, RestartFlowSignal, TerminateSignal

logger = structlog.get_logger(__name__)


class FlowExecutor:
    """Innermost stage: replays the flow action and turns signals into responses"""

    def __init__(self, max_restarts: int = 25):
        self.max_restarts = max_restarts

    def __call__(self, context: ConversationContext) -> FlowResponse:
        flow_name = context.flow_name
        action = context.action
        restarts = 0

        logger.info("Executing flow", flow=flow_name, action=action, session_id=context.session_id)

        try:
            while True:
                try:
                    self._replay(context)
                except RestartFlowSignal:
                    restarts += 1
                    if restarts > self.max_restarts:
                        raise FlowContractError(
                            f"{flow_name}.{action} restarted more than {self.max_restarts} times in one turn"
                        )
                    logger.info("Flow restart requested", flow=flow_name, action=action, restarts=restarts)
                except PromptSignal as signal:
                    logger.info(
                        "Flow prompted user",
                        flow=flow_name,
                        session_id=context.session_id,
                        prompt=(signal.message or "")[:100],
                        choices=len(signal.choices or {}),
                        has_media=signal.media is not None
                    )
                    return signal.to_response()
                except TerminateSignal as signal:
                    logger.info(
                        "Flow terminated",
                        flow=flow_name,
                        session_id=context.session_id,
                        message=(signal.message or "")[:100]
                    )
                    context.session.destroy()
                    return signal.to_response()
        except Exception as e:
            logger.error(
                "Flow execution failed",
                flow=flow_name,
                action=action,
                session_id=context.session_id,
                error=str(e),
                error_type=type(e).__name__
            )
            raise

    def _replay(self, context: ConversationContext) -> None:
        """Run the action once from the top; only returns by raising"""

        if context.flow_class is None or not context.action:
            raise FlowContractError("no flow or action requested")
        if context.app_class is None:
            raise FlowContractError("the transport adapter did not select a flow app")

        app = context.app_class(context)
        flow = context.flow_class(app)

        method: Optional[object] = getattr(flow, context.action, None)
        if context.action.startswith("_") or not callable(method):
            raise FlowContractError(f"{context.flow_name} has no action '{context.action}'")

        method()

        logger.warning("Flow returned without interacting with the user", flow=context.flow_name, action=context.action)
        raise FlowContractError(
            f"{context.flow_name}.{context.action} returned without prompting or ending the conversation"
        )
