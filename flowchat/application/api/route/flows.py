"""
Turn endpoints for the USSD and chat transports
"""
from typing import Any, Dict
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, Request
import structlog

from flowchat.domain.errors import FlowChatError, FlowNotFoundError
from flowchat.application.gateway.schema.turns import TurnRequest, UssdReply, ChatReply
from flowchat.application.processor import Processor

logger = structlog.get_logger(__name__)
router = APIRouter(tags=["flows"])


def _run_turn(request: Request, processor: Processor, flow_name: str, turn: TurnRequest) -> Any:
    try:
        flow_class, action = request.app.state.registry.get(flow_name)
    except FlowNotFoundError:
        logger.warning("Unknown flow requested", flow_name=flow_name)
        raise HTTPException(status_code=404, detail=f"Unknown flow '{flow_name}'")

    try:
        return processor.run(flow_class, action, turn)
    except FlowChatError as e:
        # Already logged by the executor or the failing stage
        raise HTTPException(status_code=500, detail=f"Turn failed: {type(e).__name__}")


@router.post("/ussd/{flow_name}", response_model=UssdReply)
def ussd_turn(flow_name: str, turn: TurnRequest, request: Request):
    """Process one USSD turn"""
    return _run_turn(request, request.app.state.ussd_processor, flow_name, turn)


@router.post("/chat/{flow_name}", response_model=ChatReply)
def chat_turn(flow_name: str, turn: TurnRequest, request: Request):
    """Process one chat turn"""
    return _run_turn(request, request.app.state.chat_processor, flow_name, turn)


@router.get("/health")
def health_check(request: Request) -> Dict[str, Any]:
    state = request.app.state
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": state.settings.service_name,
        "flows": state.registry.names(),
        "sessions": state.cache.get_stats(),
    }
