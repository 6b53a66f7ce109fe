from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from flowchat.domain.flow.renderer import InteractiveMessage
from flowchat.domain.models.conversation import Location, Media, ResponseKind


class TurnRequest(BaseModel):
    """Provider-neutral inbound turn"""
    session_id: str = Field(..., min_length=1, description="Conversation id shared by every turn of one session")
    msisdn: Optional[str] = Field(None, description="Caller phone number")
    input: Optional[str] = Field(None, description="Raw user input, absent on the turn that opens a session")
    message_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    contact_name: Optional[str] = None
    location: Optional[Location] = None
    media: Optional[Media] = None


class UssdReply(BaseModel):
    """USSD answer; continue_session is False once the conversation is over"""
    session_id: str
    msisdn: Optional[str] = None
    message: str = ""
    continue_session: bool = True


class ChatReply(BaseModel):
    """Rich chat answer"""
    session_id: str
    kind: ResponseKind
    message: InteractiveMessage
