from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from enum import Enum


class ResponseKind(str, Enum):
    """What the transport should do after sending a response"""
    PROMPT = "prompt"
    TERMINAL = "terminal"


class MediaType(str, Enum):
    """Supported media attachment types"""
    IMAGE = "image"
    DOCUMENT = "document"
    AUDIO = "audio"
    VIDEO = "video"
    STICKER = "sticker"


class Media(BaseModel):
    """Media attached to a prompt or final message"""
    type: MediaType = Field(default=MediaType.IMAGE)
    url: Optional[str] = Field(None, description="Public URL of the media")
    path: Optional[str] = Field(None, description="Local path of the media")
    filename: Optional[str] = Field(None, description="Filename shown for documents")

    @model_validator(mode="after")
    def require_location(self):
        if not self.url and not self.path:
            raise ValueError("media requires a url or a path")
        return self

    @property
    def source(self) -> str:
        return self.url or self.path


class Location(BaseModel):
    """Location shared by the user"""
    latitude: float
    longitude: float
    name: Optional[str] = None
    address: Optional[str] = None


class PlatformMetadata(BaseModel):
    """Read-only request metadata populated by the transport adapter"""
    gateway: str = Field(default="unknown", description="Transport that received the turn")
    msisdn: Optional[str] = Field(None, description="Caller phone number")
    message_id: Optional[str] = None
    timestamp: Optional[datetime] = None
    contact_name: Optional[str] = None
    location: Optional[Location] = None
    media: Optional[Media] = None

    model_config = {"frozen": True}


class FlowResponse(BaseModel):
    """Outcome of one turn as produced by the executor and pagination stages"""
    kind: ResponseKind
    message: Optional[str] = None
    choices: Optional[Dict[str, str]] = Field(None, description="Choice key to label, in display order")
    media: Optional[Media] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind == ResponseKind.TERMINAL

    def as_tuple(self):
        """(kind, message, choices, media) view used by transports"""
        return self.kind, self.message, self.choices, self.media


class PageOffset(BaseModel):
    """Character range [start, finish) of one page"""
    start: int = Field(ge=0)
    finish: int = Field(ge=0)


class PaginationState(BaseModel):
    """Pagination progress persisted between navigation turns"""
    page: int = Field(default=1, ge=1)
    offsets: Dict[int, PageOffset] = Field(default_factory=dict)
    full_text: str
    kind: ResponseKind

    def current_offset(self) -> PageOffset:
        return self.offsets[self.page]

    def is_final_page(self) -> bool:
        return self.current_offset().finish >= len(self.full_text)

    def serialize(self) -> Dict[str, Any]:
        """JSON document stored in the session"""
        return self.model_dump(mode="json")

    @classmethod
    def deserialize(cls, data: Dict[str, Any]) -> "PaginationState":
        return cls.model_validate(data)
