from .conversation import (
    FlowResponse,
    Location,
    Media,
    MediaType,
    PageOffset,
    PaginationState,
    PlatformMetadata,
    ResponseKind,
)
from .signals import FlowSignal, PromptSignal, RestartFlowSignal, TerminateSignal

__all__ = [
    "FlowResponse",
    "FlowSignal",
    "Location",
    "Media",
    "MediaType",
    "PageOffset",
    "PaginationState",
    "PlatformMetadata",
    "PromptSignal",
    "ResponseKind",
    "RestartFlowSignal",
    "TerminateSignal",
]
