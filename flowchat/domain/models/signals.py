"""
Control-flow signals that abort the current replay of a flow action.

Signals derive from ``BaseException`` so a flow's own ``except Exception``
blocks cannot swallow them. They only ever travel from the flow up to the
executor within a single turn and are never persisted.
"""
from typing import Dict, Optional

from .conversation import FlowResponse, Media, ResponseKind


class FlowSignal(BaseException):
    """Base class for replay-aborting signals"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message)
        self.message = message


class PromptSignal(FlowSignal):
    """More input is needed; ask the user and end the turn"""

    def __init__(
        self,
        message: str,
        choices: Optional[Dict[str, str]] = None,
        media: Optional[Media] = None
    ):
        super().__init__(message)
        self.choices = choices
        self.media = media

    def to_response(self) -> FlowResponse:
        return FlowResponse(
            kind=ResponseKind.PROMPT,
            message=self.message,
            choices=self.choices,
            media=self.media
        )


class TerminateSignal(FlowSignal):
    """The conversation is over"""

    def __init__(self, message: str, media: Optional[Media] = None):
        super().__init__(message)
        self.media = media

    def to_response(self) -> FlowResponse:
        return FlowResponse(
            kind=ResponseKind.TERMINAL,
            message=self.message,
            media=self.media
        )


class RestartFlowSignal(FlowSignal):
    """Replay the same action again within the current turn"""

    def __init__(self):
        super().__init__("restart_flow")
