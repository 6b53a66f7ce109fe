from typing import Dict, Any, Optional, Type
import structlog

from flowchat.domain.models.conversation import PlatformMetadata

logger = structlog.get_logger(__name__)


class ConversationContext:
    """Per-turn state shared by every pipeline stage.

    Transport adapters fill ``session_id``, ``input`` and ``metadata``; the
    session stage attaches ``session``; the processor records the flow and
    action to run. Anything else a middleware wants to hand down goes into
    the extras bag via item access.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        input: Optional[str] = None,
        metadata: Optional[PlatformMetadata] = None,
        settings=None
    ):
        self.session_id = session_id
        self._input = input
        self.metadata = metadata or PlatformMetadata()
        self.settings = settings
        self.session = None
        self.flow_class: Optional[Type] = None
        self.action: Optional[str] = None
        self.app_class: Optional[Type] = None
        self.request: Any = None
        self._extras: Dict[str, Any] = {}

    def __getitem__(self, key: str) -> Any:
        return self._extras.get(key)

    def __setitem__(self, key: str, value: Any):
        logger.debug("Context extra set", key=key)
        self._extras[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._extras

    @property
    def input(self) -> Optional[str]:
        return self._input

    @input.setter
    def input(self, value: Optional[str]):
        logger.debug("Context input set", session_id=self.session_id, has_input=value is not None)
        self._input = value

    @property
    def flow_name(self) -> Optional[str]:
        return self.flow_class.__name__ if self.flow_class else None

    def __repr__(self) -> str:
        return f"<ConversationContext session_id={self.session_id!r} flow={self.flow_name!r} action={self.action!r}>"
