from typing import Dict, List, Tuple, Type
import structlog

from flowchat.domain.errors import FlowContractError, FlowNotFoundError
from flowchat.domain.flow.flow import Flow

logger = structlog.get_logger(__name__)


class FlowRegistry:
    """Maps public flow names to a Flow class and its entry action"""

    def __init__(self):
        self._flows: Dict[str, Tuple[Type[Flow], str]] = {}

    def register(self, name: str, flow_class: Type[Flow], action: str = "main") -> None:
        if action not in flow_class.actions():
            raise FlowContractError(f"{flow_class.__name__} has no action '{action}'")

        self._flows[name] = (flow_class, action)
        logger.info("Flow registered", name=name, flow=flow_class.__name__, action=action)

    def get(self, name: str) -> Tuple[Type[Flow], str]:
        try:
            return self._flows[name]
        except KeyError:
            raise FlowNotFoundError(name) from None

    def names(self) -> List[str]:
        return list(self._flows.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._flows

    def __len__(self) -> int:
        return len(self._flows)
