from .gateway import BaseGateway, UssdGateway, ChatGateway
from .schema import TurnRequest, UssdReply, ChatReply

__all__ = [
    "BaseGateway",
    "ChatGateway",
    "ChatReply",
    "TurnRequest",
    "UssdGateway",
    "UssdReply",
]
