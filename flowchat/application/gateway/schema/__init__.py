from .turns import TurnRequest, UssdReply, ChatReply

__all__ = ["TurnRequest", "UssdReply", "ChatReply"]
