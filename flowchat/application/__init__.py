from .processor import Processor, UssdProcessor, ChatProcessor
from .registry import FlowRegistry

__all__ = ["Processor", "UssdProcessor", "ChatProcessor", "FlowRegistry"]
