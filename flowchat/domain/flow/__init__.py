from .context import ConversationContext
from .app import BaseApp, UssdApp, ChatApp
from .flow import Flow
from .prompt import BasePrompt, TextPrompt, InteractivePrompt
from .renderer import TextRenderer, InteractiveRenderer, InteractiveMessage

__all__ = [
    "BaseApp",
    "BasePrompt",
    "ChatApp",
    "ConversationContext",
    "Flow",
    "InteractiveMessage",
    "InteractivePrompt",
    "InteractiveRenderer",
    "TextPrompt",
    "TextRenderer",
    "UssdApp",
]
