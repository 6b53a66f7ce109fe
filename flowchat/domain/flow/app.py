"""
Flow apps: the object a flow talks to while it is replayed.

Every turn replays the requested flow action from the top. ``screen`` makes
that cheap: answered screens come straight from the session, and the first
unanswered one either consumes the turn's input or raises a prompt signal
that unwinds the whole replay. Flow code after a screen therefore only runs
once that screen has an answer, and must not assume it runs to completion.
"""
from typing import Any, Callable, List, Optional, Type
from datetime import datetime, timezone
import structlog

from flowchat.domain.errors import FlowContractError
from flowchat.domain.models.conversation import Media, Location
from flowchat.domain.models.signals import RestartFlowSignal, TerminateSignal
from flowchat.domain.session.keys import STARTED_AT_KEY, is_reserved
from .context import ConversationContext
from .prompt import BasePrompt, TextPrompt, InteractivePrompt

logger = structlog.get_logger(__name__)

ScreenBuilder = Callable[[BasePrompt], Any]


class BaseApp:
    """Replay primitives shared by every transport"""

    prompt_class: Type[BasePrompt] = TextPrompt

    def __init__(self, context: ConversationContext):
        self.context = context
        self.session = context.session
        self.navigation_stack: List[Any] = []

    @property
    def input(self) -> Optional[str]:
        return self.context.input

    def screen(self, key: Any, builder: Optional[ScreenBuilder] = None) -> Any:
        """Return the memoized answer for ``key`` or run ``builder`` to get one"""

        if builder is None or not callable(builder):
            raise FlowContractError(f"screen '{key}' needs a builder")
        if is_reserved(key):
            raise FlowContractError(f"screen key '{key}' is reserved")
        if key in self.navigation_stack:
            raise FlowContractError(f"screen '{key}' has already been presented")

        self.navigation_stack.append(key)

        cached = self.session.get(key)
        if cached is not None:
            logger.debug("Screen replayed from session", session_id=self.context.session_id, screen=str(key))
            return cached

        prompt = self.build_prompt(self.prepare_user_input())
        # Input is single use: it belongs to this screen from now on
        self.context.input = None

        value = builder(prompt)
        if value is None:
            raise FlowContractError(f"screen '{key}' builder returned None")

        self.session.set(key, value)
        logger.debug("Screen answered", session_id=self.context.session_id, screen=str(key))
        return self.session.get(key)

    def say(self, message: str, media: Optional[Media] = None):
        """End the conversation with a final message"""
        raise TerminateSignal(message, media=media)

    def go_back(self) -> bool:
        """Forget the most recent screen and replay the action again.

        Returns False when no screen has been touched in this replay.
        """
        if not self.navigation_stack:
            return False

        current_screen = self.navigation_stack[-1]
        self.session.delete(current_screen)
        # The input that asked to go back must not answer the rewound screen
        self.context.input = None
        logger.info("Going back", session_id=self.context.session_id, screen=str(current_screen))
        raise RestartFlowSignal()

    def build_prompt(self, user_input: Optional[str]) -> BasePrompt:
        settings = self.context.settings
        combine = settings.combine_validation_error_with_message if settings is not None else True
        return self.prompt_class(user_input, combine_validation_error=combine)

    def prepare_user_input(self) -> Optional[str]:
        return self.input

    @property
    def phone_number(self) -> Optional[str]:
        return self.context.metadata.msisdn

    @property
    def message_id(self) -> Optional[str]:
        return self.context.metadata.message_id

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.context.metadata.timestamp

    @property
    def contact_name(self) -> Optional[str]:
        return None

    @property
    def location(self) -> Optional[Location]:
        return None

    @property
    def media(self) -> Optional[Media]:
        return None


class UssdApp(BaseApp):
    """Text-only app; USSD carries no contact, location or media"""

    prompt_class = TextPrompt


class ChatApp(BaseApp):
    """Rich chat app with buttons, lists and inbound media"""

    prompt_class = InteractivePrompt

    @property
    def contact_name(self) -> Optional[str]:
        return self.context.metadata.contact_name

    @property
    def location(self) -> Optional[Location]:
        return self.context.metadata.location

    @property
    def media(self) -> Optional[Media]:
        return self.context.metadata.media

    def prepare_user_input(self) -> Optional[str]:
        # The message that opens a chat starts the flow, it does not answer a screen
        if self.session.get(STARTED_AT_KEY) is None:
            self.session.set(STARTED_AT_KEY, datetime.now(timezone.utc).isoformat())
            return None
        return self.input
