from typing import List

from .app import BaseApp


class Flow:
    """Base class for conversation flows.

    Each public method is an entry action. An action is replayed from the
    top on every turn and must end every path in ``app.say`` or in a screen
    that is still waiting for input.
    """

    def __init__(self, app: BaseApp):
        self.app = app

    @classmethod
    def actions(cls) -> List[str]:
        """Public methods that can be used as entry actions"""
        return [
            name for name in dir(cls)
            if not name.startswith("_") and name != "actions" and callable(getattr(cls, name))
        ]
