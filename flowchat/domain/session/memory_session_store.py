from typing import Dict, Any, Optional, Callable

from .session_store import BaseSessionStore
from . import serialization


class InMemorySessionStore(BaseSessionStore):
    """Session kept in a plain dict shared between turns"""

    def __init__(self, session_id: str, backend: Optional[Dict[str, str]] = None):
        super().__init__(session_id)
        self.backend: Dict[str, str] = backend if backend is not None else {}

    def _load(self) -> Optional[Dict[str, Any]]:
        return serialization.loads(self.backend.get(self.session_id))

    def _save(self, data: Dict[str, Any]) -> None:
        self.backend[self.session_id] = serialization.dumps(data)

    def _remove(self) -> None:
        self.backend.pop(self.session_id, None)

    @classmethod
    def factory(cls, backend: Optional[Dict[str, str]] = None) -> Callable[..., "InMemorySessionStore"]:
        """Build a store factory whose sessions share one backend dict"""

        shared = backend if backend is not None else {}

        def build(context) -> "InMemorySessionStore":
            return cls(context.session_id, shared)

        build.backend = shared
        return build
