from .session_store import BaseSessionStore
from .memory_session_store import InMemorySessionStore
from .cache_session_store import CacheSessionStore, SessionCache

__all__ = ["BaseSessionStore", "InMemorySessionStore", "CacheSessionStore", "SessionCache"]
