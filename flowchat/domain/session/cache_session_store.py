from typing import Dict, Any, Optional, Callable
from datetime import datetime, timedelta, timezone
import threading
import structlog

from .session_store import BaseSessionStore
from . import serialization

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionCache:
    """In-memory cache store with TTL support"""

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self.cache: Dict[str, Dict[str, Any]] = {}
        self.clock = clock
        self._lock = threading.Lock()

    def set(self, key: str, value: str, ttl: int = 3600) -> None:
        """Set a value in cache with TTL"""

        with self._lock:
            self.cache[key] = {
                "value": value,
                "expires_at": self.clock() + timedelta(seconds=ttl)
            }

    def get(self, key: str) -> Optional[str]:
        """Get value from cache if not expired"""

        with self._lock:
            entry = self.cache.get(key)
            if entry is None:
                return None

            if self.clock() > entry["expires_at"]:
                del self.cache[key]
                return None

            return entry["value"]

    def delete(self, key: str) -> bool:
        """Delete a key from cache"""

        with self._lock:
            return self.cache.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def clear_expired(self) -> int:
        """Clear expired entries and return count"""

        with self._lock:
            now = self.clock()
            expired_keys = [
                key for key, entry in self.cache.items()
                if now > entry["expires_at"]
            ]

            for key in expired_keys:
                del self.cache[key]

            return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""

        with self._lock:
            now = self.clock()
            active_count = sum(
                1 for entry in self.cache.values()
                if now <= entry["expires_at"]
            )

            return {
                "total_keys": len(self.cache),
                "active_keys": active_count,
                "expired_keys": len(self.cache) - active_count
            }


class CacheSessionStore(BaseSessionStore):
    """Session persisted in a TTL cache; every write refreshes the TTL"""

    KEY_PREFIX = "flowchat:session"

    def __init__(self, session_id: str, cache: SessionCache, gateway: str = "unknown", ttl: int = 86400):
        super().__init__(session_id)
        self.cache = cache
        self.gateway = gateway
        self.ttl = ttl

    @property
    def session_key(self) -> str:
        return f"{self.KEY_PREFIX}:{self.gateway}:{self.session_id}"

    def _load(self) -> Optional[Dict[str, Any]]:
        return serialization.loads(self.cache.get(self.session_key))

    def _save(self, data: Dict[str, Any]) -> None:
        self.cache.set(self.session_key, serialization.dumps(data), ttl=self.ttl)

    def _remove(self) -> None:
        self.cache.delete(self.session_key)

    @classmethod
    def factory(cls, cache: SessionCache, ttl_for: Callable[[str], int]):
        """Build a store factory; ``ttl_for`` maps a gateway name to a TTL in seconds"""

        def build(context) -> "CacheSessionStore":
            gateway = context.metadata.gateway
            ttl = ttl_for(gateway)
            logger.debug("Cache session store", session_id=context.session_id, gateway=gateway, ttl=ttl)
            return cls(context.session_id, cache, gateway=gateway, ttl=ttl)

        return build
