from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import structlog

from .serialization import to_storable

logger = structlog.get_logger(__name__)


class BaseSessionStore(ABC):
    """Key/value session for one session id.

    Backends only provide three primitives working on the whole session
    document (load, save, remove); the key level operations are shared so
    every backend has the same get/set/delete semantics. Documents cross a
    JSON round trip on every write, so anything stored must be JSON
    serializable or implement the ``serialize``/``deserialize`` contract.

    A single session id is assumed to have at most one turn in flight.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id

    @abstractmethod
    def _load(self) -> Optional[Dict[str, Any]]:
        """Return the session document or None if the session does not exist"""

    @abstractmethod
    def _save(self, data: Dict[str, Any]) -> None:
        """Persist the whole session document"""

    @abstractmethod
    def _remove(self) -> None:
        """Remove the session document"""

    def get(self, key: str) -> Optional[Any]:
        """Get a value, None when missing"""

        data = self._load()
        if data is None:
            return None

        value = data.get(str(key))
        logger.debug("Session get", session_id=self.session_id, key=str(key), hit=value is not None)
        return value

    def set(self, key: str, value: Any) -> Any:
        """Store a value and return it unchanged"""

        data = self._load() or {}
        data[str(key)] = to_storable(value)
        self._save(data)

        logger.debug("Session set", session_id=self.session_id, key=str(key))
        return value

    def delete(self, key: str) -> None:
        """Delete a single key"""

        data = self._load()
        if data is None or str(key) not in data:
            return

        data.pop(str(key))
        self._save(data)
        logger.debug("Session key deleted", session_id=self.session_id, key=str(key))

    def clear(self) -> None:
        """Drop every key but keep the session alive"""

        if self.exists():
            self._save({})

    def destroy(self) -> None:
        """Remove the session entirely"""

        self._remove()
        logger.debug("Session destroyed", session_id=self.session_id)

    def exists(self) -> bool:
        return self._load() is not None

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot of the stored data"""
        return dict(self._load() or {})
