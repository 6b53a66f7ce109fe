from typing import Any, Dict, Optional, Protocol, runtime_checkable
import json

from flowchat.domain.errors import SessionSerializationError


@runtime_checkable
class SessionSerializable(Protocol):
    """Values that know how to turn themselves into JSON-ready data"""

    def serialize(self) -> Any:
        ...

    @classmethod
    def deserialize(cls, data: Any) -> Any:
        ...


def to_storable(value: Any) -> Any:
    """Convert a value into the plain structure that will be persisted"""

    if isinstance(value, SessionSerializable):
        return value.serialize()
    return value


def dumps(data: Dict[str, Any]) -> str:
    """Encode a whole session document"""

    try:
        return json.dumps(data, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SessionSerializationError(f"Session data is not JSON serializable: {e}") from e


def loads(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode a session document, None when absent"""

    if raw is None:
        return None
    return json.loads(raw)
