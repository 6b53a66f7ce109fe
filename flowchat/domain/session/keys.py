# Session keys owned by the engine. Screen keys may not start with "$".
RESERVED_PREFIX = "$"

PAGINATION_KEY = "$pagination$"
STARTED_AT_KEY = "$started_at$"


def is_reserved(key) -> bool:
    return str(key).startswith(RESERVED_PREFIX)
