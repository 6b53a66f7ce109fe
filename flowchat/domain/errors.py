"""
Error hierarchy for the conversation engine.

Control-flow signals (prompt, terminate, restart) are not errors and live in
``flowchat.domain.models.signals``.
"""


class FlowChatError(Exception):
    """Base class for all flowchat errors"""


class FlowContractError(FlowChatError):
    """A flow, builder or middleware broke the engine contract"""


class ConfigurationError(FlowChatError, ValueError):
    """Invalid pipeline or engine configuration"""


class PaginationConfigError(ConfigurationError):
    """Pagination cannot run with the configured sizes"""


class SessionStoreError(FlowChatError):
    """The session backend failed"""


class SessionSerializationError(SessionStoreError, TypeError):
    """A value cannot be stored in a session"""


class FlowNotFoundError(FlowChatError, KeyError):
    """No flow registered under the requested name"""
