from .settings import ConfigRegistry, FlowChatSettings, PaginationSettings, SessionTTLSettings

__all__ = ["ConfigRegistry", "FlowChatSettings", "PaginationSettings", "SessionTTLSettings"]
