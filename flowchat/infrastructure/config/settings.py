"""
Configuration management using Pydantic Settings
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flowchat.domain.errors import ConfigurationError


class PaginationSettings(BaseModel):
    """Navigation options and page budget for text transports"""
    # Positivity is checked by the paginator when it runs
    page_size: int = Field(default=140, description="Maximum characters per page, navigation included")
    next_option: str = Field(default="#", description="Input that shows the next page")
    next_text: str = Field(default="More", description="Label shown next to the next option")
    back_option: str = Field(default="0", description="Input that shows the previous page")
    back_text: str = Field(default="Back", description="Label shown next to the back option")

    @field_validator("next_option", "back_option")
    @classmethod
    def strip_option(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("navigation options cannot be blank")
        return v


class SessionTTLSettings(BaseModel):
    """Session lifetime per gateway, in seconds"""
    ussd: int = Field(default=3600, ge=1)
    chat: int = Field(default=7 * 24 * 3600, ge=1)
    default: int = Field(default=24 * 3600, ge=1)

    def for_gateway(self, gateway: Optional[str]) -> int:
        if gateway == "ussd":
            return self.ussd
        if gateway == "chat":
            return self.chat
        return self.default


class FlowChatSettings(BaseSettings):
    """Engine settings"""

    service_name: str = Field(default="flowchat", description="Service name attached to log entries")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: 'json' or 'console'")

    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    session_ttl: SessionTTLSettings = Field(default_factory=SessionTTLSettings)

    combine_validation_error_with_message: bool = Field(
        default=True,
        description="Repeat the question under a validation error"
    )
    max_flow_restarts: int = Field(
        default=25,
        ge=1,
        description="Maximum go_back restarts within one turn"
    )

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    model_config = SettingsConfigDict(
        env_prefix="FLOWCHAT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


class ConfigRegistry:
    """Named settings handed explicitly to processors and the HTTP app"""

    DEFAULT = "default"

    def __init__(self, default: Optional[FlowChatSettings] = None):
        self._configs: Dict[str, FlowChatSettings] = {}
        self.register(self.DEFAULT, default or FlowChatSettings())

    def register(self, name: str, settings: FlowChatSettings) -> FlowChatSettings:
        if not isinstance(settings, FlowChatSettings):
            raise ConfigurationError(f"config '{name}' must be a FlowChatSettings instance")
        self._configs[name] = settings
        return settings

    def get(self, name: Optional[str] = None) -> FlowChatSettings:
        """Named settings, falling back to the default entry"""
        return self._configs.get(name or self.DEFAULT, self._configs[self.DEFAULT])

    def names(self) -> List[str]:
        return list(self._configs.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._configs
