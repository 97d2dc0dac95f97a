"""Configuration using Pydantic Settings"""

import logging
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .events.catalog import EVENTS, EventDescriptor, TriggerType, get_descriptor
from .events.filters import FilterCriteria
from .events.patterns import PatternSpec, PatternType

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Setup problem that prevents the trigger from starting"""


class TriggerConfig(BaseModel):
    """One trigger: which event, which gates, which pattern, which filters"""

    model_config = ConfigDict(frozen=True)

    trigger_type: TriggerType = TriggerType.MESSAGE
    event: str = "message_create"
    include_bot: bool = False
    direct_message: bool = False
    pattern: PatternType = PatternType.BOT_MENTION
    value: str = ""
    case_sensitive: bool = False

    # Comma-separated ids or names
    server_ids: str = ""
    channel_ids: str = ""
    role_ids: str = ""
    user_ids: str = ""
    event_ids: str = ""

    @field_validator("event")
    @classmethod
    def normalize_event(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("event must not be empty")
        return v

    @model_validator(mode="after")
    def check_consistency(self) -> "TriggerConfig":
        descriptor = EVENTS.get(self.event)
        if descriptor is None:
            logger.warning(
                f"Event '{self.event}' is not catalogued, records will be raw pass-through"
            )
        elif descriptor.trigger_type != self.trigger_type:
            raise ValueError(
                f"Event '{self.event}' belongs to trigger type "
                f"'{descriptor.trigger_type.value}', not '{self.trigger_type.value}'"
            )

        if self.descriptor.content_matched and self.pattern.needs_value and not self.value:
            raise ValueError(f"Pattern '{self.pattern.value}' requires a value")
        return self

    @property
    def descriptor(self) -> EventDescriptor:
        return get_descriptor(self.event)

    @property
    def criteria(self) -> FilterCriteria:
        return FilterCriteria.from_tokens(
            servers=self.server_ids,
            channels=self.channel_ids,
            roles=self.role_ids,
            users=self.user_ids,
            entities=self.event_ids,
        )

    @property
    def pattern_spec(self) -> PatternSpec:
        return PatternSpec(
            strategy=self.pattern, value=self.value, case_sensitive=self.case_sensitive
        )


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Discord credentials
    discord_bot_token: str = Field(..., description="Discord bot token")
    discord_application_id: str = Field(default="", description="Discord application ID")
    discord_api_url: str = Field(
        default="https://discord.com/api/v10", description="Discord REST API base URL"
    )

    # Trigger
    trigger_type: TriggerType = Field(default=TriggerType.MESSAGE, description="Trigger type")
    trigger_event: str = Field(default="message_create", description="Event to listen for")
    trigger_include_bot: bool = Field(default=False, description="Accept messages from bots")
    trigger_direct_message: bool = Field(
        default=False, description="Accept direct messages instead of guild messages"
    )
    trigger_pattern: PatternType = Field(
        default=PatternType.BOT_MENTION, description="Message pattern strategy"
    )
    trigger_value: str = Field(default="", description="Pattern value")
    trigger_case_sensitive: bool = Field(default=False, description="Case-sensitive matching")
    trigger_server_ids: str = Field(default="", description="Server ids or names")
    trigger_channel_ids: str = Field(default="", description="Channel ids or names")
    trigger_role_ids: str = Field(default="", description="Role ids or names")
    trigger_user_ids: str = Field(default="", description="User ids or names")
    trigger_event_ids: str = Field(default="", description="Scheduled event ids or names")

    # Output
    sink_url: str = Field(default="", description="Webhook receiving normalized records")
    sink_secret: str = Field(default="", description="Sent as X-Trigger-Secret")

    # Health server
    health_enabled: bool = Field(default=True, description="Run the HTTP health server")
    health_host: str = Field(default="0.0.0.0", description="Health server host")
    port: int = Field(default=8080, description="Health server port")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("discord_bot_token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        v = v.lstrip()
        if v[:4].lower() == "bot ":
            v = v[4:]
        v = v.strip()
        if not v:
            raise ValueError("DISCORD_BOT_TOKEN is empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def trigger(self) -> TriggerConfig:
        """Trigger configuration; raises pydantic.ValidationError when inconsistent"""
        return TriggerConfig(
            trigger_type=self.trigger_type,
            event=self.trigger_event,
            include_bot=self.trigger_include_bot,
            direct_message=self.trigger_direct_message,
            pattern=self.trigger_pattern,
            value=self.trigger_value,
            case_sensitive=self.trigger_case_sensitive,
            server_ids=self.trigger_server_ids,
            channel_ids=self.trigger_channel_ids,
            role_ids=self.trigger_role_ids,
            user_ids=self.trigger_user_ids,
            event_ids=self.trigger_event_ids,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()  # type: ignore[call-arg]
