"""Settings for enum value help."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]


class Settings(BaseSettings):
    """Configuration, overridable through ENUM_VALUE_HELP_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENUM_VALUE_HELP_",
        case_sensitive=False,
        extra="ignore",
    )

    value_list_entity: str = Field(
        default="EnumValueHelpView",
        min_length=1,
        description="Name of the generated value-list entity and its service projections",
    )
    log_level: LogLevel = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(default="console", description="Log output format")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings."""
    return Settings()
