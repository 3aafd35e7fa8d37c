# guid_sharder/config/settings.py

import os
from functools import lru_cache
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from guid_sharder.domain.models.shard import ShardRequest, decode_reservations

DEFAULT_CONFIG_FILE = "guid-sharder.yaml"
CONFIG_FILE_ENV = "JAMF_CONFIG_FILE"

_LOG_LEVEL_ALIASES = {
    "WARN": "WARNING",
    "FATAL": "CRITICAL",
}
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ShardSettings(BaseSettings):
    """
    Resolved configuration for one run.
    Precedence: keyword overrides (CLI flags) > JAMF_* environment > YAML file > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="JAMF_",
        case_sensitive=False,
        extra="ignore",
        coerce_numbers_to_str=True,
        yaml_file=DEFAULT_CONFIG_FILE,
        yaml_file_encoding="utf-8",
    )

    # --- Application ---
    app_name: str = "guid-sharder"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Jamf Pro authentication ---
    instance_domain: str = ""
    auth_method: str = "oauth2"
    client_id: str = ""
    client_secret: str = ""
    basic_auth_username: str = ""
    basic_auth_password: str = ""

    # --- HTTP client ---
    log_level: str = "WARNING"
    hide_sensitive_data: bool = True
    max_retry_attempts: int = Field(3, ge=0)
    custom_timeout_seconds: int = Field(60, ge=1)
    token_refresh_buffer_period_seconds: int = Field(300, ge=0)
    mandatory_request_delay_milliseconds: int = Field(0, ge=0)
    follow_redirects: bool = True
    max_redirects: int = Field(5, ge=0)

    # --- Sharding ---
    source_type: str = ""
    group_id: str = ""
    strategy: str = ""
    shard_count: int = 0
    shard_percentages: List[int] = Field(default_factory=list)
    shard_sizes: List[int] = Field(default_factory=list)
    seed: str = ""
    exclude_ids: List[str] = Field(default_factory=list)
    reserved_ids: Dict[str, List[str]] = Field(default_factory=dict)

    # --- Output ---
    output_format: str = "json"
    output_file: str = ""

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        """Accept debug/info/warn/error/fatal in any case; store the stdlib level name."""
        level = v.strip().upper()
        level = _LOG_LEVEL_ALIASES.get(level, level)
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level {v!r} is not valid: must be one of debug, info, warn, error, fatal")
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))

    def to_shard_request(self) -> ShardRequest:
        """Engine input. Reservation keys are decoded from shard_<N> to indices here."""
        return ShardRequest(
            strategy=self.strategy,
            shard_count=self.shard_count,
            percentages=tuple(self.shard_percentages),
            sizes=tuple(self.shard_sizes),
            seed=self.seed,
            exclude_ids=tuple(self.exclude_ids),
            reserved_ids=decode_reservations(self.reserved_ids),
        )

    def redacted(self) -> Dict[str, Any]:
        """Settings as a dict with credentials masked when hide_sensitive_data is on."""
        data = self.model_dump()
        if self.hide_sensitive_data:
            for key in ("client_secret", "basic_auth_password"):
                if data.get(key):
                    data[key] = "********"
        return data


def resolve_config_file(config_file: Optional[str] = None) -> str:
    """Explicit path, else JAMF_CONFIG_FILE, else ./guid-sharder.yaml."""
    return config_file or os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE


def load_settings(config_file: Optional[str] = None, **overrides: Any) -> ShardSettings:
    """
    Build settings reading YAML from config_file (a missing file is not an error).
    Overrides win over every other source; pass only values the user actually set.
    """
    path = resolve_config_file(config_file)

    class _FileBoundSettings(ShardSettings):
        model_config = SettingsConfigDict(yaml_file=path)

    return _FileBoundSettings(**overrides)


@lru_cache
def get_settings() -> ShardSettings:
    return load_settings()
