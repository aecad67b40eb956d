"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class SourceCheckConfig(BaseModel):
    """Probe settings for video source validation.

    All values configurable via YAML (source_check section) or ENV vars.
    """

    timeout_seconds: float = Field(
        default=15.0,
        description="Deadline per network step (HEAD, range GET, body read).",
    )
    range_bytes: int = Field(
        default=2048,
        description="Size of the requested byte range (Range: bytes=0-N).",
    )
    max_probe_bytes: int = Field(
        default=8192,
        description="Max bytes read from the range body before disconnecting.",
    )
    signature_window: int = Field(
        default=64,
        description="Leading bytes searched for the MP4 ftyp marker.",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel validations in a batch.",
    )
    max_batch_size: int = Field(
        default=50,
        description="Max URLs accepted by one batch request.",
    )

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be > 0")
        return v

    @field_validator("range_bytes", "max_probe_bytes", "max_concurrent", "max_batch_size")
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be > 0")
        return v

    @field_validator("signature_window")
    @classmethod
    def _validate_window(cls, v: int) -> int:
        if v < 4:
            raise ValueError("signature_window must be >= 4")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/source_check).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="sourcecheck", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP client (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="Default timeout of the shared HTTP client.",
    )
    http_user_agent: str = Field(
        default="sourcecheck/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing probe requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Source validation (YAML section: source_check.*)
    source_check: SourceCheckConfig = Field(default_factory=SourceCheckConfig)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "source_check": self.source_check.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read SOURCECHECK_* variables, converts
    them to a dict of set values and merges it over YAML/defaults before
    validating AppConfig.

    Supported env var examples (flat, explicit):
    - SOURCECHECK_LOG_LEVEL
    - SOURCECHECK_HTTP_USER_AGENT
    - SOURCECHECK_SOURCE_CHECK_TIMEOUT_SECONDS
    - SOURCECHECK_SOURCE_CHECK_MAX_CONCURRENT
    """

    model_config = SettingsConfigDict(
        env_prefix="SOURCECHECK_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    source_check_timeout_seconds: Optional[float] = None
    source_check_range_bytes: Optional[int] = None
    source_check_max_probe_bytes: Optional[int] = None
    source_check_signature_window: Optional[int] = None
    source_check_max_concurrent: Optional[int] = None
    source_check_max_batch_size: Optional[int] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
