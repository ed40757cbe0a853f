"""
Environment-driven configuration for logship using Pydantic v2 Settings.

Every field can be set through ``LOGSHIP_<GROUP>__<FIELD>`` environment
variables, e.g. ``LOGSHIP_IDENTITY__API_KEY`` or
``LOGSHIP_CORE__FLUSH_INTERVAL_SECONDS``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..transports.http import INGEST_BASE_URL
from .config import ClientConfig, parse_client_config
from .engine import DEFAULT_FLUSH_INTERVAL
from .errors import ConfigurationError


class IdentitySettings(BaseModel):
    """Who is shipping: the ingest key plus the static per-record tags."""

    api_key: str | None = Field(default=None, description="Ingestion key")
    hostname: str | None = Field(
        default=None, description="Source hostname; defaults to the machine name"
    )
    env: str = Field(default="default", description="Environment tag")
    app: str = Field(default="logship", description="Application tag")


class CoreSettings(BaseModel):
    """Flush engine and runtime behavior."""

    flush_interval_seconds: float = Field(
        default=DEFAULT_FLUSH_INTERVAL,
        gt=0.0,
        description="Seconds between timer-driven flushes",
    )
    requeue_limit: int = Field(
        default=0,
        ge=0,
        description=(
            "Records of a failed batch to put back in the buffer; 0 drops the batch"
        ),
    )
    internal_logging_enabled: bool = Field(
        default=False, description="Emit JSON diagnostics for internal errors"
    )
    enable_metrics: bool = Field(
        default=False, description="Enable Prometheus-compatible metrics"
    )
    atexit_drain_enabled: bool = Field(
        default=True, description="Flush registered clients at interpreter exit"
    )
    atexit_drain_timeout_seconds: float = Field(
        default=2.0, gt=0.0, description="Upper bound for the exit-time drain"
    )
    signal_handler_enabled: bool = Field(
        default=True, description="Drain registered clients on SIGINT/SIGTERM"
    )


class HttpSettings(BaseModel):
    """Ingest endpoint and HTTP client behavior."""

    ingest_url: str = Field(default=INGEST_BASE_URL)
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    retries: int = Field(default=3, ge=0, description="Connection retries")
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("ingest_url")
    @classmethod
    def _ensure_ingest_url_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ingest_url must not be empty")
        return value


class Settings(BaseSettings):
    """Top-level configuration model with grouped settings."""

    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    core: CoreSettings = Field(default_factory=CoreSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    model_config = SettingsConfigDict(
        env_prefix="LOGSHIP_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_client_config(self) -> ClientConfig:
        """Build the immutable client identity.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if not self.identity.api_key:
            raise ConfigurationError(
                "No ingest API key configured (set LOGSHIP_IDENTITY__API_KEY)",
                fields=["api_key"],
            )
        data = self.identity.model_dump(exclude_none=True)
        return parse_client_config(data)


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (HttpSettings._ensure_ingest_url_non_empty,)
