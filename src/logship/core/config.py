"""
Client identity configuration.

``ClientConfig`` is frozen: once a client is constructed its identity never
changes, and every record it produces copies ``app`` and ``env`` from it.
"""

from __future__ import annotations

import socket
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError


def _default_hostname() -> str:
    try:
        return socket.gethostname() or "localhost"
    except Exception:
        return "localhost"


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    api_key: str = Field(description="Ingestion key; sent as the basic-auth user")
    hostname: str = Field(default_factory=_default_hostname)
    env: str = Field(default="default")
    app: str = Field(default="logship")

    @field_validator("api_key")
    @classmethod
    def _ensure_api_key(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("api_key must not be empty")
        return value

    @field_validator("hostname")
    @classmethod
    def _ensure_hostname(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("hostname must not be empty")
        return value


def parse_client_config(
    config: ClientConfig | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> ClientConfig:
    """Coerce ``config`` (or keyword arguments) into a ``ClientConfig``.

    Raises:
        ConfigurationError: If the identity is missing or invalid.
    """
    if isinstance(config, ClientConfig) and not kwargs:
        return config
    data: dict[str, Any] = {}
    if isinstance(config, ClientConfig):
        data.update(config.model_dump())
    elif config is not None:
        data.update(config)
    data.update(kwargs)
    try:
        return ClientConfig(**data)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ConfigurationError(
            "Invalid client configuration", cause=e, fields=fields
        ) from e


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (
    ClientConfig._ensure_api_key,
    ClientConfig._ensure_hostname,
)
