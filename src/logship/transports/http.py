"""
HTTP ingest transport using httpx.

POSTs serialized batches to a LogDNA-style ``/logs/ingest`` endpoint. The
ingest key travels as the basic-auth user name; ``hostname`` and ``now`` are
sent as query parameters. Connection failures are retried by the underlying
``httpx.HTTPTransport``; responses are never retried, so any non-2xx
response (5xx and 429 included) or remaining ``httpx`` error is
raised as ``TransportError``.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.config import ClientConfig, parse_client_config
from ..core.errors import ConfigurationError, TransportError

__all__ = [
    "INGEST_BASE_URL",
    "HttpIngestTransport",
    "HttpTransportConfig",
    "build_ingest_url",
]

INGEST_BASE_URL = "https://logs.logdna.com/logs/ingest"

_CONTENT_TYPE = "application/json; charset=UTF-8"
_BODY_SNIPPET_CHARS = 256


class HttpTransportConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    ingest_url: str = INGEST_BASE_URL
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    retries: int = Field(default=3, ge=0)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, value: Mapping[str, str] | None) -> dict[str, str]:
        if value is None:
            return {}
        return dict(value)

    @field_validator("ingest_url")
    @classmethod
    def _ensure_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("ingest_url must be an http(s) URL")
        return value


def build_ingest_url(
    config: ClientConfig,
    base_url: str = INGEST_BASE_URL,
    *,
    now_ms: int | None = None,
) -> str:
    """Return the ingest URL for ``config`` with its required query params."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    url = httpx.URL(base_url).copy_merge_params(
        {"hostname": config.hostname, "now": str(now_ms)}
    )
    return str(url)


def _parse_transport_config(
    config: HttpTransportConfig | Mapping[str, Any] | None, **kwargs: Any
) -> HttpTransportConfig:
    if isinstance(config, HttpTransportConfig) and not kwargs:
        return config
    data: dict[str, Any] = {}
    if isinstance(config, HttpTransportConfig):
        data.update(config.model_dump())
    elif config is not None:
        data.update(config)
    data.update(kwargs)
    try:
        return HttpTransportConfig(**data)
    except ValidationError as e:
        raise ConfigurationError("Invalid HTTP transport configuration", cause=e) from e


class HttpIngestTransport:
    """Blocking transport that delivers one batch per POST."""

    name = "http-ingest"

    def __init__(
        self,
        identity: ClientConfig | Mapping[str, Any],
        config: HttpTransportConfig | Mapping[str, Any] | None = None,
        *,
        client: httpx.Client | None = None,
        **kwargs: Any,
    ) -> None:
        self._identity = parse_client_config(identity)
        self._config = _parse_transport_config(config, **kwargs)
        self._client = client
        self._owns_client = client is None
        self._client_lock = threading.Lock()
        self._auth = httpx.BasicAuth(self._identity.api_key, "")
        self._last_status: int | None = None
        self._last_error: str | None = None

    @property
    def config(self) -> HttpTransportConfig:
        return self._config

    @property
    def last_status(self) -> int | None:
        return self._last_status

    def _get_client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(
                    transport=httpx.HTTPTransport(retries=self._config.retries),
                    timeout=self._config.timeout_seconds,
                )
            return self._client

    def send(self, payload: bytes) -> None:
        headers = {"Content-Type": _CONTENT_TYPE}
        headers.update(self._config.headers)
        url = build_ingest_url(self._identity, self._config.ingest_url)
        try:
            resp = self._get_client().post(
                url, content=payload, headers=headers, auth=self._auth
            )
        except httpx.HTTPError as exc:
            self._last_status = None
            self._last_error = str(exc)
            raise TransportError(
                f"Ingest request failed: {type(exc).__name__}: {exc}",
                cause=exc,
                endpoint=self._config.ingest_url,
            ) from exc
        self._last_status = resp.status_code
        if not resp.is_success:
            snippet: str | None
            try:
                snippet = resp.text[:_BODY_SNIPPET_CHARS]
            except Exception:
                snippet = None
            self._last_error = f"HTTP {resp.status_code}"
            raise TransportError(
                f"Ingest endpoint returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                endpoint=self._config.ingest_url,
                body=snippet,
            )
        self._last_error = None

    def health_check(self) -> bool:
        return (
            self._last_error is None
            and self._last_status is not None
            and self._last_status < 400
        )

    def close(self) -> None:
        with self._client_lock:
            client = self._client
            if self._owns_client:
                self._client = None
        if client is not None and self._owns_client:
            client.close()


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (
    HttpTransportConfig._coerce_headers,
    HttpTransportConfig._ensure_http_url,
)
