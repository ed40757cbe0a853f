from __future__ import annotations

import base64
import json
from typing import Any, Callable

import httpx
import pytest

from logship.core.config import ClientConfig
from logship.core.errors import ConfigurationError, ErrorCategory, TransportError
from logship.transports.http import (
    INGEST_BASE_URL,
    HttpIngestTransport,
    HttpTransportConfig,
    build_ingest_url,
)

PAYLOAD = b'{"lines":[]}'


def _identity() -> ClientConfig:
    return ClientConfig(api_key="secret-key", hostname="web-1", app="svc", env="prod")


def _transport(
    handler: Callable[[httpx.Request], httpx.Response],
    **kwargs: Any,
) -> tuple[HttpIngestTransport, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(_record))
    return HttpIngestTransport(_identity(), client=client, **kwargs), requests


def test_build_ingest_url_adds_hostname_and_now() -> None:
    url = httpx.URL(build_ingest_url(_identity(), now_ms=1234))

    assert str(url).startswith(INGEST_BASE_URL)
    assert url.params["hostname"] == "web-1"
    assert url.params["now"] == "1234"


def test_build_ingest_url_keeps_existing_query() -> None:
    url = httpx.URL(
        build_ingest_url(_identity(), "https://example.com/ingest?tags=a", now_ms=1)
    )

    assert url.params["tags"] == "a"
    assert url.params["hostname"] == "web-1"


def test_build_ingest_url_defaults_now_to_current_time() -> None:
    url = httpx.URL(build_ingest_url(_identity()))

    assert int(url.params["now"]) > 1_600_000_000_000


def test_send_posts_payload_with_basic_auth_and_headers() -> None:
    transport, requests = _transport(
        lambda r: httpx.Response(200, json={"status": "ok"}),
        headers={"X-Extra": "1"},
    )

    transport.send(PAYLOAD)

    [request] = requests
    assert request.method == "POST"
    assert request.url.path == "/logs/ingest"
    assert request.url.params["hostname"] == "web-1"
    assert request.content == PAYLOAD
    assert request.headers["content-type"] == "application/json; charset=UTF-8"
    assert request.headers["x-extra"] == "1"
    expected = base64.b64encode(b"secret-key:").decode()
    assert request.headers["authorization"] == f"Basic {expected}"
    assert transport.last_status == 200
    assert transport.health_check() is True


@pytest.mark.parametrize("status", [400, 401, 404, 500, 503])
def test_non_success_status_raises_transport_error(status: int) -> None:
    transport, _ = _transport(lambda r: httpx.Response(status, text="nope" * 100))

    with pytest.raises(TransportError) as exc_info:
        transport.send(PAYLOAD)

    err = exc_info.value
    assert err.status_code == status
    assert err.context.category is ErrorCategory.TRANSPORT
    assert len(err.context.details["body"]) == 256
    assert transport.health_check() is False


def test_redirect_response_is_not_success() -> None:
    transport, _ = _transport(lambda r: httpx.Response(302, headers={"location": "/x"}))

    with pytest.raises(TransportError):
        transport.send(PAYLOAD)


def test_network_error_raises_transport_error_with_cause() -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport, _ = _transport(_boom)

    with pytest.raises(TransportError) as exc_info:
        transport.send(PAYLOAD)

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert exc_info.value.status_code is None
    assert transport.last_status is None
    assert transport.health_check() is False


def test_health_recovers_after_success() -> None:
    outcomes = [httpx.Response(500), httpx.Response(200)]
    transport, _ = _transport(lambda r: outcomes.pop(0))

    with pytest.raises(TransportError):
        transport.send(PAYLOAD)
    transport.send(PAYLOAD)

    assert transport.health_check() is True


def test_injected_client_is_not_closed() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    transport = HttpIngestTransport(_identity(), client=client)

    transport.close()

    assert client.is_closed is False
    client.close()


def test_owned_client_is_created_lazily_and_closed() -> None:
    transport = HttpIngestTransport(_identity(), retries=0, timeout_seconds=1.0)

    owned = transport._get_client()
    assert transport._get_client() is owned
    transport.close()

    assert owned.is_closed is True
    assert transport._client is None


def test_config_defaults() -> None:
    cfg = HttpTransportConfig()

    assert cfg.ingest_url == INGEST_BASE_URL
    assert cfg.timeout_seconds == 30.0
    assert cfg.retries == 3
    assert cfg.headers == {}


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timeout_seconds": 0},
        {"retries": -1},
        {"ingest_url": "ftp://example.com"},
        {"unknown": 1},
    ],
)
def test_invalid_config_raises_configuration_error(kwargs: dict[str, Any]) -> None:
    with pytest.raises(ConfigurationError):
        HttpIngestTransport(_identity(), **kwargs)


def test_payload_round_trips_through_mock_endpoint() -> None:
    received: list[Any] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(202)

    transport, _ = _transport(_handler)
    transport.send(b'{"lines":[{"timestamp":1,"line":"x","app":"a","env":"e","level":"Info"}]}')

    assert received[0]["lines"][0]["line"] == "x"


def test_identity_mapping_is_accepted() -> None:
    transport = HttpIngestTransport({"api_key": "map-key", "hostname": "web-2"})

    assert transport._identity == ClientConfig(api_key="map-key", hostname="web-2")


def test_invalid_identity_mapping_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        HttpIngestTransport({"hostname": "web-2"})


@pytest.mark.parametrize("status", [429, 503])
def test_error_responses_are_not_retried(status: int) -> None:
    transport, requests = _transport(lambda _r: httpx.Response(status))

    with pytest.raises(TransportError) as exc_info:
        transport.send(PAYLOAD)

    assert exc_info.value.status_code == status
    assert len(requests) == 1
