"""Unit tests for the lending API client"""

import httpx
import pytest

from depco_simulator.domain.exceptions import UpstreamError
from depco_simulator.infrastructure.clients.lending_api import LendingApiClient


def _client(handler, **kwargs) -> LendingApiClient:
    return LendingApiClient(
        base_url="http://lending.test/api/v1",
        token="tok_123",
        max_retries=kwargs.pop("max_retries", 3),
        backoff_base=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


async def test_get_portfolio_forwards_token(portfolio_payload):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json=portfolio_payload)

    data = await _client(handler).get_portfolio()

    assert data["monthly_income"] == 10000
    assert seen["auth"] == "Bearer tok_123"
    assert seen["path"] == "/api/v1/credit/portfolio"


async def test_get_retries_server_errors():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(502)
        return httpx.Response(200, json=[])

    assert await _client(handler).list_scenarios() == []
    assert len(attempts) == 3


async def test_get_gives_up_after_max_retries():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503, json={"detail": "maintenance"})

    with pytest.raises(UpstreamError) as exc:
        await _client(handler, max_retries=2).get_portfolio()

    assert len(attempts) == 2
    assert exc.value.status_code == 503
    assert "maintenance" in str(exc.value)


async def test_client_errors_are_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(401, json={"detail": "token expired"})

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).get_portfolio()

    assert len(attempts) == 1
    assert exc.value.status_code == 401


async def test_writes_are_attempted_once():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(500)

    with pytest.raises(UpstreamError):
        await _client(handler).create_scenario({"name": "Edgars"})

    assert len(attempts) == 1
    assert attempts[0].method == "POST"


async def test_timeout_becomes_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(UpstreamError) as exc:
        await _client(handler, max_retries=1).get_portfolio()

    assert "timeout" in str(exc.value)


async def test_invalid_json_becomes_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>", headers={"Content-Type": "text/html"})

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).get_portfolio()

    assert exc.value.operation == "get_portfolio"


async def test_empty_delete_response():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    assert await _client(handler).delete_scenario(4) is None


async def test_external_account_write_is_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append((request.method, request.url.path))
        return httpx.Response(500)

    with pytest.raises(UpstreamError) as exc:
        await _client(handler).update_external_account(4, {"current_balance": 9000})

    assert attempts == [("PUT", "/api/v1/credit/external/4")]
    assert exc.value.operation == "update_external_account"
