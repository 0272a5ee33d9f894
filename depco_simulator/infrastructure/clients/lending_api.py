"""Lending API HTTP client for portfolio data, external accounts, saved scenarios and imported scores"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from depco_simulator.config import settings
from depco_simulator.domain.exceptions import UpstreamError
from depco_simulator.infrastructure.observability.metrics import (
    upstream_failure_counter,
    upstream_latency_histogram,
)


class LendingApiClient:
    """
    Client for the upstream lending API.

    Every failure (timeout, network error, non-2xx status, malformed JSON)
    surfaces as UpstreamError. GET requests are idempotent and retried with
    exponential backoff; writes are attempted once.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.lending_api_base).rstrip("/")
        self.token = token
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.upstream_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.upstream_backoff_base
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        attempts = self.max_retries if method == "GET" else 1
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with upstream_latency_histogram.labels(operation=operation).time():
                        response = await client.request(
                            method,
                            f"{self.base_url}{path}",
                            json=json,
                            headers=self._headers(),
                        )
                        response.raise_for_status()
                    if response.status_code == 204 or not response.content:
                        return None
                    return response.json()

                except httpx.HTTPStatusError as e:
                    upstream_failure_counter.labels(operation=operation).inc()
                    status = e.response.status_code
                    # Client errors will not succeed on retry
                    if status < 500 or attempt + 1 >= attempts:
                        raise UpstreamError(operation, _error_detail(e.response), status) from e

                except httpx.TimeoutException as e:
                    upstream_failure_counter.labels(operation=operation).inc()
                    if attempt + 1 >= attempts:
                        raise UpstreamError(operation, f"timeout after {self.timeout}s") from e

                except httpx.RequestError as e:
                    upstream_failure_counter.labels(operation=operation).inc()
                    if attempt + 1 >= attempts:
                        raise UpstreamError(operation, f"request failed: {e}") from e

                except ValueError as e:
                    upstream_failure_counter.labels(operation=operation).inc()
                    raise UpstreamError(operation, f"invalid JSON: {e}") from e

                attempt += 1
                # Exponential backoff: base, 2*base, 4*base...
                await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))

    async def get_portfolio(self) -> Dict[str, Any]:
        return await self._request("GET", "/credit/portfolio", "get_portfolio")

    async def list_scenarios(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/credit/scenarios", "list_scenarios") or []

    async def create_scenario(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/credit/scenarios", "create_scenario", json=payload)

    async def update_scenario(self, scenario_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/credit/scenarios/{scenario_id}", "update_scenario", json=payload)

    async def delete_scenario(self, scenario_id: int) -> None:
        await self._request("DELETE", f"/credit/scenarios/{scenario_id}", "delete_scenario")

    async def get_imported_score(self) -> Optional[Dict[str, Any]]:
        return await self._request("GET", "/credit/imported-score", "get_imported_score")

    async def save_imported_score(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/credit/imported-score", "save_imported_score", json=payload)

    async def delete_imported_score(self) -> None:
        await self._request("DELETE", "/credit/imported-score", "delete_imported_score")

    async def list_external_accounts(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/credit/external", "list_external_accounts") or []

    async def create_external_account(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", "/credit/external", "create_external_account", json=payload)

    async def update_external_account(self, account_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/credit/external/{account_id}", "update_external_account", json=payload)

    async def delete_external_account(self, account_id: int) -> None:
        await self._request("DELETE", f"/credit/external/{account_id}", "delete_external_account")


def _error_detail(response: httpx.Response) -> str:
    """Use the API's `detail` field when present, else the status code"""
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    return detail or f"HTTP error {response.status_code}"
