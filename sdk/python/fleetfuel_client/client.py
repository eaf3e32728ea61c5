from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

import httpx
from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_exponential


class FleetFuelClient:
    """Python SDK for the FleetFuel budget service, used by the fleet dashboard.

    Responses with status 503 (store unavailable) are retried with
    exponential backoff; every other error is raised to the caller.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_base_s: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_base_s = backoff_base_s
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def close(self):
        await self.client.aclose()

    async def get_budget_status(self, user_id: str, as_of: Optional[str] = None) -> Dict[str, Any]:
        params = {"as_of": as_of} if as_of else None
        return await self._request("GET", f"/v1/users/{user_id}/budget/status", params=params)

    async def get_monthly_usage(self, user_id: str, as_of: Optional[str] = None) -> Dict[str, Any]:
        params = {"as_of": as_of} if as_of else None
        return await self._request("GET", f"/v1/users/{user_id}/budget/usage", params=params)

    async def get_budget_alerts(self, user_id: str) -> List[str]:
        data = await self._request("GET", f"/v1/users/{user_id}/budget/alerts")
        return data["alerts"]

    async def check_budget_before_action(
        self,
        user_id: str,
        estimated_cost: Union[Decimal, float, str],
    ) -> Dict[str, Any]:
        payload = {"estimated_cost": str(estimated_cost)}
        return await self._request("POST", f"/v1/users/{user_id}/budget/check", json=payload)

    async def set_limit(
        self,
        user_id: str,
        amount: Union[Decimal, float, str],
        actor_id: str,
    ) -> Dict[str, Any]:
        payload = {"amount": str(amount), "actor_id": actor_id}
        return await self._request("PUT", f"/v1/users/{user_id}/budget/limit", json=payload)

    async def get_group_budget(self, group_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/v1/groups/{group_id}/budget")

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """Send a request, retrying only while the service reports a store outage."""
        retrying = AsyncRetrying(
            retry=retry_if_result(_is_store_outage),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_base_s),
            retry_error_callback=lambda state: state.outcome.result(),
        )
        response = await retrying(self.client.request, method, url, **kwargs)
        response.raise_for_status()
        return response.json()


def _is_store_outage(response: httpx.Response) -> bool:
    return response.status_code == 503
