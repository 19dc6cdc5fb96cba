"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from recipe_nutrition.domain.errors import (
    FoodNotFoundError,
    RateLimitedError,
    TransientLookupError,
)


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client.

    Failures surface as lookup errors: 404 as FoodNotFoundError, 429 as
    RateLimitedError, timeouts, transport errors and 5xx as
    TransientLookupError. Other 4xx responses raise httpx.HTTPStatusError.
    """

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        """Search foods by query."""
        url = f"{self.base_url}/foods/search"
        return await self._request(
            "POST",
            url,
            subject=query,
            json={"query": query, "pageSize": page_size},
        )

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id."""
        url = f"{self.base_url}/food/{fdc_id}"
        return await self._request("GET", url, subject=str(fdc_id))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, url: str, *, subject: str, json: object | None = None
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                url,
                params={"api_key": self.api_key},
                json=json,
                timeout=self.timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise TransientLookupError(f"FDC request timed out for {subject!r}") from exc
        except httpx.TransportError as exc:
            raise TransientLookupError(
                f"FDC request failed for {subject!r}: {exc}"
            ) from exc

        status = response.status_code
        if status == 404:
            raise FoodNotFoundError(subject)
        if status == 429:
            raise RateLimitedError(
                f"FDC rate limit hit for {subject!r}",
                retry_after=_retry_after_seconds(response),
            )
        if status >= 500:
            raise TransientLookupError(
                f"FDC returned {status} for {subject!r}", status_code=status
            )
        response.raise_for_status()
        return response.json()


def _retry_after_seconds(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
