"""Nutritionix natural-language nutrients API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class NutritionixClient(Protocol):
    """Interface for Nutritionix API interactions."""

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        """Resolve a free-text query and return raw API data."""


@dataclass
class HttpxNutritionixClient(NutritionixClient):
    """HTTPX-backed Nutritionix client."""

    app_id: str
    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, app_id: str, api_key: str, base_url: str
    ) -> "HttpxNutritionixClient":
        """Create a Nutritionix client with a managed httpx session."""
        return cls(
            app_id=app_id,
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        """Resolve a query such as "100g rice" into nutrient data.

        Nutritionix answers 404 when nothing in the query is recognised;
        that is reported as an empty food list.
        """
        url = f"{self.base_url}/natural/nutrients"
        response = await self.http_client.post(
            url,
            headers={"x-app-id": self.app_id, "x-app-key": self.api_key},
            json={"query": query},
            timeout=15,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return {"foods": []}
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
