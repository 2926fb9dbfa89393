"""Edamam nutrition-data API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from fruit_scan.adapters.http_support import request_json
from fruit_scan.domain.errors import ConfigurationError


class NutritionDataClient(Protocol):
    """Interface for nutrition lookups by ingredient text."""

    async def nutrition_data(self, ingredient: str) -> object:
        """Return the decoded nutrition analysis for an ingredient line."""


@dataclass
class HttpxNutritionDataClient(NutritionDataClient):
    """HTTPX-backed nutrition-data client."""

    base_url: str
    http_client: httpx.AsyncClient
    credentials: tuple[str, str] | None
    timeout: float = 15.0

    @classmethod
    def create(
        cls,
        base_url: str,
        credentials: tuple[str, str] | None,
        timeout: float = 15.0,
    ) -> "HttpxNutritionDataClient":
        """Create a nutrition-data client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            credentials=credentials,
            timeout=timeout,
        )

    async def nutrition_data(self, ingredient: str) -> object:
        """GET ``/nutrition-data`` for a single ingredient line."""
        if self.credentials is None:
            raise ConfigurationError(
                "Nutrition lookup requires EDAMAM_APP_ID and EDAMAM_APP_KEY"
            )
        app_id, app_key = self.credentials
        return await request_json(
            self.http_client,
            "GET",
            f"{self.base_url.rstrip('/')}/nutrition-data",
            params={"app_id": app_id, "app_key": app_key, "ingr": ingredient},
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
