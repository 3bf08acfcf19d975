"""Pexels stock photo search provider."""

from typing import Any

import httpx

from storybeat.adapters.stock.base import (
    StockCandidate,
    StockSearchProvider,
    StockSearchRequest,
    StockSearchResult,
)
from storybeat.config import settings
from storybeat.logging import get_logger

logger = get_logger(__name__)

ORIENTATIONS = {
    "16:9": "landscape",
    "9:16": "portrait",
    "1:1": "square",
}


class PexelsStockProvider(StockSearchProvider):
    """Photo search via the Pexels API."""

    BASE_URL = "https://api.pexels.com/v1"

    def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
        self.api_key = api_key or settings.pexels_api_key
        self.base_url = base_url or self.BASE_URL

        if not self.api_key:
            logger.warning("Pexels API key not configured")

    @property
    def name(self) -> str:
        return "pexels"

    async def search(self, request: StockSearchRequest) -> StockSearchResult:
        """Search Pexels photos for the query."""
        if not self.api_key:
            return StockSearchResult(success=False, error_message="Pexels API key not configured")

        params: dict[str, Any] = {
            "query": request.query,
            "per_page": request.count,
        }
        orientation = ORIENTATIONS.get(request.aspect_ratio)
        if orientation:
            params["orientation"] = orientation

        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.get(
                    f"{self.base_url}/search",
                    headers={"Authorization": self.api_key},
                    params=params,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "pexels_search_failed",
                status_code=e.response.status_code,
                query=request.query,
            )
            return StockSearchResult(
                success=False,
                error_message=f"Pexels API error: {e.response.status_code}",
            )
        except httpx.HTTPError as e:
            logger.error("pexels_search_exception", error=str(e), query=request.query)
            return StockSearchResult(success=False, error_message=f"Pexels API exception: {e}")

        candidates = [self._to_candidate(photo) for photo in data.get("photos", [])]

        logger.info(
            "pexels_search_completed",
            query=request.query,
            results=len(candidates),
            total_results=data.get("total_results"),
        )

        return StockSearchResult(
            success=True,
            candidates=candidates[: request.count],
            metadata={"provider": self.name, "total_results": data.get("total_results")},
        )

    @staticmethod
    def _to_candidate(photo: dict[str, Any]) -> StockCandidate:
        src = photo.get("src", {})
        return StockCandidate(
            id=f"pexels-{photo['id']}",
            width=photo.get("width", 0),
            height=photo.get("height", 0),
            preview_url=src.get("large2x") or src.get("original", ""),
            thumbnail_url=src.get("medium") or src.get("tiny"),
            description=photo.get("alt") or None,
            attribution=photo.get("photographer"),
        )

    async def health_check(self) -> bool:
        if not self.api_key:
            return False
        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(
                    f"{self.base_url}/curated",
                    headers={"Authorization": self.api_key},
                    params={"per_page": 1},
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error("pexels_health_check_failed", error=str(e))
            return False
