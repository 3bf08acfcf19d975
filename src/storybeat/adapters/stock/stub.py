"""Stub stock search provider for testing."""

from storybeat.adapters.stock.base import (
    StockCandidate,
    StockSearchProvider,
    StockSearchRequest,
    StockSearchResult,
)
from storybeat.logging import get_logger

logger = get_logger(__name__)

MOCK_PHOTO_URL = (
    "https://images.pexels.com/photos/414612/pexels-photo-414612.jpeg"
    "?auto=compress&cs=tinysrgb&dpr=2&h=650&w=940"
)
MOCK_THUMBNAIL_URL = (
    "https://images.pexels.com/photos/414612/pexels-photo-414612.jpeg"
    "?auto=compress&cs=tinysrgb&dpr=1&w=500"
)

MOCK_DIMENSIONS = {
    "16:9": (1920, 1080),
    "9:16": (1080, 1920),
    "1:1": (1080, 1080),
}


class StubStockSearchProvider(StockSearchProvider):
    """Stub provider that simulates a stock library without external calls.

    By default every hit describes itself with the query text, the way a
    keyword-tagged library would. Tests can pass fixed ``candidates`` instead.
    """

    def __init__(
        self,
        candidates: list[StockCandidate] | None = None,
        fail_with: str | None = None,
    ) -> None:
        self.candidates = candidates
        self.fail_with = fail_with
        self.requests: list[StockSearchRequest] = []

    @property
    def name(self) -> str:
        return "stub"

    async def search(self, request: StockSearchRequest) -> StockSearchResult:
        self.requests.append(request)

        if self.fail_with:
            logger.warning("stub_stock_search_failed", error=self.fail_with)
            return StockSearchResult(success=False, error_message=self.fail_with)

        if self.candidates is not None:
            hits = list(self.candidates[: request.count])
        else:
            width, height = MOCK_DIMENSIONS.get(request.aspect_ratio, (1080, 1080))
            hits = [
                StockCandidate(
                    id=f"mock-{i}",
                    width=width,
                    height=height,
                    preview_url=MOCK_PHOTO_URL,
                    thumbnail_url=MOCK_THUMBNAIL_URL,
                    description=f"{request.query} image {i + 1}",
                    attribution="Mock Photographer",
                )
                for i in range(request.count)
            ]

        logger.info("stub_stock_search", query=request.query, results=len(hits))
        return StockSearchResult(success=True, candidates=hits, metadata={"provider": self.name})
