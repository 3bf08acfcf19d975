"""Stock media search adapters."""

from storybeat.adapters.stock.base import (
    StockCandidate,
    StockSearchProvider,
    StockSearchRequest,
    StockSearchResult,
)
from storybeat.adapters.stock.pexels import PexelsStockProvider
from storybeat.adapters.stock.stub import StubStockSearchProvider

__all__ = [
    "PexelsStockProvider",
    "StockCandidate",
    "StockSearchProvider",
    "StockSearchRequest",
    "StockSearchResult",
    "StubStockSearchProvider",
]
