"""Base interface for stock media search providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from storybeat.domain.enums import AssetKind

MAX_QUERY_CHARS = 100


@dataclass
class StockSearchRequest:
    """Request for a stock media search."""

    query: str
    aspect_ratio: str = "16:9"
    count: int = 10

    def __post_init__(self) -> None:
        self.query = self.query[:MAX_QUERY_CHARS]


@dataclass
class StockCandidate:
    """A single stock search hit.

    Results carry no ordering guarantee; callers rank them themselves.
    """

    id: str
    width: int
    height: int
    preview_url: str
    thumbnail_url: str | None = None
    description: str | None = None
    attribution: str | None = None
    kind: AssetKind = AssetKind.IMAGE


@dataclass
class StockSearchResult:
    """Result from a stock media search."""

    success: bool
    candidates: list[StockCandidate] = field(default_factory=list)
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class StockSearchProvider(ABC):
    """Abstract base class for stock media search providers.

    Implementations:
    - StubStockSearchProvider: Mock library results for testing
    - PexelsStockProvider: Pexels photo search API
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        ...

    @abstractmethod
    async def search(self, request: StockSearchRequest) -> StockSearchResult:
        """Search the library for candidates matching the query.

        Args:
            request: Search request with query, aspect ratio and result count

        Returns:
            StockSearchResult with up to ``request.count`` candidates
        """
        ...

    async def health_check(self) -> bool:
        """Check if the provider is available."""
        return True
