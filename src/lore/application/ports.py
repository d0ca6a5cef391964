from typing import Any, Protocol, runtime_checkable

from src.lore.domain.models import SearchResult, WikiPage


@runtime_checkable
class WikiClientPort(Protocol):
    async def search(self, session: Any, query: str, limit: int = 10) -> list[SearchResult]: ...
    """Full-text search on one wiki; sanitized results."""

    async def get_page(self, session: Any, title: str) -> WikiPage | None: ...
    """Fetch one page; None when the wiki reports it missing."""

    async def search_categories(self, session: Any, category: str, limit: int = 20) -> list[str]: ...
    """List page titles in one category."""
