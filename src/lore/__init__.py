"""Fantasy wiki lore lookup."""

from src.lore.api import (
    filter_results,
    get_character_info,
    get_character_info_async,
    search_for_book,
    search_for_book_async,
)
from src.lore.domain.models import AggregatedResult, CharacterLookup, ContentFilterPolicy

__all__ = [
    "AggregatedResult",
    "CharacterLookup",
    "ContentFilterPolicy",
    "filter_results",
    "get_character_info",
    "get_character_info_async",
    "search_for_book",
    "search_for_book_async",
]
