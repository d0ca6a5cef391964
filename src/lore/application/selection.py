from typing import Sequence

from src.lore.domain.content_rules import CHARACTER_HINT_KEYWORDS
from src.lore.domain.models import AggregatedResult, CharacterLookup, SearchResult, WikiPage, WikiSource


def select_primary(
    aggregated: Sequence[AggregatedResult],
    limit: int = 5,
) -> tuple[list[WikiSource], list[SearchResult]]:
    """Pick the top-ranked wiki and its leading results.

    ``search_for_book`` already orders aggregations by quality tier, so the first
    one is the best available source.
    """
    if not aggregated:
        return [], []
    top = aggregated[0]
    return [top.source], list(top.results[: max(limit, 0)])


def suggest_characters(aggregated: Sequence[AggregatedResult], limit: int = 5) -> list[str]:
    """Result titles that look like characters, in aggregation order.

    A result qualifies when its title or snippet contains any of
    ``CHARACTER_HINT_KEYWORDS`` as a case-insensitive substring.
    """
    suggestions: list[str] = []
    if limit <= 0:
        return suggestions
    for aggregation in aggregated:
        for result in aggregation.results:
            haystack = f"{result.title}\n{result.snippet}".lower()
            if any(keyword in haystack for keyword in CHARACTER_HINT_KEYWORDS):
                suggestions.append(result.title)
                if len(suggestions) >= limit:
                    return suggestions
    return suggestions


def first_available_page(lookups: Sequence[CharacterLookup]) -> WikiPage | None:
    for lookup in lookups:
        if lookup.page is not None:
            return lookup.page
    return None
