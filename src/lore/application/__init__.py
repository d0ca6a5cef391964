"""Aggregation, filtering and selection over wiki sources."""

from src.lore.application.aggregation import AggregationConfig, WikiAggregationService
from src.lore.application.cancellation import CancellationToken
from src.lore.application.content_filter import (
    ContentFilter,
    filter_results,
    has_potential_spoilers,
    redact_spoilers,
)
from src.lore.application.ports import WikiClientPort
from src.lore.application.selection import first_available_page, select_primary, suggest_characters

__all__ = [
    "AggregationConfig",
    "CancellationToken",
    "ContentFilter",
    "filter_results",
    "first_available_page",
    "has_potential_spoilers",
    "redact_spoilers",
    "select_primary",
    "suggest_characters",
    "WikiAggregationService",
    "WikiClientPort",
]
