"""Value types, the wiki source registry and deterministic text rules."""

from src.lore.domain.content_rules import CONTENT_TYPE_RULES, SPOILER_PATTERN, ContentTypeRule
from src.lore.domain.models import (
    AggregatedResult,
    CharacterLookup,
    ContentFilterPolicy,
    SearchResult,
    WikiPage,
    WikiSource,
)
from src.lore.domain.registry import FANTASY_WIKIS, find_relevant_sources, get_source
from src.lore.domain.rules import build_canonical_url, sanitize_snippet, strip_category_prefix

__all__ = [
    "AggregatedResult",
    "build_canonical_url",
    "CharacterLookup",
    "CONTENT_TYPE_RULES",
    "ContentFilterPolicy",
    "ContentTypeRule",
    "FANTASY_WIKIS",
    "find_relevant_sources",
    "get_source",
    "sanitize_snippet",
    "SearchResult",
    "SPOILER_PATTERN",
    "strip_category_prefix",
    "WikiPage",
    "WikiSource",
]
