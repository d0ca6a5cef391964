from typing import Pattern, Sequence

from src.config.logger_config import logger
from src.lore.domain.content_rules import (
    CONTENT_TYPE_RULES,
    POTENTIAL_SPOILER_KEYWORDS,
    REDACTION_PATTERN,
    REDACTION_PLACEHOLDER,
    SPOILER_PATTERN,
    ContentTypeRule,
)
from src.lore.domain.models import AggregatedResult, ContentFilterPolicy, SearchResult
from src.lore.domain.types import ContentType, SpoilerLevel


class ContentFilter:
    def __init__(
        self,
        rules: Sequence[ContentTypeRule] = CONTENT_TYPE_RULES,
        spoiler_pattern: Pattern[str] = SPOILER_PATTERN,
    ) -> None:
        self.rules = tuple(rules)
        self.spoiler_pattern = spoiler_pattern

    def filter(
        self,
        aggregated: Sequence[AggregatedResult],
        policy: ContentFilterPolicy,
    ) -> list[SearchResult]:
        requested = set(policy.content_types)
        kept: list[SearchResult] = []
        spoiler_dropped = 0
        for bundle in aggregated:
            for result in bundle.results:
                if policy.spoiler_level == "none" and self.is_spoiler(result):
                    spoiler_dropped += 1
                    continue
                if any(self._matches(rule, result) for rule in self.rules if rule.target in requested):
                    kept.append(result)

        logger.debug(
            "Content filter kept {} result(s); {} dropped as spoilers (level={}, types={})",
            len(kept),
            spoiler_dropped,
            policy.spoiler_level,
            ",".join(policy.content_types),
        )
        return kept

    def matched_types(self, result: SearchResult) -> list[ContentType]:
        matched: list[ContentType] = []
        for rule in self.rules:
            if rule.target not in matched and self._matches(rule, result):
                matched.append(rule.target)
        return matched

    def is_spoiler(self, result: SearchResult) -> bool:
        return bool(self.spoiler_pattern.search(result.snippet or ""))

    @staticmethod
    def _matches(rule: ContentTypeRule, result: SearchResult) -> bool:
        title = result.title or ""
        snippet = result.snippet or ""
        if rule.field == "title":
            return bool(rule.pattern.search(title))
        if rule.field == "snippet":
            return bool(rule.pattern.search(snippet))
        return bool(rule.pattern.search(title) or rule.pattern.search(snippet))


_DEFAULT_FILTER = ContentFilter()


def filter_results(
    aggregated: Sequence[AggregatedResult],
    policy: ContentFilterPolicy,
) -> list[SearchResult]:
    return _DEFAULT_FILTER.filter(aggregated, policy)


def redact_spoilers(text: str, spoiler_level: SpoilerLevel, reveal: bool = False) -> str:
    if spoiler_level == "full" or reveal:
        return text
    return REDACTION_PATTERN.sub(REDACTION_PLACEHOLDER, text or "")


def has_potential_spoilers(text: str) -> bool:
    lowered = (text or "").lower()
    return any(keyword in lowered for keyword in POTENTIAL_SPOILER_KEYWORDS)
