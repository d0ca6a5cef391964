from dataclasses import dataclass, field
from typing import Any

from src.lore.domain.types import (
    CONTENT_TYPES,
    LICENSE_TAGS,
    QUALITY_TIERS,
    SPOILER_LEVELS,
    ContentType,
    LicenseTag,
    QualityTier,
    SpoilerLevel,
)


@dataclass(frozen=True)
class WikiSource:
    id: str
    name: str
    base_url: str
    api_endpoint: str
    license: LicenseTag
    author_keywords: tuple[str, ...]
    series_keywords: tuple[str, ...]
    categories: tuple[str, ...]
    quality: QualityTier

    def __post_init__(self) -> None:
        if self.license not in LICENSE_TAGS:
            raise ValueError(f"Unsupported license for source {self.id}: {self.license}")
        if self.quality not in QUALITY_TIERS:
            raise ValueError(f"Unsupported quality tier for source {self.id}: {self.quality}")

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.api_endpoint}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "base_url": self.base_url,
            "api_endpoint": self.api_endpoint,
            "license": self.license,
            "author_keywords": list(self.author_keywords),
            "series_keywords": list(self.series_keywords),
            "categories": list(self.categories),
            "quality": self.quality,
        }


@dataclass(frozen=True)
class SearchResult:
    title: str
    snippet: str
    size: int
    wordcount: int
    timestamp: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "snippet": self.snippet,
            "size": self.size,
            "wordcount": self.wordcount,
            "timestamp": self.timestamp,
            "url": self.url,
        }


@dataclass(frozen=True)
class WikiPage:
    title: str
    extract: str
    full_url: str
    categories: tuple[str, ...]
    images: tuple[str, ...]
    last_modified: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "extract": self.extract,
            "full_url": self.full_url,
            "categories": list(self.categories),
            "images": list(self.images),
            "last_modified": self.last_modified,
        }


@dataclass(frozen=True)
class AggregatedResult:
    source: WikiSource
    results: tuple[SearchResult, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.to_dict(),
            "results": [result.to_dict() for result in self.results],
        }


@dataclass(frozen=True)
class CharacterLookup:
    source: WikiSource
    page: WikiPage | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.to_dict(),
            "page": self.page.to_dict() if self.page is not None else None,
        }


@dataclass(frozen=True)
class ContentFilterPolicy:
    """Caller-supplied filtering policy.

    ``current_chapter`` and ``reading_progress`` are advisory markers carried for
    callers; the filter itself does not enforce them.
    """

    spoiler_level: SpoilerLevel = "none"
    content_types: tuple[ContentType, ...] = field(default_factory=lambda: tuple(CONTENT_TYPES))
    current_chapter: int | None = None
    reading_progress: float | None = None

    def __post_init__(self) -> None:
        if self.spoiler_level not in SPOILER_LEVELS:
            raise ValueError(f"Unsupported spoiler level: {self.spoiler_level}")
        unknown = [t for t in self.content_types if t not in CONTENT_TYPES]
        if unknown:
            raise ValueError(f"Unsupported content types: {', '.join(unknown)}")
        if self.reading_progress is not None and not 0 <= self.reading_progress <= 100:
            raise ValueError(f"reading_progress must be within 0-100, got {self.reading_progress}")
