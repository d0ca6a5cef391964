from typing import Sequence

from src.lore.domain.models import WikiSource
from src.lore.domain.types import QUALITY_RANK

FANTASY_WIKIS: tuple[WikiSource, ...] = (
    WikiSource(
        id="coppermind",
        name="The Coppermind",
        base_url="https://coppermind.net",
        api_endpoint="/w/api.php",
        license="CC-BY-SA",
        author_keywords=("brandon sanderson", "sanderson"),
        series_keywords=("stormlight", "mistborn", "elantris", "warbreaker", "cosmere"),
        categories=("Characters", "Books", "Magic", "Locations", "Events"),
        quality="exceptional",
    ),
    WikiSource(
        id="awoiaf",
        name="A Wiki of Ice and Fire",
        base_url="https://awoiaf.westeros.org",
        api_endpoint="/index.php/api.php",
        license="CC-BY-SA",
        author_keywords=("george r.r. martin", "george martin", "grrm"),
        series_keywords=("game of thrones", "song of ice and fire", "asoiaf", "fire and blood"),
        categories=("Characters", "Houses", "Locations", "Events", "Culture"),
        quality="excellent",
    ),
    WikiSource(
        id="tolkien-gateway",
        name="Tolkien Gateway",
        base_url="https://tolkiengateway.net",
        api_endpoint="/w/api.php",
        license="CC-BY-SA",
        author_keywords=("j.r.r. tolkien", "tolkien"),
        series_keywords=("lord of the rings", "hobbit", "silmarillion", "middle-earth"),
        categories=("Characters", "Locations", "Events", "Languages", "Peoples"),
        quality="excellent",
    ),
    WikiSource(
        id="wot-wiki",
        name="Wheel of Time Wiki",
        base_url="https://wot.fandom.com",
        api_endpoint="/api.php",
        license="CC-BY-SA",
        author_keywords=("robert jordan", "brandon sanderson"),
        series_keywords=("wheel of time", "wot"),
        categories=("Characters", "Nations", "Organizations", "Magic", "Locations"),
        quality="very-good",
    ),
    WikiSource(
        id="witcher-wiki",
        name="Witcher Wiki",
        base_url="https://witcher.fandom.com",
        api_endpoint="/api.php",
        license="CC-BY-SA",
        author_keywords=("andrzej sapkowski",),
        series_keywords=("witcher", "geralt"),
        categories=("Characters", "Locations", "Monsters", "Magic", "Quests"),
        quality="very-good",
    ),
)


def _is_relevant(source: WikiSource, author_lc: str, query_lc: str) -> bool:
    author_match = any(keyword.lower() in author_lc for keyword in source.author_keywords)
    series_match = any(keyword.lower() in query_lc for keyword in source.series_keywords)
    return author_match or series_match


def find_relevant_sources(
    book_title: str,
    author: str,
    sources: Sequence[WikiSource] = FANTASY_WIKIS,
) -> list[WikiSource]:
    author_lc = (author or "").lower()
    query_lc = f"{book_title or ''} {author or ''}".lower()
    relevant = [source for source in sources if _is_relevant(source, author_lc, query_lc)]
    # sorted() is stable, so equal tiers keep registry order.
    return sorted(relevant, key=lambda source: QUALITY_RANK[source.quality], reverse=True)


def get_source(source_id: str, sources: Sequence[WikiSource] = FANTASY_WIKIS) -> WikiSource:
    for source in sources:
        if source.id == source_id:
            return source
    raise KeyError(f"Unknown wiki source: {source_id}")
