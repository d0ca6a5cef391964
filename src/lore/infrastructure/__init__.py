"""Infrastructure adapters for wiki lookups."""

from src.lore.infrastructure.event_sink import ApiEventJsonlSink, WikiApiEvent
from src.lore.infrastructure.mw_client import MediaWikiClient, WikiRequestError

__all__ = ["ApiEventJsonlSink", "MediaWikiClient", "WikiApiEvent", "WikiRequestError"]
