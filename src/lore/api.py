from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from functools import partial
from typing import Sequence

import aiohttp

from src.config.logger_config import logger
from src.config.settings import WikiSettings
from src.lore.application.aggregation import AggregationConfig, WikiAggregationService
from src.lore.application.cancellation import CancellationToken
from src.lore.application.content_filter import filter_results
from src.lore.domain.models import AggregatedResult, CharacterLookup, WikiSource
from src.lore.domain.registry import FANTASY_WIKIS, find_relevant_sources, get_source
from src.lore.infrastructure.event_sink import ApiEventJsonlSink
from src.lore.infrastructure.mw_client import MediaWikiClient

__all__ = [
    "build_service",
    "filter_results",
    "get_character_info",
    "get_character_info_async",
    "resolve_sources",
    "search_for_book",
    "search_for_book_async",
]


def build_service(
    settings: WikiSettings,
    *,
    sources: Sequence[WikiSource] = FANTASY_WIKIS,
    event_sink: ApiEventJsonlSink | None = None,
) -> WikiAggregationService:
    timeout = None
    if settings.http_timeout_seconds > 0:
        timeout = aiohttp.ClientTimeout(
            total=settings.http_timeout_seconds,
            connect=settings.http_connect_timeout_seconds or None,
        )
    client_factory = partial(
        MediaWikiClient,
        timeout=timeout,
        user_agent=settings.user_agent,
        event_sink=event_sink,
    )
    return WikiAggregationService(
        sources=sources,
        client_factory=client_factory,
        config=AggregationConfig(request_delay_seconds=settings.request_delay_seconds),
    )


def resolve_sources(
    sources: Sequence[WikiSource | str],
    registry: Sequence[WikiSource] = FANTASY_WIKIS,
) -> list[WikiSource]:
    return [s if isinstance(s, WikiSource) else get_source(s, registry) for s in sources]


async def search_for_book_async(
    book_title: str,
    author: str,
    *,
    settings: WikiSettings | None = None,
    sources: Sequence[WikiSource] = FANTASY_WIKIS,
    cancel_token: CancellationToken | None = None,
) -> list[AggregatedResult]:
    settings = settings or WikiSettings.from_env()
    event_sink = _open_event_sink(settings)
    service = build_service(settings, sources=sources, event_sink=event_sink)
    try:
        return await service.search_for_book(book_title, author, cancel_token=cancel_token)
    finally:
        _close_event_sink(event_sink)


def search_for_book(
    book_title: str,
    author: str,
    *,
    settings: WikiSettings | None = None,
    sources: Sequence[WikiSource] = FANTASY_WIKIS,
) -> list[AggregatedResult]:
    return asyncio.run(
        search_for_book_async(book_title, author, settings=settings, sources=sources)
    )


async def get_character_info_async(
    name: str,
    sources: Sequence[WikiSource | str] | None = None,
    *,
    book_title: str | None = None,
    author: str | None = None,
    settings: WikiSettings | None = None,
    cancel_token: CancellationToken | None = None,
) -> list[CharacterLookup]:
    settings = settings or WikiSettings.from_env()
    if sources is not None:
        targets = resolve_sources(sources)
    elif book_title or author:
        targets = find_relevant_sources(book_title or "", author or "")
    else:
        targets = list(FANTASY_WIKIS)

    event_sink = _open_event_sink(settings)
    service = build_service(settings, event_sink=event_sink)
    try:
        return await service.get_character_info(name, targets, cancel_token=cancel_token)
    finally:
        _close_event_sink(event_sink)


def get_character_info(
    name: str,
    sources: Sequence[WikiSource | str] | None = None,
    *,
    book_title: str | None = None,
    author: str | None = None,
    settings: WikiSettings | None = None,
) -> list[CharacterLookup]:
    return asyncio.run(
        get_character_info_async(
            name,
            sources,
            book_title=book_title,
            author=author,
            settings=settings,
        )
    )


def _open_event_sink(settings: WikiSettings) -> ApiEventJsonlSink | None:
    if not settings.event_log_dir:
        return None
    return ApiEventJsonlSink(settings.event_log_dir, run_id=_build_run_id())


def _build_run_id() -> str:
    return datetime.now(timezone.utc).strftime("lore_%Y%m%dT%H%M%S%fZ")


def _close_event_sink(event_sink: ApiEventJsonlSink | None) -> None:
    if event_sink is None:
        return
    logger.info("Wiki API events for run {}: {}", event_sink.run_id, event_sink.outcome_summary())
    event_sink.close()
