import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Sequence

import aiohttp

from src.config.logger_config import logger
from src.lore.application.cancellation import CancellationToken
from src.lore.application.ports import WikiClientPort
from src.lore.domain.models import AggregatedResult, CharacterLookup, SearchResult, WikiSource
from src.lore.domain.registry import FANTASY_WIKIS, find_relevant_sources
from src.lore.infrastructure.mw_client import MediaWikiClient, WikiRequestError

SleepFunc = Callable[[float], Awaitable[None]]
ClientFactory = Callable[[WikiSource], WikiClientPort]


@dataclass(frozen=True)
class AggregationConfig:
    request_delay_seconds: float = 1.0
    title_search_limit: int = 5
    author_search_limit: int = 3
    max_results_per_source: int = 8
    connector_limit_per_host: int = 10
    connector_ttl_dns_cache: int = 300


def deduplicate_results(results: Sequence[SearchResult]) -> list[SearchResult]:
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.title in seen:
            continue
        seen.add(result.title)
        unique.append(result)
    return unique


class WikiAggregationService:
    """Sequential, paced fan-out over the relevant wiki sources.

    Sources are queried one after another, never concurrently, with
    ``config.request_delay_seconds`` awaited between consecutive sources.
    """

    def __init__(
        self,
        sources: Sequence[WikiSource] = FANTASY_WIKIS,
        client_factory: ClientFactory | None = None,
        config: AggregationConfig | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.sources = tuple(sources)
        self.client_factory: ClientFactory = client_factory or MediaWikiClient
        self.config = config or AggregationConfig()
        self._sleep = sleep
        self._clients: dict[str, WikiClientPort] = {}

    def find_relevant_sources(self, book_title: str, author: str) -> list[WikiSource]:
        return find_relevant_sources(book_title, author, self.sources)

    def client_for(self, source: WikiSource) -> WikiClientPort:
        client = self._clients.get(source.id)
        if client is None:
            client = self.client_factory(source)
            self._clients[source.id] = client
        return client

    async def search_for_book(
        self,
        book_title: str,
        author: str,
        *,
        session: aiohttp.ClientSession | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[AggregatedResult]:
        if not (book_title or "").strip() or not (author or "").strip():
            logger.debug("Skipping wiki search: book title and author are both required.")
            return []

        sources = self.find_relevant_sources(book_title, author)
        if not sources:
            logger.info("No relevant wikis for '{}' by '{}'", book_title, author)
            return []

        logger.info(
            "Searching {} wiki(s) for '{}' by '{}': {}",
            len(sources),
            book_title,
            author,
            ", ".join(source.id for source in sources),
        )
        aggregated: list[AggregatedResult] = []
        async with self._session_scope(session) as active_session:
            for index, source in enumerate(sources):
                if _is_cancelled(cancel_token):
                    break
                if index > 0:
                    await self._sleep(self.config.request_delay_seconds)
                    if _is_cancelled(cancel_token):
                        break

                results = await self._search_source(active_session, source, book_title, author)
                if results:
                    aggregated.append(AggregatedResult(source=source, results=tuple(results)))
                else:
                    logger.debug("[{}] No results after dedup; source omitted.", source.id)

        if _is_cancelled(cancel_token):
            logger.info("Wiki search for '{}' cancelled after {} source(s).", book_title, len(aggregated))
        return aggregated

    async def get_character_info(
        self,
        name: str,
        sources: Sequence[WikiSource],
        *,
        session: aiohttp.ClientSession | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[CharacterLookup]:
        lookups: list[CharacterLookup] = []
        async with self._session_scope(session) as active_session:
            for index, source in enumerate(sources):
                if _is_cancelled(cancel_token):
                    break
                if index > 0:
                    await self._sleep(self.config.request_delay_seconds)
                    if _is_cancelled(cancel_token):
                        break

                try:
                    page = await self.client_for(source).get_page(active_session, name)
                except WikiRequestError as exc:
                    logger.warning("Error getting '{}' from {}: {}", name, source.name, exc)
                    page = None
                except Exception as exc:
                    logger.exception(
                        "Unexpected error getting '{}' from {} ({}): {}",
                        name,
                        source.name,
                        type(exc).__name__,
                        exc,
                    )
                    page = None
                lookups.append(CharacterLookup(source=source, page=page))

        return lookups

    async def _search_source(
        self,
        session: aiohttp.ClientSession,
        source: WikiSource,
        book_title: str,
        author: str,
    ) -> list[SearchResult]:
        client = self.client_for(source)
        try:
            title_results = await client.search(session, book_title, self.config.title_search_limit)
            author_results = await client.search(session, author, self.config.author_search_limit)
        except WikiRequestError as exc:
            logger.warning("Error searching {}: {}", source.name, exc)
            return []
        except Exception as exc:
            logger.exception(
                "Unexpected error searching {} ({}): {}",
                source.name,
                type(exc).__name__,
                exc,
            )
            return []

        unique = deduplicate_results([*title_results, *author_results])
        return unique[: self.config.max_results_per_source]

    @asynccontextmanager
    async def _session_scope(
        self,
        session: aiohttp.ClientSession | None,
    ) -> AsyncIterator[aiohttp.ClientSession]:
        if session is not None:
            yield session
            return

        connector = aiohttp.TCPConnector(
            limit_per_host=self.config.connector_limit_per_host,
            ttl_dns_cache=self.config.connector_ttl_dns_cache,
        )
        async with aiohttp.ClientSession(connector=connector) as owned_session:
            yield owned_session


def _is_cancelled(cancel_token: CancellationToken | None) -> bool:
    return cancel_token is not None and cancel_token.cancelled
