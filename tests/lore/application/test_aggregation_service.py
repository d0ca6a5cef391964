import unittest
from unittest.mock import AsyncMock

from src.lore.application.aggregation import (
    AggregationConfig,
    WikiAggregationService,
    deduplicate_results,
)
from src.lore.application.cancellation import CancellationToken
from src.lore.domain.models import SearchResult, WikiPage
from src.lore.domain.registry import FANTASY_WIKIS, get_source
from src.lore.infrastructure.mw_client import WikiRequestError

SESSION = object()


def make_result(title: str, snippet: str = "") -> SearchResult:
    return SearchResult(
        title=title,
        snippet=snippet,
        size=100,
        wordcount=20,
        timestamp="2024-01-01T00:00:00Z",
        url=f"https://coppermind.net/wiki/{title.replace(' ', '_')}",
    )


def make_page(title: str) -> WikiPage:
    return WikiPage(
        title=title,
        extract=f"{title} extract",
        full_url=f"https://coppermind.net/wiki/{title}",
        categories=("Characters",),
        images=(),
        last_modified="2024-01-01T00:00:00Z",
    )


class FakeWikiClient:
    def __init__(self, searches=None, pages=None, search_error=None, page_error=None):
        self.searches = searches or {}
        self.pages = pages or {}
        self.search_error = search_error
        self.page_error = page_error
        self.search_calls: list[tuple[str, int]] = []
        self.page_calls: list[str] = []
        self.sessions: list[object] = []

    async def search(self, session, query, limit=10):
        self.sessions.append(session)
        self.search_calls.append((query, limit))
        if self.search_error is not None:
            raise self.search_error
        return list(self.searches.get(query, []))

    async def get_page(self, session, title):
        self.sessions.append(session)
        self.page_calls.append(title)
        if self.page_error is not None:
            raise self.page_error
        return self.pages.get(title)

    async def search_categories(self, session, category, limit=20):
        return []


def make_service(clients: dict, sources=FANTASY_WIKIS, sleep=None, config=None):
    return WikiAggregationService(
        sources=sources,
        client_factory=lambda source: clients[source.id],
        config=config,
        sleep=sleep or AsyncMock(),
    )


class DeduplicateTests(unittest.TestCase):
    def test_first_occurrence_wins(self):
        first = make_result("Kaladin", "from title search")
        second = make_result("Kaladin", "from author search")
        other = make_result("Syl")

        unique = deduplicate_results([first, other, second])

        self.assertEqual(unique, [first, other])


class SearchForBookTests(unittest.IsolatedAsyncioTestCase):
    async def test_coppermind_end_to_end(self):
        coppermind = get_source("coppermind")
        title_hits = [make_result(f"Title {i}") for i in range(5)]
        author_hits = [make_result("Title 0"), make_result("Brandon Sanderson"), make_result("Cosmere")]
        client = FakeWikiClient(
            searches={"The Way of Kings": title_hits, "Brandon Sanderson": author_hits}
        )
        service = make_service({"coppermind": client}, sources=(coppermind,))

        aggregated = await service.search_for_book("The Way of Kings", "Brandon Sanderson", session=SESSION)

        self.assertEqual(len(aggregated), 1)
        self.assertEqual(aggregated[0].source, coppermind)
        titles = [r.title for r in aggregated[0].results]
        self.assertLessEqual(len(titles), 8)
        self.assertEqual(len(titles), len(set(titles)))
        self.assertEqual(
            titles,
            ["Title 0", "Title 1", "Title 2", "Title 3", "Title 4", "Brandon Sanderson", "Cosmere"],
        )
        self.assertEqual(client.search_calls, [("The Way of Kings", 5), ("Brandon Sanderson", 3)])
        self.assertEqual(client.sessions, [SESSION, SESSION])

    async def test_results_are_capped_per_source(self):
        coppermind = get_source("coppermind")
        client = FakeWikiClient(
            searches={
                "Mistborn": [make_result(f"T{i}") for i in range(5)],
                "Brandon Sanderson": [make_result(f"A{i}") for i in range(5)],
            }
        )
        service = make_service(
            {"coppermind": client},
            sources=(coppermind,),
            config=AggregationConfig(max_results_per_source=8),
        )

        aggregated = await service.search_for_book("Mistborn", "Brandon Sanderson", session=SESSION)

        self.assertEqual(len(aggregated[0].results), 8)
        self.assertEqual(aggregated[0].results[-1].title, "A2")

    async def test_sources_ordered_by_quality_and_failures_skipped(self):
        coppermind = FakeWikiClient(searches={"Brandon Sanderson": [make_result("Hoid")]})
        wot = FakeWikiClient(search_error=WikiRequestError("down", status=503, source_id="wot-wiki"))
        service = make_service({"coppermind": coppermind, "wot-wiki": wot})

        aggregated = await service.search_for_book("Anything", "Brandon Sanderson", session=SESSION)

        self.assertEqual([a.source.id for a in aggregated], ["coppermind"])
        self.assertEqual(len(wot.search_calls), 1)

    async def test_unexpected_error_is_isolated(self):
        coppermind = FakeWikiClient(search_error=KeyError("parse"))
        wot = FakeWikiClient(searches={"Brandon Sanderson": [make_result("Rand")]})
        service = make_service({"coppermind": coppermind, "wot-wiki": wot})

        aggregated = await service.search_for_book("Anything", "Brandon Sanderson", session=SESSION)

        self.assertEqual([a.source.id for a in aggregated], ["wot-wiki"])

    async def test_sources_without_results_are_omitted(self):
        coppermind = FakeWikiClient()
        wot = FakeWikiClient()
        service = make_service({"coppermind": coppermind, "wot-wiki": wot})

        aggregated = await service.search_for_book("Anything", "Brandon Sanderson", session=SESSION)

        self.assertEqual(aggregated, [])
        self.assertTrue(all(len(a.results) > 0 for a in aggregated))

    async def test_no_relevant_sources_makes_no_requests(self):
        sleep = AsyncMock()
        service = make_service({}, sleep=sleep)

        aggregated = await service.search_for_book("Dune", "Frank Herbert", session=SESSION)

        self.assertEqual(aggregated, [])
        sleep.assert_not_awaited()

    async def test_blank_title_or_author_skips_search(self):
        sleep = AsyncMock()
        coppermind = FakeWikiClient(searches={"Brandon Sanderson": [make_result("Hoid")]})
        wot = FakeWikiClient()
        service = make_service({"coppermind": coppermind, "wot-wiki": wot}, sleep=sleep)

        self.assertEqual(await service.search_for_book("", "Brandon Sanderson", session=SESSION), [])
        self.assertEqual(await service.search_for_book("Mistborn", "   ", session=SESSION), [])

        self.assertEqual(coppermind.search_calls, [])
        self.assertEqual(wot.search_calls, [])
        sleep.assert_not_awaited()

    async def test_pacing_sleeps_between_sources(self):
        sleep = AsyncMock()
        clients = {"coppermind": FakeWikiClient(), "wot-wiki": FakeWikiClient()}
        service = make_service(
            clients,
            sleep=sleep,
            config=AggregationConfig(request_delay_seconds=1.0),
        )

        await service.search_for_book("Anything", "Brandon Sanderson", session=SESSION)

        sleep.assert_awaited_once_with(1.0)

    async def test_cancellation_stops_at_source_boundary(self):
        token = CancellationToken()
        coppermind = FakeWikiClient(searches={"Brandon Sanderson": [make_result("Hoid")]})
        wot = FakeWikiClient(searches={"Brandon Sanderson": [make_result("Rand")]})

        async def cancel_during_pause(_delay):
            token.cancel()

        service = make_service({"coppermind": coppermind, "wot-wiki": wot}, sleep=cancel_during_pause)

        aggregated = await service.search_for_book(
            "Anything",
            "Brandon Sanderson",
            session=SESSION,
            cancel_token=token,
        )

        self.assertEqual([a.source.id for a in aggregated], ["coppermind"])
        self.assertEqual(wot.search_calls, [])

    async def test_opens_own_session_when_none_given(self):
        coppermind = get_source("coppermind")
        client = FakeWikiClient(searches={"Mistborn": [make_result("Vin")]})
        service = make_service({"coppermind": client}, sources=(coppermind,))

        aggregated = await service.search_for_book("Mistborn", "Brandon Sanderson")

        self.assertEqual(len(aggregated), 1)
        self.assertIsNotNone(client.sessions[0])
        self.assertIsNot(client.sessions[0], SESSION)


class GetCharacterInfoTests(unittest.IsolatedAsyncioTestCase):
    async def test_failed_source_records_null_page(self):
        coppermind = get_source("coppermind")
        wot = get_source("wot-wiki")
        clients = {
            "coppermind": FakeWikiClient(pages={"Kaladin": make_page("Kaladin")}),
            "wot-wiki": FakeWikiClient(page_error=WikiRequestError("boom", status=500, source_id="wot-wiki")),
        }
        service = make_service(clients)

        lookups = await service.get_character_info("Kaladin", [coppermind, wot], session=SESSION)

        self.assertEqual(len(lookups), 2)
        self.assertEqual(lookups[0].source, coppermind)
        self.assertEqual(lookups[0].page.title, "Kaladin")
        self.assertEqual(lookups[1].source, wot)
        self.assertIsNone(lookups[1].page)

    async def test_missing_pages_keep_one_entry_per_source(self):
        sources = [get_source("coppermind"), get_source("awoiaf"), get_source("witcher-wiki")]
        clients = {source.id: FakeWikiClient() for source in sources}
        sleep = AsyncMock()
        service = make_service(clients, sleep=sleep)

        lookups = await service.get_character_info("Nobody", sources, session=SESSION)

        self.assertEqual([lookup.source.id for lookup in lookups], ["coppermind", "awoiaf", "witcher-wiki"])
        self.assertTrue(all(lookup.page is None for lookup in lookups))
        self.assertEqual(sleep.await_count, 2)

    async def test_unexpected_error_records_null_page(self):
        coppermind = get_source("coppermind")
        service = make_service({"coppermind": FakeWikiClient(page_error=ValueError("bad"))})

        lookups = await service.get_character_info("Kaladin", [coppermind], session=SESSION)

        self.assertEqual(len(lookups), 1)
        self.assertIsNone(lookups[0].page)

    async def test_cancelled_before_start_returns_nothing(self):
        token = CancellationToken()
        token.cancel()
        client = FakeWikiClient()
        service = make_service({"coppermind": client})

        lookups = await service.get_character_info(
            "Kaladin",
            [get_source("coppermind")],
            session=SESSION,
            cancel_token=token,
        )

        self.assertEqual(lookups, [])
        self.assertEqual(client.page_calls, [])

    async def test_clients_are_cached_per_source(self):
        created: list[str] = []
        client = FakeWikiClient()

        def factory(source):
            created.append(source.id)
            return client

        service = WikiAggregationService(client_factory=factory, sleep=AsyncMock())
        coppermind = get_source("coppermind")

        await service.get_character_info("A", [coppermind], session=SESSION)
        await service.get_character_info("B", [coppermind], session=SESSION)

        self.assertEqual(created, ["coppermind"])


if __name__ == "__main__":
    unittest.main()
