import io
import json
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from src.lore.cli import main
from src.lore.domain.models import AggregatedResult, CharacterLookup, SearchResult
from src.lore.domain.registry import get_source


def _result(title: str, snippet: str) -> SearchResult:
    return SearchResult(title=title, snippet=snippet, size=1, wordcount=1, timestamp="", url="")


AGGREGATED = [
    AggregatedResult(
        source=get_source("coppermind"),
        results=(
            _result("Allomancy", "a sorcery of metals"),
            _result("Sadeas", "Highprince Sadeas was killed"),
        ),
    )
]


def _run(argv: list[str]):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        code = main(argv)
    return code, json.loads(buffer.getvalue())


class CliTests(unittest.TestCase):
    def test_sources_lists_relevant_wikis(self):
        code, payload = _run(["sources", "The Hobbit", "J.R.R. Tolkien"])
        self.assertEqual(code, 0)
        self.assertEqual([s["id"] for s in payload], ["tolkien-gateway"])

    def test_search_prints_aggregations(self):
        with patch("src.lore.cli.api.search_for_book", return_value=AGGREGATED) as search:
            _, payload = _run(["search", "Mistborn", "Brandon Sanderson"])

        search.assert_called_once_with("Mistborn", "Brandon Sanderson")
        self.assertEqual(payload[0]["source"]["id"], "coppermind")
        self.assertEqual(len(payload[0]["results"]), 2)

    def test_search_with_filter_prints_flat_results(self):
        with patch("src.lore.cli.api.search_for_book", return_value=AGGREGATED):
            _, payload = _run(
                ["search", "Mistborn", "Brandon Sanderson", "--spoiler-level", "none", "--content-type", "magic"]
            )

        self.assertEqual([r["title"] for r in payload], ["Allomancy"])

    def test_search_primary(self):
        with patch("src.lore.cli.api.search_for_book", return_value=AGGREGATED):
            _, payload = _run(["search", "Mistborn", "Brandon Sanderson", "--primary"])

        self.assertEqual([s["id"] for s in payload["sources"]], ["coppermind"])
        self.assertEqual(len(payload["results"]), 2)

    def test_search_characters_prints_suggestions(self):
        with patch("src.lore.cli.api.search_for_book", return_value=AGGREGATED):
            _, payload = _run(["search", "Mistborn", "Brandon Sanderson", "--characters"])

        self.assertEqual(payload, ["Sadeas"])

    def test_character_passes_sources(self):
        lookups = [CharacterLookup(source=get_source("coppermind"), page=None)]
        with patch("src.lore.cli.api.get_character_info", return_value=lookups) as lookup:
            _, payload = _run(["character", "Vin", "--source", "coppermind"])

        lookup.assert_called_once_with("Vin", ["coppermind"], book_title=None, author=None)
        self.assertEqual(payload, [{"source": get_source("coppermind").to_dict(), "page": None}])

    def test_unknown_source_is_rejected(self):
        with redirect_stdout(io.StringIO()), patch("sys.stderr", new=io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["character", "Vin", "--source", "nope"])


if __name__ == "__main__":
    unittest.main()
