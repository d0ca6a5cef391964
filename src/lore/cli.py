import argparse
import json
import sys
from typing import Any, Sequence

from src.lore import api
from src.lore.application.content_filter import filter_results
from src.lore.application.selection import select_primary, suggest_characters
from src.lore.domain.models import ContentFilterPolicy
from src.lore.domain.registry import FANTASY_WIKIS, find_relevant_sources
from src.lore.domain.types import CONTENT_TYPES, SPOILER_LEVELS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.lore",
        description="Look up fantasy book lore on public wikis",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sources_parser = subparsers.add_parser("sources", help="List wikis relevant to a book")
    sources_parser.add_argument("title")
    sources_parser.add_argument("author")

    search_parser = subparsers.add_parser("search", help="Search relevant wikis for a book")
    search_parser.add_argument("title")
    search_parser.add_argument("author")
    search_parser.add_argument(
        "--spoiler-level",
        choices=SPOILER_LEVELS,
        help="Filter results with this spoiler tolerance",
    )
    search_parser.add_argument(
        "--content-type",
        action="append",
        choices=CONTENT_TYPES,
        dest="content_types",
        help="Content type of interest (repeatable; default all)",
    )
    search_parser.add_argument(
        "--primary",
        action="store_true",
        help="Only print the auto-selected top wiki and its leading results",
    )
    search_parser.add_argument(
        "--characters",
        action="store_true",
        help="Only print result titles that look like characters",
    )

    character_parser = subparsers.add_parser("character", help="Fetch a character page from wikis")
    character_parser.add_argument("name")
    character_parser.add_argument(
        "--source",
        action="append",
        dest="sources",
        choices=[source.id for source in FANTASY_WIKIS],
        help="Wiki id to query (repeatable)",
    )
    character_parser.add_argument("--title", help="Book title used to pick relevant wikis")
    character_parser.add_argument("--author", help="Author used to pick relevant wikis")
    return parser


def run(args: argparse.Namespace) -> Any:
    if args.command == "sources":
        return [source.to_dict() for source in find_relevant_sources(args.title, args.author)]

    if args.command == "search":
        aggregated = api.search_for_book(args.title, args.author)
        if args.characters:
            return suggest_characters(aggregated)
        if args.primary:
            sources, results = select_primary(aggregated)
            return {
                "sources": [source.to_dict() for source in sources],
                "results": [result.to_dict() for result in results],
            }
        if args.spoiler_level or args.content_types:
            policy = ContentFilterPolicy(
                spoiler_level=args.spoiler_level or "none",
                content_types=tuple(args.content_types or CONTENT_TYPES),
            )
            return [result.to_dict() for result in filter_results(aggregated, policy)]
        return [bundle.to_dict() for bundle in aggregated]

    lookups = api.get_character_info(
        args.name,
        args.sources,
        book_title=args.title,
        author=args.author,
    )
    return [lookup.to_dict() for lookup in lookups]


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    payload = run(args)
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0
