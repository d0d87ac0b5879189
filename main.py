from __future__ import annotations

import argparse
import asyncio
import sys

from backend.panstream.core.config import get_settings
from backend.panstream.core.logging import configure_logging
from backend.panstream.core.orchestrator import AggregateSourceFailure, AggregationOrchestrator
from backend.panstream.models import AggregateFeed
from backend.panstream.upstream import UpstreamClient


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch PanStream page aggregates from the upstream catalog.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("home", help="Home feed: vip, latest, trending and foryou sections")
    watch = sub.add_parser("watch", help="Detail, chapters and default quality of one title")
    watch.add_argument("book_id")
    search = sub.add_parser("search", help="Search the catalog")
    search.add_argument("query", nargs="+")
    return parser.parse_args(argv)


def print_feed(feed: AggregateFeed) -> None:
    for name, cards in feed.sections.items():
        print(f"{name} ({len(cards)})")
        for card in cards:
            print(f"  - {card.book_id}: {card.book_name}")


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    async with UpstreamClient(settings) as client:
        orchestrator = AggregationOrchestrator(client, page_size=settings.feed_page_size)
        try:
            if args.command == "home":
                print_feed(await orchestrator.home_feed())
            elif args.command == "search":
                print_feed(await orchestrator.search(" ".join(args.query)))
            else:
                title = await orchestrator.title_detail(args.book_id)
                print(f"{title.drama.book_id}: {title.drama.book_name}")
                print(f"  Chapters: {len(title.chapters)}")
                qualities = ", ".join(str(option.quality) for option in title.qualities) or "none"
                print(f"  Qualities: {qualities}")
                default = title.default_quality.quality if title.default_quality else "none"
                print(f"  Default quality: {default}")
        except AggregateSourceFailure as exc:
            print(f"Upstream unavailable: {exc}", file=sys.stderr)
            return 1
    return 0


def main() -> int:
    args = parse_args(sys.argv[1:])
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_format=settings.log_json)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
