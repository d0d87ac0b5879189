"""
Fan-out of upstream calls into page aggregates.

Each page names its sources and whether each one is essential. All calls of one aggregate
run concurrently and are joined only after every one has settled; a failing source never
cancels its siblings. Optional sources degrade to an empty section, strict ones fail the
aggregate with ``AggregateSourceFailure``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from backend.panstream.core.logging import get_logger
from backend.panstream.models import AggregateFeed, DramaCard, TitleAggregate
from backend.panstream.upstream import (
    FetchFailure,
    FetchOutcome,
    RetryPolicy,
    UpstreamClient,
    coerce_to_sequence,
    normalize_card,
    normalize_cards,
    pick_default_quality,
    unwrap_single,
)

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 18


class AggregateSourceFailure(RuntimeError):
    """Raised when a strict source ends in a terminal upstream failure."""

    def __init__(self, source_name: str, cause: FetchFailure) -> None:
        super().__init__(f"source '{source_name}' failed: {cause.describe()}")
        self.source_name = source_name
        self.cause = cause


@dataclass(frozen=True, slots=True)
class PageSource:
    name: str
    path: str
    optional: bool = False
    listing: bool = True
    params: Mapping[str, Any] = field(default_factory=dict)


HOME_SOURCES: Sequence[PageSource] = (
    PageSource("vip", "/vip"),
    PageSource("latest", "/latest"),
    PageSource("trending", "/trending"),
    PageSource("foryou", "/foryou", optional=True),
)


class AggregationOrchestrator:
    """Builds page aggregates on top of an ``UpstreamClient``."""

    def __init__(
        self,
        client: UpstreamClient,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.client = client
        self.page_size = page_size
        self.policy = policy

    async def _fetch_all(self, sources: Sequence[PageSource]) -> List[FetchOutcome]:
        results = await asyncio.gather(
            *(
                self.client.fetch(source.path, self.policy, params=source.params or None)
                for source in sources
            ),
            return_exceptions=True,
        )
        # Outcomes never carry transport errors; anything raised here is a bug and propagates.
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    def _resolve(self, source: PageSource, outcome: FetchOutcome, log) -> Optional[Any]:
        if outcome.ok:
            return outcome.body
        if source.optional:
            log.warning(
                "aggregate_source_degraded",
                source=source.name,
                kind=outcome.kind.value,
                status_code=outcome.status_code,
                attempts=outcome.attempts,
            )
            return None
        raise AggregateSourceFailure(source.name, outcome)

    async def aggregate(self, sources: Sequence[PageSource]) -> AggregateFeed:
        """Fetch every source concurrently and assemble the per-source card lists."""

        outcomes = await self._fetch_all(sources)

        sections: Dict[str, List[DramaCard]] = {}
        for source, outcome in zip(sources, outcomes):
            body = self._resolve(source, outcome, logger)
            cards = normalize_cards(coerce_to_sequence(body)) if body is not None else []
            if source.listing:
                cards = cards[: self.page_size]
            sections[source.name] = cards

        logger.info(
            "aggregate_built",
            sources=[source.name for source in sources],
            counts={name: len(cards) for name, cards in sections.items()},
        )
        return AggregateFeed(sections=sections)

    async def home_feed(self) -> AggregateFeed:
        return await self.aggregate(HOME_SOURCES)

    async def search(self, query: str) -> AggregateFeed:
        """Search results as a single uncapped ``search`` section."""
        query = (query or "").strip()
        if not query:
            return AggregateFeed(sections={"search": []})
        source = PageSource("search", "/search", listing=False, params={"query": query})
        return await self.aggregate([source])

    async def title_detail(self, book_id: str) -> TitleAggregate:
        """Watch page data; both the detail and the episode list are required."""

        log = logger.bind(book_id=book_id)

        detail_source = PageSource("detail", "/detail", listing=False, params={"bookId": book_id})
        episodes_source = PageSource("allepisode", "/allepisode", listing=False, params={"bookId": book_id})
        detail_outcome, episodes_outcome = await self._fetch_all([detail_source, episodes_source])

        detail_body = self._resolve(detail_source, detail_outcome, log)
        episodes_body = self._resolve(episodes_source, episodes_outcome, log)

        detail = unwrap_single(detail_body)
        drama = normalize_card(detail) or DramaCard()
        chapters = coerce_to_sequence(episodes_body)
        selection = pick_default_quality(drama.cdn_list)

        log.info(
            "title_detail_built",
            chapter_count=len(chapters),
            quality_count=len(selection.qualities),
            default_quality=selection.default.quality if selection.default else None,
        )
        return TitleAggregate(
            drama=drama,
            chapters=chapters,
            qualities=selection.qualities,
            default_quality=selection.default,
        )

    async def _passthrough(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        outcome = await self.client.fetch(path, self.policy, params=params)
        if not outcome.ok:
            raise AggregateSourceFailure(path.lstrip("/"), outcome)
        return outcome.body

    async def popular_searches(self) -> Any:
        """Suggestion terms, passed through without normalization."""
        return await self._passthrough("/populersearch")

    async def raw_search(self, query: str) -> Any:
        query = (query or "").strip()
        if not query:
            return []
        return await self._passthrough("/search", {"query": query})
