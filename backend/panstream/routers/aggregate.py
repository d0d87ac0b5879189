"""Page data endpoints backed by the aggregation orchestrator."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from backend.panstream.core.logging import get_logger, log_exception
from backend.panstream.core.orchestrator import AggregateSourceFailure, AggregationOrchestrator
from backend.panstream.models import AggregateFeed, TitleAggregate

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["aggregation"])


def get_orchestrator(request: Request) -> AggregationOrchestrator:
    return request.app.state.orchestrator


def _bad_gateway(exc: AggregateSourceFailure) -> HTTPException:
    log_exception(logger, exc, {"source": exc.source_name, "attempts": exc.cause.attempts})
    return HTTPException(status_code=502, detail=str(exc))


@router.get("/home", response_model=AggregateFeed)
async def home_feed(
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> AggregateFeed:
    try:
        return await orchestrator.home_feed()
    except AggregateSourceFailure as exc:
        raise _bad_gateway(exc) from exc


@router.get("/watch/{book_id}", response_model=TitleAggregate)
async def watch(
    book_id: str,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> TitleAggregate:
    try:
        return await orchestrator.title_detail(book_id)
    except AggregateSourceFailure as exc:
        raise _bad_gateway(exc) from exc


@router.get("/feed/search", response_model=AggregateFeed)
async def search_feed(
    q: str = Query(default=""),
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> AggregateFeed:
    try:
        return await orchestrator.search(q)
    except AggregateSourceFailure as exc:
        raise _bad_gateway(exc) from exc


@router.get("/search")
async def search_suggestions(
    q: str = Query(default=""),
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> Any:
    try:
        return await orchestrator.raw_search(q)
    except AggregateSourceFailure as exc:
        raise _bad_gateway(exc) from exc


@router.get("/populersearch")
async def popular_searches(
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
) -> Any:
    try:
        return await orchestrator.popular_searches()
    except AggregateSourceFailure as exc:
        raise _bad_gateway(exc) from exc


__all__ = ["router", "get_orchestrator"]
