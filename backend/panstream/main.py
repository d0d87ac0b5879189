from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.panstream.core.config import get_settings
from backend.panstream.core.logging import CorrelationIDMiddleware, configure_logging, get_logger
from backend.panstream.core.orchestrator import AggregationOrchestrator
from backend.panstream.routers import aggregate_router, health_router
from backend.panstream.upstream import UpstreamClient

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the upstream client for the lifetime of the application."""
    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_format=settings.log_json)

    client = UpstreamClient(settings)
    app.state.orchestrator = AggregationOrchestrator(client, page_size=settings.feed_page_size)
    logger.info("upstream_client_started", base_url=settings.upstream_base_url)
    try:
        yield
    finally:
        await client.aclose()
        app.state.orchestrator = None


app = FastAPI(title="PanStream", version="0.1.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIDMiddleware)

app.include_router(aggregate_router)
app.include_router(health_router)
