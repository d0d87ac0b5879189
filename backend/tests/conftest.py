"""Shared fixtures: settings pointed at a fake upstream and a client factory over MockTransport."""

from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from backend.panstream.core.config import Settings
from backend.panstream.upstream import UpstreamClient

UPSTREAM_BASE_URL = "https://upstream.test/api/dramabox"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        upstream_base_url=UPSTREAM_BASE_URL,
        upstream_timeout_seconds=1.0,
        upstream_max_attempts=3,
        upstream_backoff_seconds=0.35,
    )


@pytest.fixture
def sleep_calls() -> List[float]:
    return []


@pytest.fixture
def make_client(settings: Settings, sleep_calls: List[float]) -> Callable[..., UpstreamClient]:
    """Build an UpstreamClient whose requests are answered by ``handler`` and whose backoff is recorded."""

    async def recording_sleep(delay: float) -> None:
        sleep_calls.append(delay)

    def factory(handler, *, client_settings: Settings | None = None) -> UpstreamClient:
        return UpstreamClient(
            client_settings or settings,
            transport=httpx.MockTransport(handler),
            sleep=recording_sleep,
        )

    return factory
