"""Async HTTP client for the upstream catalog with bounded attempts and linear backoff."""

from __future__ import annotations

import asyncio
from contextlib import nullcontext
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx
from structlog.stdlib import BoundLogger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    wait_incrementing,
)

from backend.panstream.core.config import Settings, get_settings
from backend.panstream.core.logging import get_logger
from backend.panstream.upstream.policy import (
    FailureKind,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    RetryPolicy,
    should_retry,
)

SleepFunc = Callable[[float], Awaitable[None]]


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class UpstreamClient:
    """Issues GET requests against the configured upstream and never raises transport errors.

    Every call resolves to a ``FetchSuccess`` or a terminal ``FetchFailure``. Attempts are
    sequential; each one owns its own timeout, so a slow call never affects its siblings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
        logger: Optional[BoundLogger] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.default_policy = RetryPolicy.from_settings(self.settings)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.upstream_base_url,
            headers={
                "Accept": "*/*",
                "User-Agent": self.settings.upstream_user_agent,
            },
            timeout=httpx.Timeout(self.settings.upstream_timeout_seconds),
            transport=transport,
            follow_redirects=True,
        )
        self._sleep = sleep
        limit = self.settings.upstream_max_concurrency
        self._semaphore = asyncio.Semaphore(limit) if limit else None
        self._log = (logger or get_logger(__name__)).bind(upstream=self.settings.upstream_base_url)

    async def __aenter__(self) -> "UpstreamClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(
        self,
        path: str,
        policy: Optional[RetryPolicy] = None,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> FetchOutcome:
        """GET ``path`` under ``policy`` and return the tagged outcome of the logical call."""

        policy = policy or self.default_policy
        log = self._log.bind(path=path)
        outcome: Optional[FetchOutcome] = None

        def _log_retry(retry_state: RetryCallState) -> None:
            failure = retry_state.outcome.result() if retry_state.outcome else None
            log.warning(
                "upstream_fetch_retry",
                attempt=retry_state.attempt_number,
                max_attempts=policy.max_attempts,
                sleep_seconds=retry_state.next_action.sleep if retry_state.next_action else 0.0,
                error=failure.describe() if isinstance(failure, FetchFailure) else None,
            )

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(policy.max_attempts),
                wait=wait_incrementing(start=policy.backoff_base, increment=policy.backoff_base),
                retry=retry_if_result(lambda result: should_retry(result, policy)),
                before_sleep=_log_retry,
                sleep=self._sleep,
            ):
                with attempt:
                    outcome = await self._attempt(
                        path,
                        params,
                        policy,
                        attempt_number=attempt.retry_state.attempt_number,
                        log=log,
                    )
                if not attempt.retry_state.outcome.failed:
                    attempt.retry_state.set_result(outcome)
        except RetryError as exc:
            outcome = exc.last_attempt.result()

        if isinstance(outcome, FetchFailure):
            log.warning(
                "upstream_fetch_failed",
                kind=outcome.kind.value,
                status_code=outcome.status_code,
                attempts=outcome.attempts,
                error=outcome.message,
            )
        else:
            log.debug("upstream_fetch_succeeded", attempts=outcome.attempts)
        return outcome

    async def fetch_single(
        self,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> FetchOutcome:
        """Fetch one path with the configured default policy."""
        return await self.fetch(path, params=params)

    async def _attempt(
        self,
        path: str,
        params: Optional[Mapping[str, Any]],
        policy: RetryPolicy,
        *,
        attempt_number: int,
        log: BoundLogger,
    ) -> FetchOutcome:
        log.debug("upstream_fetch_attempt", attempt=attempt_number)
        # The concurrency slot is acquired before the timeout clock starts.
        async with self._semaphore or nullcontext():
            try:
                response = await asyncio.wait_for(
                    self._client.get(path, params=params, timeout=policy.timeout),
                    timeout=policy.timeout,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                return FetchFailure(
                    FailureKind.TIMEOUT,
                    attempts=attempt_number,
                    message=str(exc) or f"no response within {policy.timeout}s",
                )
            except httpx.RequestError as exc:
                return FetchFailure(
                    FailureKind.NETWORK_ERROR,
                    attempts=attempt_number,
                    message=str(exc) or type(exc).__name__,
                )

        if not response.is_success:
            return FetchFailure(
                FailureKind.HTTP_STATUS,
                attempts=attempt_number,
                status_code=response.status_code,
                message=response.reason_phrase,
            )
        return FetchSuccess(
            body=_decode_body(response),
            attempts=attempt_number,
            status_code=response.status_code,
        )
