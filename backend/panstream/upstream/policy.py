"""Retry policy and tagged fetch outcomes for upstream calls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Union

if TYPE_CHECKING:
    from backend.panstream.core.config import Settings

RETRYABLE_STATUS_CODES = frozenset({429})


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Per-call bounds: attempt timeout, attempt budget and linear backoff base (seconds)."""

    timeout: float = 9.0
    max_attempts: int = 3
    backoff_base: float = 0.35
    retry_client_errors: bool = False

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("RetryPolicy timeout must be positive")
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy max_attempts must be at least 1")
        if self.backoff_base < 0:
            raise ValueError("RetryPolicy backoff_base cannot be negative")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RetryPolicy":
        return cls(
            timeout=settings.upstream_timeout_seconds,
            max_attempts=settings.upstream_max_attempts,
            backoff_base=settings.upstream_backoff_seconds,
            retry_client_errors=settings.upstream_retry_client_errors,
        )


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    HTTP_STATUS = "http_status"


@dataclass(slots=True)
class FetchSuccess:
    body: Any
    attempts: int = 1
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True)
class FetchFailure:
    kind: FailureKind
    attempts: int = 1
    status_code: Optional[int] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return False

    @property
    def transient(self) -> bool:
        """Timeouts, network errors, 5xx and 429 are worth another attempt."""
        if self.kind is not FailureKind.HTTP_STATUS:
            return True
        code = self.status_code or 0
        return code >= 500 or code in RETRYABLE_STATUS_CODES

    def describe(self) -> str:
        if self.kind is FailureKind.HTTP_STATUS:
            return f"upstream returned HTTP {self.status_code} after {self.attempts} attempt(s)"
        return f"upstream {self.kind.value} after {self.attempts} attempt(s): {self.message}"


FetchOutcome = Union[FetchSuccess, FetchFailure]


def should_retry(outcome: FetchOutcome, policy: RetryPolicy) -> bool:
    """Retryability is decided once per attempt from the tagged outcome."""
    if outcome.ok:
        return False
    if policy.retry_client_errors:
        return True
    return outcome.transient
