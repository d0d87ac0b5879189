"""Upstream catalog access: resilient fetching and payload normalization."""

from .client import UpstreamClient
from .normalize import QualitySelection, normalize_card, normalize_cards, pick_default_quality
from .policy import FailureKind, FetchFailure, FetchOutcome, FetchSuccess, RetryPolicy, should_retry
from .shapes import coerce_to_sequence, unwrap_single

__all__ = [
    "UpstreamClient",
    "QualitySelection",
    "normalize_card",
    "normalize_cards",
    "pick_default_quality",
    "FailureKind",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "RetryPolicy",
    "should_retry",
    "coerce_to_sequence",
    "unwrap_single",
]
