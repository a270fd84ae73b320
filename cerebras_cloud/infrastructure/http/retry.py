"""
Retry policy - decides which responses are retried and how long to wait.
Exponential backoff with jitter; a server Retry-After hint wins when present.
"""

from __future__ import annotations
import math
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, FrozenSet, Optional

# 408 timeout, 409 conflict, 429 rate limit, 5xx gateway/server errors
RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

# Upper bound on a server-supplied Retry-After wait, in seconds
MAX_RETRY_AFTER = 60.0


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior of unary requests."""
    max_retries: int = 3
    backoff_base: float = 2.0
    jitter_max: float = 1.0
    retryable_status_codes: FrozenSet[int] = field(default=RETRYABLE_STATUS_CODES)

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")

    def is_retryable_status(self, status_code: int) -> bool:
        """Transient/server-side statuses are retried; 400 and other 4xx are not."""
        return status_code in self.retryable_status_codes

    def should_retry(self, status_code: int, attempt: int) -> bool:
        """attempt is zero-based: attempt 0 is the first try."""
        if attempt >= self.max_retries:
            return False
        return self.is_retryable_status(status_code)

    def compute_backoff(self, attempt: int, rand: Callable[[], float] = random.random) -> float:
        """base**(attempt+1) seconds plus jitter in [0, jitter_max).

        The first retry waits ~2s, then ~4s, ~8s with the default base.
        """
        return self.backoff_base ** (attempt + 1) + rand() * self.jitter_max

    def next_delay(
        self,
        attempt: int,
        retry_after: Optional[str] = None,
        rand: Callable[[], float] = random.random,
    ) -> float:
        """Delay before the next attempt, preferring the server's Retry-After hint."""
        hinted = parse_retry_after(retry_after)
        if hinted is not None:
            return hinted
        return self.compute_backoff(attempt, rand)


def parse_retry_after(
    value: Optional[str],
    now: Optional[datetime] = None,
    max_delay: float = MAX_RETRY_AFTER,
) -> Optional[float]:
    """Parse a Retry-After header (delta seconds or HTTP date) into seconds.

    Returns None when the header is absent, unparseable or not a finite
    number. Dates in the past yield 0; every hint is capped at max_delay.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None:
        if not math.isfinite(seconds):
            return None
        return min(max(0.0, seconds), max_delay)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    return min(max(0.0, (when - current).total_seconds()), max_delay)
