"""Pacing and rate-limit bookkeeping for calls to third-party APIs."""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class RateLimitTracker:
    """Records rate limit responses so runs and health checks can report them.

    The tracker never delays anything itself: a 429 from the filings API means
    "nothing new this cycle" and the next scheduled run is the backoff.
    """

    def __init__(self, window_seconds: int = 3600):
        self.window_seconds = window_seconds
        self.rate_limit_events: deque[Dict[str, Any]] = deque(maxlen=100)

    def record_rate_limit(self, url: str, retry_after: Optional[int] = None) -> None:
        """Record a rate limit event."""
        self.rate_limit_events.append({"time": time.time(), "url": url, "retry_after": retry_after})

        logger.info(
            f"Rate limit recorded for {url}",
            extra={
                "event_type": "rate_limit",
                "retry_after": retry_after,
                "recent_rate_limits": self.recent_count(),
            },
        )

    def recent_count(self) -> int:
        now = time.time()
        return sum(1 for e in self.rate_limit_events if now - e["time"] < self.window_seconds)

    def get_stats(self) -> Dict[str, Any]:
        """Get current rate limit statistics."""
        last = self.rate_limit_events[-1] if self.rate_limit_events else None
        return {
            "recent_rate_limit_count": self.recent_count(),
            "last_rate_limit_at": last["time"] if last else None,
            "last_retry_after": last["retry_after"] if last else None,
        }


# Shared by every HttpClient that is not handed its own tracker
rate_limit_tracker = RateLimitTracker()


class Pacer:
    """Fixed delays that keep a sequential run under third-party rate limits.

    A delay follows every stored filing and separates consecutive dockets.
    Delays are ``asyncio.sleep`` calls, so other work on the event loop keeps
    running while a sweep is paused.
    """

    def __init__(self, filing_delay: float = 1.0, docket_delay: float = 2.0):
        """
        Initialize the pacer.

        Args:
            filing_delay: Seconds to wait after each stored filing
            docket_delay: Seconds to wait before moving on to the next docket
        """
        self.filing_delay = filing_delay
        self.docket_delay = docket_delay
        self.total_waited = 0.0

    async def after_filing(self) -> None:
        await self._sleep(self.filing_delay)

    async def between_dockets(self) -> None:
        await self._sleep(self.docket_delay)

    async def _sleep(self, delay: float) -> None:
        if delay <= 0:
            return
        logger.debug(f"Pacing delay: {delay}s")
        await asyncio.sleep(delay)
        self.total_waited += delay

    def budget_for(self, docket_count: int, filings_per_docket: int) -> float:
        """Worst-case seconds of pacing for a run over ``docket_count`` dockets."""
        return docket_count * (filings_per_docket * self.filing_delay + self.docket_delay)
