import logging
from typing import Any, Optional, Type

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from docketwatch.core.exceptions import RateLimitException
from docketwatch.core.rate_limiter import RateLimitTracker, rate_limit_tracker

logger = logging.getLogger(__name__)


class HttpClient:
    """An async HTTP client that surfaces rate limits and optionally retries transport errors."""

    def __init__(
        self,
        max_retries: int = 0,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        timeout: float = 30,
        user_agent: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        retry_exceptions: Optional[tuple[Type[Exception], ...]] = None,
        rate_limiter: Optional[RateLimitTracker] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            max_retries: Retries after the first attempt (0 disables retrying)
            initial_delay: Initial delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            timeout: Default timeout for requests
            user_agent: User-Agent header sent with every request
            client: Optional httpx.AsyncClient to use (tests pass one with a MockTransport)
            retry_exceptions: Exceptions to retry on. Defaults to transport errors only;
                rate limits are never retried
            rate_limiter: Tracker that records 429 responses. Defaults to the
                process-wide tracker reported by the health check
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.rate_limiter = rate_limiter if rate_limiter is not None else rate_limit_tracker
        self.retry_exceptions = retry_exceptions or (httpx.TransportError,)

        headers = {"User-Agent": user_agent} if user_agent else None
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(
                multiplier=self.initial_delay,
                min=self.initial_delay,
                max=self.max_delay,
            ),
            retry=retry_if_exception_type(self.retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _make_request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self.client.request(method, url, timeout=self.timeout, **kwargs)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry_after = int(retry_after) if retry_after else None
            except ValueError:
                retry_after = None

            self.rate_limiter.record_rate_limit(url, retry_after)
            logger.warning(
                f"Rate limited: {url}",
                extra={
                    "event_type": "rate_limit",
                    "url": url,
                    "retry_after": retry_after,
                    "status_code": 429,
                },
            )
            raise RateLimitException(f"Rate limited on {url}", retry_after)

        response.raise_for_status()
        return response

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Make an HTTP request.

        Raises:
            RateLimitException: On HTTP 429
            httpx.HTTPStatusError: On any other non-2xx response
            httpx.TransportError: If the request could not be completed
        """
        if self.max_retries <= 0:
            return await self._make_request(method, url, **kwargs)

        async for attempt in self._retrying():
            with attempt:
                return await self._make_request(method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
