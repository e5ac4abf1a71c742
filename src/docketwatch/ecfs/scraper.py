import logging
from datetime import date

import httpx

from docketwatch.core.exceptions import RateLimitException
from docketwatch.core.http import HttpClient
from docketwatch.ecfs.models import DocketInfo, FetchStatus, FilingPage
from docketwatch.ecfs.parser import parse_docket_info
from docketwatch.settings import (
    ECFS_API_BASE_URL,
    ECFS_MAX_RETRIES,
    ECFS_PAGE_SIZE,
    ECFS_TIMEOUT_SECONDS,
    FCC_API_KEY,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


class EcfsClient:
    """Client for the FCC ECFS public filings API.

    Never raises for transport or HTTP failures: every outcome is folded into a
    FilingPage so one unavailable docket cannot take down a run.
    """

    def __init__(
        self,
        api_key: str = FCC_API_KEY,
        base_url: str = ECFS_API_BASE_URL,
        page_size: int = ECFS_PAGE_SIZE,
        http_client: HttpClient | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.http_client = http_client or HttpClient(
            max_retries=ECFS_MAX_RETRIES,
            timeout=ECFS_TIMEOUT_SECONDS,
            user_agent=USER_AGENT,
        )

    def _filings_params(self, docket_number: str, since_date: date | None) -> dict[str, str]:
        params = {
            "proceedings.name": docket_number,
            "limit": str(self.page_size),
            "sort": "date_disseminated,DESC",
            "api_key": self.api_key,
        }
        if since_date:
            params["date_disseminated"] = f">={since_date.isoformat()}"
        return params

    async def fetch_filings(self, docket_number: str, since_date: date | None = None) -> FilingPage:
        """Fetch the newest page of filings for a docket.

        Args:
            docket_number: Docket identifier, e.g. "17-108"
            since_date: Inclusive lower bound on the dissemination date

        Returns:
            A FilingPage; empty with status RATE_LIMITED on 429, empty with
            status ERROR on any other failure
        """
        url = f"{self.base_url}/filings"
        params = self._filings_params(docket_number, since_date)
        logger.debug(f"Requesting filings for docket {docket_number} since {since_date}")

        try:
            response = await self.http_client.get(url, params=params)
            data = response.json()
        except RateLimitException:
            logger.info(
                f"Rate limited for docket {docket_number}; treating as no new filings",
                extra={"event_type": "rate_limit", "docket_number": docket_number},
            )
            return FilingPage(
                docket_number=docket_number, status=FetchStatus.RATE_LIMITED, http_status=429
            )
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.warning(
                f"FCC API error for docket {docket_number}: {status_code}",
                extra={"docket_number": docket_number, "status_code": status_code},
            )
            return FilingPage(
                docket_number=docket_number,
                status=FetchStatus.ERROR,
                http_status=status_code,
                error=f"FCC API returned HTTP {status_code}",
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"Network error for docket {docket_number}: {e}",
                extra={"docket_number": docket_number, "error_type": type(e).__name__},
            )
            return FilingPage(
                docket_number=docket_number,
                status=FetchStatus.ERROR,
                error=f"{type(e).__name__}: {e}",
            )

        filings = []
        if isinstance(data, dict):
            # The ECFS API returns filings under "filings" or "filing"
            filings = data.get("filings") or data.get("filing") or []
        filings = [f for f in filings if isinstance(f, dict)][: self.page_size]

        logger.info(
            f"Found {len(filings)} filings for docket {docket_number}",
            extra={"docket_number": docket_number, "found_count": len(filings)},
        )
        return FilingPage(
            docket_number=docket_number, filings=filings, http_status=response.status_code
        )

    async def fetch_docket_info(self, docket_number: str) -> DocketInfo | None:
        """Look up authoritative proceeding metadata, or None if unavailable."""
        url = f"{self.base_url}/proceedings"
        params = {"proceedings.name": docket_number, "api_key": self.api_key}

        try:
            response = await self.http_client.get(url, params=params)
            data = response.json()
        except (RateLimitException, httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"Could not fetch docket info for {docket_number}: {e}",
                extra={"docket_number": docket_number},
            )
            return None

        proceedings = data.get("proceedings") if isinstance(data, dict) else None
        if not proceedings or not isinstance(proceedings[0], dict):
            logger.info(f"No proceeding found for docket {docket_number}")
            return None

        return parse_docket_info(proceedings[0], docket_number)

    async def aclose(self) -> None:
        await self.http_client.aclose()
