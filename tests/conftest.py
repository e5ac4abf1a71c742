"""Shared fakes and fixtures for the docketwatch test suite."""

import asyncio
from datetime import date

import pytest

from docketwatch.core.rate_limiter import Pacer
from docketwatch.ecfs.models import DocketInfo, FetchStatus, FilingPage
from docketwatch.ingest.orchestrator import IngestionOrchestrator
from docketwatch.processing.filing_summaries import NO_DOCUMENT_SUMMARY
from docketwatch.store import InMemoryDocketStore


def make_raw_filing(
    filing_id: str | None,
    date_disseminated: str | None = "2024-03-01T14:00:00.000Z",
    attachments: list[str] | None = None,
    title: str | None = "Comments of Example Co.",
    **extra,
) -> dict:
    raw = {
        "brief_comment_text": title,
        "date_disseminated": date_disseminated,
        "filers": [{"name": "Example Co."}],
        "attachments": [{"clean_file_name": name} for name in (attachments or [])],
        **extra,
    }
    if filing_id is not None:
        raw["id_submission"] = filing_id
    return raw


class FakeSource:
    """Stands in for EcfsClient.

    ``responses`` maps a docket number to a list of raw filings, a FilingPage,
    an exception to raise, or a coroutine function to await.
    """

    page_size = 250

    def __init__(self, responses=None, docket_info=None):
        self.responses = responses or {}
        self.docket_info = docket_info or {}
        self.calls: list[tuple[str, date | None]] = []
        self.info_calls: list[str] = []
        self.closed = False

    async def fetch_filings(self, docket_number: str, since_date: date | None = None) -> FilingPage:
        self.calls.append((docket_number, since_date))
        response = self.responses.get(docket_number, [])
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return await response()
        if isinstance(response, FilingPage):
            return response
        return FilingPage(docket_number=docket_number, filings=list(response))

    async def fetch_docket_info(self, docket_number: str) -> DocketInfo | None:
        self.info_calls.append(docket_number)
        info = self.docket_info.get(docket_number)
        if isinstance(info, Exception):
            raise info
        return info

    async def aclose(self) -> None:
        self.closed = True


class FakeSummarizer:
    """Stands in for SummaryGenerator; fails for titles listed in ``fail_titles``."""

    max_documents = 2
    timeout = 0

    def __init__(self, fail_titles=()):
        self.fail_titles = set(fail_titles)
        self.calls: list[tuple[list[str], str]] = []
        self.closed = False

    async def summarize(self, document_urls: list[str], filing_title: str) -> str:
        self.calls.append((list(document_urls), filing_title))
        if filing_title in self.fail_titles:
            raise RuntimeError(f"summarizer exploded on {filing_title}")
        if not document_urls:
            return NO_DOCUMENT_SUMMARY
        return f"Summary of {filing_title}"

    async def aclose(self) -> None:
        self.closed = True


def rate_limited_page(docket_number: str) -> FilingPage:
    return FilingPage(docket_number=docket_number, status=FetchStatus.RATE_LIMITED, http_status=429)


def error_page(docket_number: str, status_code: int = 500) -> FilingPage:
    return FilingPage(
        docket_number=docket_number,
        status=FetchStatus.ERROR,
        http_status=status_code,
        error=f"FCC API returned HTTP {status_code}",
    )


async def never_returns():
    await asyncio.sleep(60)


@pytest.fixture
def raw_filing():
    return make_raw_filing


@pytest.fixture
def memory_store():
    return InMemoryDocketStore()


@pytest.fixture
def fake_summarizer():
    return FakeSummarizer()


@pytest.fixture
def make_orchestrator(memory_store, fake_summarizer):
    """Build an orchestrator over fakes with pacing disabled unless a pacer is given."""

    def _make(source, store=None, summarizer=None, pacer=None, **kwargs):
        kwargs.setdefault("refresh_metadata", False)
        kwargs.setdefault("run_timeout", 10.0)
        return IngestionOrchestrator(
            store=store or memory_store,
            source=source,
            summarizer=summarizer or fake_summarizer,
            pacer=pacer or Pacer(filing_delay=0, docket_delay=0),
            **kwargs,
        )

    return _make


@pytest.fixture
def fakes():
    """Access to the fake classes and page builders from test modules."""

    class _Fakes:
        Source = FakeSource
        Summarizer = FakeSummarizer
        rate_limited = staticmethod(rate_limited_page)
        error = staticmethod(error_page)
        hang = staticmethod(never_returns)

    return _Fakes


def seed_watched_dockets(store: InMemoryDocketStore, *docket_numbers: str, status="unknown"):
    """Create actively watched dockets directly, bypassing watch validation."""
    dockets = []
    for number in docket_numbers:
        docket = store._create_docket(docket_number=number, title=f"Docket {number}", status=status)
        store.subscriptions[("tester", number)] = True
        dockets.append(docket)
    return dockets


@pytest.fixture
def seed():
    return seed_watched_dockets
