"""Orchestrator for the docket ingestion pipeline.

One run walks the actively watched dockets in order:
    1. Refresh placeholder docket metadata (optional)
    2. Fetch filings since the docket's cursor
    3. Drive each filing through normalize -> dedup -> summarize -> store
    4. Pause before the next docket

Failures are recovered as close to their origin as possible: a filing error
abandons that filing, a docket error skips the rest of that docket, and only a
store that cannot be read at the start of a run stops the run.
"""

import asyncio
import logging

from docketwatch.core.exceptions import FilingParsingError, IngestionRunError
from docketwatch.core.rate_limiter import Pacer
from docketwatch.core.utils import cursor_to_since_date, utc_now
from docketwatch.ecfs.models import Docket, DocketStatus, Filing, FetchStatus, ProcessingStatus
from docketwatch.ecfs.parser import FilingParser
from docketwatch.ecfs.scraper import EcfsClient
from docketwatch.ingest.state import (
    Abandoned,
    Discovered,
    Normalized,
    RunSummary,
    Skipped,
    Stored,
    Summarized,
)
from docketwatch.processing.filing_summaries import SummaryGenerator
from docketwatch.settings import (
    ECFS_PAGE_SIZE,
    INGEST_DOCKET_DELAY_SECONDS,
    INGEST_FILING_DELAY_SECONDS,
    INGEST_RUN_TIMEOUT_SECONDS,
    REFRESH_DOCKET_METADATA,
)
from docketwatch.store import DocketStore, get_docket_store

logger = logging.getLogger(__name__)


class IngestionOrchestrator:
    """Runs ingestion sweeps over every actively watched docket."""

    def __init__(
        self,
        store: DocketStore,
        source: EcfsClient,
        summarizer: SummaryGenerator,
        parser: FilingParser | None = None,
        pacer: Pacer | None = None,
        run_timeout: float | None = INGEST_RUN_TIMEOUT_SECONDS,
        refresh_metadata: bool = REFRESH_DOCKET_METADATA,
    ):
        self.store = store
        self.source = source
        self.summarizer = summarizer
        self.parser = parser or FilingParser()
        self.pacer = pacer or Pacer(
            filing_delay=INGEST_FILING_DELAY_SECONDS,
            docket_delay=INGEST_DOCKET_DELAY_SECONDS,
        )
        self.run_timeout = run_timeout
        self.refresh_metadata = refresh_metadata

    def run_deadline(self, docket_count: int) -> float:
        """Seconds a run over ``docket_count`` dockets may take before it is stopped."""
        if self.run_timeout is not None:
            return self.run_timeout

        page_size = getattr(self.source, "page_size", ECFS_PAGE_SIZE)
        pacing = self.pacer.budget_for(docket_count, page_size)
        summarizing = (
            docket_count
            * page_size
            * getattr(self.summarizer, "max_documents", 1)
            * getattr(self.summarizer, "timeout", 0)
        )
        # Floor so an empty sweep still has time to talk to the store
        return max(pacing + summarizing, 60.0)

    async def run(self) -> RunSummary:
        """Run one ingestion sweep.

        Returns:
            The run summary, including when the run deadline was hit

        Raises:
            IngestionRunError: If the active docket list cannot be read
        """
        summary = RunSummary(started_at=utc_now())
        logger.info("Starting ingestion run", extra={"event_type": "run_started"})

        try:
            await self.store.initialize()
            dockets = await self.store.list_active_dockets()
        except Exception as e:
            summary.add_error("run", f"Could not load active dockets: {e}")
            summary.finish()
            logger.error(
                f"Ingestion run aborted, docket store unavailable: {e}",
                exc_info=True,
                extra={"event_type": "run_failed"},
            )
            raise IngestionRunError(f"Docket store unavailable: {e}", summary=summary) from e

        summary.dockets_considered = len(dockets)
        deadline = self.run_deadline(len(dockets))
        logger.info(
            f"Found {len(dockets)} actively watched dockets",
            extra={"docket_count": len(dockets), "deadline_seconds": deadline},
        )

        try:
            await asyncio.wait_for(self._process_dockets(dockets, summary), timeout=deadline)
        except asyncio.TimeoutError:
            summary.timed_out = True
            summary.add_error("run", f"Run deadline of {deadline:.0f}s exceeded")
            logger.error(
                f"Ingestion run stopped after exceeding its {deadline:.0f}s deadline",
                extra={"event_type": "run_timeout"},
            )

        summary.finish()
        logger.info(
            f"Ingestion run complete: {summary.log_line()} in {summary.duration_seconds}s",
            extra={
                "event_type": "run_complete",
                "filings_stored": summary.filings_stored,
                "filings_skipped": summary.filings_skipped,
                "error_count": len(summary.errors),
            },
        )
        return summary

    async def _process_dockets(self, dockets: list[Docket], summary: RunSummary) -> None:
        for index, docket in enumerate(dockets):
            if index > 0:
                await self.pacer.between_dockets()

            try:
                await self.process_docket(docket, summary)
            except Exception as e:
                summary.add_error("docket", str(e), docket_number=docket.docket_number)
                logger.error(
                    f"Error processing docket {docket.docket_number}: {e}",
                    exc_info=True,
                    extra={"docket_number": docket.docket_number, "error_type": type(e).__name__},
                )

    async def process_docket(self, docket: Docket, summary: RunSummary) -> None:
        """Ingest new filings for one docket, recording progress on ``summary``.

        Raises:
            Exception: Any docket-level failure (store read, normalization
                contract violation); the caller records it and moves on
        """
        if self.refresh_metadata and docket.status == DocketStatus.UNKNOWN:
            docket = await self.refresh_docket(docket)

        latest = await self.store.get_latest_filed_at(docket.docket_number)
        since_date = cursor_to_since_date(latest)
        logger.info(
            f"Processing docket {docket.docket_number} since {since_date or 'the beginning'}",
            extra={"docket_number": docket.docket_number},
        )

        page = await self.source.fetch_filings(docket.docket_number, since_date)
        if page.status == FetchStatus.RATE_LIMITED:
            return
        if page.failed:
            summary.add_error(
                "docket",
                page.error or "Filing fetch failed",
                docket_number=docket.docket_number,
            )
            return

        new_count = 0
        for position, raw in enumerate(page.filings):
            state = await self.process_filing(docket, raw, summary, position)
            if isinstance(state, Stored):
                new_count += 1
                await self.pacer.after_filing()

        logger.info(
            f"Docket {docket.docket_number}: {new_count} new of {len(page.filings)} fetched",
            extra={
                "docket_number": docket.docket_number,
                "new_count": new_count,
                "found_count": len(page.filings),
            },
        )

    async def process_filing(
        self, docket: Docket, raw: dict, summary: RunSummary, position: int = 0
    ) -> Skipped | Stored | Abandoned:
        """Drive one raw filing to a terminal state.

        A normalization contract violation (FilingParsingError) is re-raised so
        the whole docket is skipped; every other failure abandons just this filing.
        """
        discovered = Discovered(docket_number=docket.docket_number, raw=raw)
        key = discovered.filing_id or f"{docket.docket_number}#{position}"
        summary.record(key, discovered)

        try:
            normalized = Normalized(draft=self.parser.parse_content(raw))
        except FilingParsingError:
            raise
        except Exception as e:
            return self._abandon(key, discovered.filing_id, docket, e, summary)
        summary.record(key, normalized)

        try:
            if await self.store.get_filing(normalized.filing_id) is not None:
                state = Skipped(filing_id=normalized.filing_id)
                summary.record(key, state)
                logger.debug(f"Filing {normalized.filing_id} already stored, skipping")
                return state

            summary_text = await self.summarizer.summarize(
                normalized.draft.document_urls, normalized.draft.title
            )
            summarized = Summarized(draft=normalized.draft, summary=summary_text)
            summary.record(key, summarized)

            now = utc_now()
            filing = await self.store.insert_filing(
                Filing.from_draft(
                    summarized.draft,
                    docket_id=docket.id,
                    fetched_at=now,
                    summary=summarized.summary,
                    summary_generated_at=now,
                    processing_status=ProcessingStatus.PROCESSED,
                )
            )
        except Exception as e:
            return self._abandon(key, normalized.filing_id, docket, e, summary)

        state = Stored(filing=filing)
        summary.record(key, state)
        logger.info(
            f"Stored filing {filing.fcc_filing_id} for docket {docket.docket_number}",
            extra={"docket_number": docket.docket_number, "filing_id": filing.fcc_filing_id},
        )
        return state

    def _abandon(
        self,
        key: str,
        filing_id: str | None,
        docket: Docket,
        error: Exception,
        summary: RunSummary,
    ) -> Abandoned:
        state = Abandoned(filing_id=filing_id, reason=f"{type(error).__name__}: {error}")
        summary.record(key, state, docket_number=docket.docket_number)
        logger.error(
            f"Error processing filing {filing_id or key}: {error}",
            exc_info=error,
            extra={"docket_number": docket.docket_number, "filing_id": filing_id},
        )
        return state

    async def refresh_docket(self, docket: Docket) -> Docket:
        """Replace placeholder metadata with the FCC's; keep the docket as-is on failure."""
        try:
            info = await self.source.fetch_docket_info(docket.docket_number)
            if info is None:
                return docket
            refreshed = await self.store.upsert_docket(info)
        except Exception as e:
            logger.warning(
                f"Could not refresh metadata for docket {docket.docket_number}: {e}",
                extra={"docket_number": docket.docket_number},
            )
            return docket

        logger.info(
            f"Refreshed metadata for docket {docket.docket_number}: {refreshed.title}",
            extra={"docket_number": docket.docket_number, "status": refreshed.status.value},
        )
        return refreshed

    async def aclose(self) -> None:
        await self.source.aclose()
        await self.summarizer.aclose()


def build_orchestrator(store: DocketStore | None = None) -> IngestionOrchestrator:
    """Wire an orchestrator from settings."""
    return IngestionOrchestrator(
        store=store or get_docket_store(),
        source=EcfsClient(),
        summarizer=SummaryGenerator(),
    )
