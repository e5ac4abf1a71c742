"""Periodic ingestion timer, run inside the API process or from the CLI."""

import asyncio
import logging

from docketwatch.core.exceptions import IngestionRunError
from docketwatch.ingest.orchestrator import IngestionOrchestrator
from docketwatch.ingest.triggers import TriggerSource, trigger_ingestion
from docketwatch.settings import INGEST_INTERVAL_MINUTES

logger = logging.getLogger(__name__)


async def run_scheduler(
    interval_minutes: float = INGEST_INTERVAL_MINUTES,
    orchestrator: IngestionOrchestrator | None = None,
    max_runs: int | None = None,
) -> int:
    """Trigger a scheduled ingestion every ``interval_minutes`` until cancelled.

    A failed tick is logged and the loop carries on; the next tick is the retry.

    Args:
        interval_minutes: Minutes between the start of one run and the next
        orchestrator: Shared orchestrator (built per run when omitted)
        max_runs: Stop after this many runs (None runs forever)

    Returns:
        Number of runs started
    """
    interval = interval_minutes * 60
    runs = 0
    logger.info(f"Scheduler started, running ingestion every {interval_minutes} minutes")

    while max_runs is None or runs < max_runs:
        loop = asyncio.get_running_loop()
        started = loop.time()
        runs += 1

        try:
            await trigger_ingestion(TriggerSource.SCHEDULED, orchestrator)
        except IngestionRunError as e:
            logger.error(f"Scheduled run {runs} failed: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in scheduled run {runs}: {e}", exc_info=True)

        if max_runs is not None and runs >= max_runs:
            break

        await asyncio.sleep(max(0.0, interval - (loop.time() - started)))

    return runs
